"""Schemas for storage endpoints."""

from pydantic import Field

from src.core.schemas import ApiModel


class PdfUploadResponse(ApiModel):
    """Response after a successful PDF upload."""

    message: str = "PDF uploaded successfully"
    pdf_url: str = Field(..., description="URL path of the stored file")
    pdf_file_name: str = Field(..., description="Original file name")
    file_size: int = Field(..., description="File size in bytes")
