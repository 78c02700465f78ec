"""Router for lesson PDF uploads."""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from src.auth.dependencies import require_admin
from src.storage.dependencies import StorageServiceDep, handle_storage_error
from src.storage.schemas import PdfUploadResponse
from src.storage.service import StorageError


router = APIRouter(
    prefix="/api/admin",
    tags=["storage"],
    dependencies=[Depends(require_admin)],
)


@router.post(
    "/upload-pdf",
    response_model=PdfUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a lesson PDF",
    responses={
        400: {"description": "Missing file or not a PDF"},
        413: {"description": "File too large"},
    },
)
async def upload_pdf(
    storage: StorageServiceDep,
    pdf: UploadFile | None = File(None, description="PDF document"),
) -> PdfUploadResponse:
    """Store a PDF and return the URL to reference from a lesson."""
    if pdf is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No PDF file uploaded",
        )

    try:
        stored = await storage.save_pdf(pdf)
    except StorageError as e:
        raise handle_storage_error(e) from e
    finally:
        await pdf.close()

    return PdfUploadResponse(
        pdf_url=stored.url,
        pdf_file_name=stored.original_name,
        file_size=stored.size,
    )
