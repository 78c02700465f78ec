"""Local disk storage for lesson PDFs.

The multipart body has already been received and spooled by Starlette when
``save_pdf`` runs. The spooled upload is copied to ``{upload_dir}/{name}.part``
in chunks and renamed to its final name only after every check passed:
- declared Content-Type in the allow-list
- magic bytes of the first chunk match an allowed type
- total size within ``upload_max_pdf_size_mb``, checked against the spooled
  size when known and again while copying

A rejected upload leaves nothing behind. Stored files are served by the app
under ``upload_url_prefix``.
"""

import secrets
import time
from dataclasses import dataclass
from pathlib import Path

import structlog
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from src.config.settings import Settings
from src.utils.magic_bytes import SNIFF_LENGTH, validate_content_type


logger = structlog.get_logger(__name__)


class StorageError(Exception):
    """Base error for storage operations."""

    def __init__(self, message: str, code: str = "storage_error") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class StorageUploadError(StorageError):
    """Error while writing the file to disk."""

    def __init__(self, message: str = "Failed to store file") -> None:
        super().__init__(message, "upload_error")


class StorageValidationError(StorageError):
    """File content failed validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "validation_error")


class FileTooLargeError(StorageError):
    """File exceeds the size limit."""

    def __init__(self, max_size: int) -> None:
        message = (
            f"File exceeds maximum allowed size ({max_size / 1024 / 1024:.0f} MB)"
        )
        super().__init__(message, "file_too_large")


class InvalidContentTypeError(StorageError):
    """Declared content type is not allowed."""

    def __init__(self, message: str = "Only PDF files are allowed") -> None:
        super().__init__(message, "invalid_content_type")


@dataclass(frozen=True)
class StoredFile:
    """A file written to the upload directory."""

    file_name: str
    original_name: str
    url: str
    size: int
    content_type: str


class LocalStorageService:
    """Stores uploaded documents on the local filesystem."""

    EXTENSION_MAP: dict[str, str] = {
        "application/pdf": ".pdf",
    }

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.upload_dir = Path(settings.upload_dir)

    @property
    def max_file_size(self) -> int:
        """Maximum file size in bytes."""
        return self.settings.max_pdf_size_bytes

    @property
    def allowed_types(self) -> list[str]:
        return self.settings.upload_allowed_document_types

    def ensure_upload_dir(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    def generate_file_name(self, content_type: str) -> str:
        """``pdf-{epoch_millis}-{random}{ext}``."""
        ext = self.EXTENSION_MAP.get(content_type, "")
        prefix = ext.lstrip(".") or "file"
        return f"{prefix}-{time.time_ns() // 1_000_000}-{secrets.randbelow(10**9)}{ext}"

    def public_url(self, file_name: str) -> str:
        return f"{self.settings.upload_url_prefix.rstrip('/')}/{file_name}"

    def _check_declared_type(self, upload: UploadFile) -> str:
        declared = (upload.content_type or "").split(";")[0].strip().lower()
        if declared not in self.allowed_types:
            raise InvalidContentTypeError
        return declared

    async def save_pdf(self, upload: UploadFile) -> StoredFile:
        """Validate and store an uploaded PDF.

        Args:
            upload: Multipart file from the request.

        Returns:
            StoredFile with the generated name and public URL.

        Raises:
            InvalidContentTypeError: Declared type not allowed.
            StorageValidationError: Empty file or magic bytes mismatch.
            FileTooLargeError: File exceeds the size limit.
            StorageUploadError: Disk write failed.
        """
        declared = self._check_declared_type(upload)

        if upload.size is not None and upload.size > self.max_file_size:
            raise FileTooLargeError(self.max_file_size)

        first_chunk = await upload.read(self.settings.upload_chunk_size)
        if not first_chunk:
            raise StorageValidationError("Uploaded file is empty")

        is_valid, detected_type, error_msg = validate_content_type(
            first_chunk[:SNIFF_LENGTH],
            declared,
            allowed_types=frozenset(self.allowed_types),
        )
        if not is_valid:
            logger.warning(
                "magic_bytes_validation_failed",
                declared_type=declared,
                detected_type=detected_type,
                error=error_msg,
            )
            raise StorageValidationError(error_msg or "Invalid file content")

        content_type = detected_type or declared
        file_name = self.generate_file_name(content_type)
        final_path = self.ensure_upload_dir() / file_name
        part_path = final_path.with_name(f"{file_name}.part")

        size = 0
        try:
            with part_path.open("wb") as out:
                chunk = first_chunk
                while chunk:
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise FileTooLargeError(self.max_file_size)
                    await run_in_threadpool(out.write, chunk)
                    chunk = await upload.read(self.settings.upload_chunk_size)
            part_path.replace(final_path)
        except StorageError:
            part_path.unlink(missing_ok=True)
            raise
        except OSError as e:
            part_path.unlink(missing_ok=True)
            logger.exception("upload_write_failed", file_name=file_name)
            raise StorageUploadError from e

        logger.info(
            "pdf_uploaded",
            file_name=file_name,
            original_name=upload.filename,
            file_size=size,
        )
        return StoredFile(
            file_name=file_name,
            original_name=upload.filename or file_name,
            url=self.public_url(file_name),
            size=size,
            content_type=content_type,
        )

    async def delete(self, file_name: str) -> bool:
        """Delete a stored file.

        Returns:
            True if the file was removed, False if it did not exist.
        """
        if file_name.startswith(".") or Path(file_name).name != file_name:
            raise StorageValidationError("Invalid file name")

        path = self.upload_dir / file_name
        if not path.is_file():
            return False

        await run_in_threadpool(path.unlink)
        logger.info("file_deleted", file_name=file_name)
        return True

    def file_name_from_url(self, url: str | None) -> str | None:
        """Stored file name for a URL served under ``upload_url_prefix``.

        Returns None for empty values and for URLs this service does not own.
        """
        if not url:
            return None
        prefix = f"{self.settings.upload_url_prefix.rstrip('/')}/"
        if not url.startswith(prefix):
            return None
        file_name = url[len(prefix) :]
        if file_name.startswith(".") or Path(file_name).name != file_name:
            return None
        return file_name

    async def delete_by_url(self, url: str | None) -> bool:
        """Delete the stored file behind a public URL, if it is one of ours."""
        file_name = self.file_name_from_url(url)
        if file_name is None:
            return False
        return await self.delete(file_name)
