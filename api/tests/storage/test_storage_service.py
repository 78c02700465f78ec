"""Tests for LocalStorageService."""

import io
import re
from pathlib import Path

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from src.config.settings import Settings
from src.storage.service import (
    FileTooLargeError,
    InvalidContentTypeError,
    LocalStorageService,
    StorageValidationError,
)


PDF_BYTES = b"%PDF-1.7\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


def make_upload(
    data: bytes,
    filename: str = "handout.pdf",
    content_type: str = "application/pdf",
    *,
    known_size: bool = True,
) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        size=len(data) if known_size else None,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def storage(settings: Settings) -> LocalStorageService:
    return LocalStorageService(settings)


def stored_files(storage: LocalStorageService) -> list[Path]:
    if not storage.upload_dir.exists():
        return []
    return sorted(storage.upload_dir.iterdir())


class TestSavePdf:
    """Tests for save_pdf."""

    @pytest.mark.asyncio
    async def test_stores_pdf(self, storage: LocalStorageService) -> None:
        stored = await storage.save_pdf(make_upload(PDF_BYTES))

        assert re.fullmatch(r"pdf-\d+-\d+\.pdf", stored.file_name)
        assert stored.url == f"/uploads/{stored.file_name}"
        assert stored.original_name == "handout.pdf"
        assert stored.size == len(PDF_BYTES)
        assert stored.content_type == "application/pdf"
        assert (storage.upload_dir / stored.file_name).read_bytes() == PDF_BYTES
        assert stored_files(storage) == [storage.upload_dir / stored.file_name]

    @pytest.mark.asyncio
    async def test_extension_ignores_client_name(
        self, storage: LocalStorageService
    ) -> None:
        """The stored name never takes the client's extension."""
        stored = await storage.save_pdf(make_upload(PDF_BYTES, filename="run.exe"))

        assert stored.file_name.endswith(".pdf")

    @pytest.mark.asyncio
    async def test_rejects_declared_type(self, storage: LocalStorageService) -> None:
        with pytest.raises(InvalidContentTypeError) as exc_info:
            await storage.save_pdf(make_upload(PDF_BYTES, content_type="image/png"))

        assert exc_info.value.message == "Only PDF files are allowed"
        assert stored_files(storage) == []

    @pytest.mark.asyncio
    async def test_rejects_spoofed_content(self, storage: LocalStorageService) -> None:
        """A non-PDF sent as application/pdf is rejected by its magic bytes."""
        with pytest.raises(StorageValidationError):
            await storage.save_pdf(make_upload(b"MZ\x90\x00" + b"\x00" * 60))

        assert stored_files(storage) == []

    @pytest.mark.asyncio
    async def test_rejects_empty_file(self, storage: LocalStorageService) -> None:
        with pytest.raises(StorageValidationError):
            await storage.save_pdf(make_upload(b""))

    @pytest.mark.asyncio
    async def test_rejects_known_size_over_limit(
        self, settings: Settings
    ) -> None:
        settings.upload_max_pdf_size_mb = 1
        storage = LocalStorageService(settings)
        data = PDF_BYTES + b"\x00" * (1024 * 1024)

        with pytest.raises(FileTooLargeError):
            await storage.save_pdf(make_upload(data))

        assert stored_files(storage) == []

    @pytest.mark.asyncio
    async def test_copy_limit_removes_partial_file(
        self, settings: Settings
    ) -> None:
        """Without a known size the limit is enforced while copying."""
        settings.upload_max_pdf_size_mb = 1
        settings.upload_chunk_size = 64 * 1024
        storage = LocalStorageService(settings)
        data = PDF_BYTES + b"\x00" * (1024 * 1024)

        with pytest.raises(FileTooLargeError):
            await storage.save_pdf(make_upload(data, known_size=False))

        assert stored_files(storage) == []


class TestDelete:
    """Tests for delete."""

    @pytest.mark.asyncio
    async def test_delete_existing(self, storage: LocalStorageService) -> None:
        stored = await storage.save_pdf(make_upload(PDF_BYTES))

        assert await storage.delete(stored.file_name) is True
        assert stored_files(storage) == []

    @pytest.mark.asyncio
    async def test_delete_missing(self, storage: LocalStorageService) -> None:
        storage.ensure_upload_dir()
        assert await storage.delete("pdf-1-1.pdf") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["../secret.pdf", "a/b.pdf", "..", ".env"])
    async def test_delete_rejects_paths(
        self, storage: LocalStorageService, name: str
    ) -> None:
        with pytest.raises(StorageValidationError):
            await storage.delete(name)

    @pytest.mark.asyncio
    async def test_delete_by_url(self, storage: LocalStorageService) -> None:
        stored = await storage.save_pdf(make_upload(PDF_BYTES))

        assert await storage.delete_by_url(stored.url) is True
        assert stored_files(storage) == []

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("/uploads/pdf-1-2.pdf", "pdf-1-2.pdf"),
            ("/uploads/nested/pdf-1-2.pdf", None),
            ("/uploads/../secret.pdf", None),
            ("/uploads/", None),
            ("https://cdn.example.com/pdf-1-2.pdf", None),
            ("", None),
            (None, None),
        ],
    )
    def test_file_name_from_url(
        self, storage: LocalStorageService, url: str | None, expected: str | None
    ) -> None:
        assert storage.file_name_from_url(url) == expected
