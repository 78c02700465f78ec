"""Magic bytes detection for uploaded documents.

Checks the first bytes of an upload against known file signatures so a file
renamed to ``.pdf`` or sent with a forged Content-Type is rejected.
"""

from typing import NamedTuple


# Bytes to read before sniffing
SNIFF_LENGTH = 64
MIN_BYTES_FOR_DETECTION = 4


class MagicSignature(NamedTuple):
    """Magic bytes signature for a file type."""

    bytes_pattern: bytes
    mime_type: str
    offset: int = 0


# Reference: https://en.wikipedia.org/wiki/List_of_file_signatures
MAGIC_SIGNATURES: list[MagicSignature] = [
    MagicSignature(b"%PDF-", "application/pdf"),
    # Office Open XML, ODF and plain zip archives share the PK header
    MagicSignature(b"PK\x03\x04", "application/zip"),
    # Legacy Office (doc, xls, ppt)
    MagicSignature(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "application/x-ole-storage"),
    MagicSignature(b"{\\rtf", "application/rtf"),
    MagicSignature(b"\xff\xd8\xff", "image/jpeg"),
    MagicSignature(b"\x89PNG\r\n\x1a\n", "image/png"),
    MagicSignature(b"GIF87a", "image/gif"),
    MagicSignature(b"GIF89a", "image/gif"),
    MagicSignature(b"MZ", "application/x-msdownload"),
    MagicSignature(b"\x7fELF", "application/x-executable"),
]

# PDF readers accept a header within the first 1024 bytes; a leading UTF-8
# BOM or whitespace is the only prefix seen in practice.
_PDF_PREFIXES = (b"\xef\xbb\xbf", b"\r\n", b"\n", b" ")


def detect_content_type(data: bytes) -> str | None:
    """Detect content type from file magic bytes.

    Args:
        data: First bytes of file content.

    Returns:
        Detected MIME type or None if unknown.
    """
    if len(data) < MIN_BYTES_FOR_DETECTION:
        return None

    stripped = data
    for prefix in _PDF_PREFIXES:
        stripped = stripped.removeprefix(prefix)
    if stripped.startswith(b"%PDF-"):
        return "application/pdf"

    for sig in MAGIC_SIGNATURES:
        end = sig.offset + len(sig.bytes_pattern)
        if len(data) >= end and data[sig.offset : end] == sig.bytes_pattern:
            return sig.mime_type

    return None


def validate_content_type(
    data: bytes,
    declared_type: str | None,
    *,
    allowed_types: frozenset[str],
) -> tuple[bool, str | None, str | None]:
    """Validate file content against the allowed types and declared type.

    Args:
        data: First bytes of file content.
        declared_type: Content-Type sent by the client (may be None).
        allowed_types: Allowed MIME types.

    Returns:
        Tuple of (is_valid, detected_type, error_message).

    Examples:
        >>> validate_content_type(b"%PDF-1.7...", "application/pdf",
        ...                       allowed_types=frozenset({"application/pdf"}))
        (True, "application/pdf", None)

        >>> validate_content_type(b"\\x89PNG...", "application/pdf",
        ...                       allowed_types=frozenset({"application/pdf"}))
        (False, "image/png", "File type 'image/png' is not allowed. ...")
    """
    detected_type = detect_content_type(data)

    if detected_type is None:
        return (False, None, "Unable to detect file type from content")

    if detected_type not in allowed_types:
        return (
            False,
            detected_type,
            f"File type '{detected_type}' is not allowed. "
            f"Allowed: {', '.join(sorted(allowed_types))}",
        )

    if declared_type:
        declared_base = declared_type.split(";")[0].strip().lower()
        if declared_base != detected_type:
            return (
                False,
                detected_type,
                f"Content-Type mismatch: declared '{declared_base}', "
                f"detected '{detected_type}'",
            )

    return (True, detected_type, None)


def is_pdf(data: bytes) -> bool:
    """Check if data starts like a PDF document."""
    return detect_content_type(data) == "application/pdf"
