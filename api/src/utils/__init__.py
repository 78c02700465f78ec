"""Utility modules for LearnHub API."""

from src.utils.magic_bytes import detect_content_type, is_pdf, validate_content_type


__all__ = ["detect_content_type", "is_pdf", "validate_content_type"]
