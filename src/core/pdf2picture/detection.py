from __future__ import annotations

PDF_SIGNATURE = b"%PDF-"
SIGNATURE_WINDOW = 1024

ACCEPTED_MEDIA_TYPES: frozenset[str] = frozenset({"application/pdf", "application/octet-stream"})


def looks_like_pdf(payload: bytes) -> bool:
    """Return whether a PDF header appears within the first kilobyte."""

    return PDF_SIGNATURE in payload[:SIGNATURE_WINDOW]


def is_accepted_media_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    base = content_type.split(";", 1)[0].strip().lower()
    return base in ACCEPTED_MEDIA_TYPES


__all__ = ["ACCEPTED_MEDIA_TYPES", "is_accepted_media_type", "looks_like_pdf"]
