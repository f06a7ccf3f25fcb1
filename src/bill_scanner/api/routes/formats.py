"""Upload formats accepted by the scan endpoint."""
from __future__ import annotations

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/heic",
    "image/heif",
    "application/pdf",
    "text/plain",
})

SUPPORTED_FORMATS = {
    "images": ["JPEG", "PNG", "WebP", "HEIC"],
    "documents": ["PDF"],
    "text": ["TXT"],
}
