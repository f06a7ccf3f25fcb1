"""Base64 helpers for binary uploads."""

from __future__ import annotations

import base64


def to_base64(data: bytes) -> str:
    """Encode raw bytes to a Base64 string."""
    return base64.b64encode(data).decode("ascii")


def from_base64(text: str) -> bytes:
    """Decode a Base64 string back to raw bytes."""
    return base64.b64decode(text)
