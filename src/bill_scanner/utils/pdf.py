"""PDF rendering for backends that only accept page images."""

from __future__ import annotations

import fitz  # PyMuPDF


def render_pdf_to_images(file_bytes: bytes, dpi: int = 150, max_pages: int | None = None) -> list[bytes]:
    """Render PDF pages to PNG image bytes at the given DPI.

    Only the first *max_pages* pages are rendered when a limit is given.
    """
    doc = fitz.open(stream=file_bytes, filetype="pdf")
    images: list[bytes] = []
    zoom = dpi / 72
    matrix = fitz.Matrix(zoom, zoom)
    try:
        for index, page in enumerate(doc):
            if max_pages is not None and index >= max_pages:
                break
            pix = page.get_pixmap(matrix=matrix)
            images.append(pix.tobytes("png"))
    finally:
        doc.close()
    return images


def is_pdf(file_bytes: bytes) -> bool:
    """Check the ``%PDF`` magic bytes."""
    return file_bytes[:4] == b"%PDF"
