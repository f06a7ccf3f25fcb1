"""Bill upload and scan endpoints."""
from __future__ import annotations

import structlog
from fastapi import APIRouter, File, Request, UploadFile

from ...llm.base import TEXT_MIME_TYPE
from ...scanner import NO_PROVIDER_MESSAGE, BillScanner
from ...utils.encoding import to_base64
from ..responses import bad_request, server_error, success_response
from .formats import ALLOWED_MIME_TYPES, SUPPORTED_FORMATS

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/scan")
async def scan_bill(request: Request, file: UploadFile | None = File(None)):
    """Scan an uploaded bill (JPG, PNG, WebP, HEIC, PDF or TXT)."""
    scanner: BillScanner = request.app.state.scanner
    settings = request.app.state.settings
    max_mb = settings.max_upload_bytes // (1024 * 1024)

    try:
        if not await scanner.is_available():
            return bad_request(NO_PROVIDER_MESSAGE)

        if file is None:
            return bad_request("No file provided")

        file_bytes = await file.read()
        if len(file_bytes) > settings.max_upload_bytes:
            return bad_request(f"File too large. Maximum size is {max_mb}MB")

        mime_type = (file.content_type or "").split(";")[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            return bad_request(
                f"Unsupported file type: {mime_type or 'unknown'}. "
                "Supported types: JPG, PNG, WebP, HEIC, PDF, TXT"
            )

        if mime_type == TEXT_MIME_TYPE:
            content = file_bytes.decode("utf-8", errors="replace")
        else:
            content = to_base64(file_bytes)

        logger.info("bill_scan_request", filename=file.filename, mime_type=mime_type,
                    size_bytes=len(file_bytes))
        result = await scanner.scan_with_fallback(content, mime_type)

        if not result.success:
            warning_text = f" Warnings: {'; '.join(result.warnings)}" if result.warnings else ""
            return bad_request(f"Failed to scan bill.{warning_text}", {"warnings": result.warnings})

        return success_response({
            "extractedData": result.extracted_data.model_dump(by_alias=True) if result.extracted_data else None,
            "insights": result.insights.model_dump(by_alias=True) if result.insights else None,
            "confidence": result.confidence,
            "warnings": result.warnings,
            "provider": result.provider,
            "fileType": mime_type,
        })
    except Exception as e:
        logger.error("bill_scan_error", error=str(e), exc_info=True)
        return server_error(e, debug=settings.debug)


@router.get("/scan")
async def scan_capabilities(request: Request):
    """Report whether scanning is available and which formats are accepted."""
    scanner: BillScanner = request.app.state.scanner
    settings = request.app.state.settings
    status = await scanner.status()

    return success_response({
        "available": status.active_provider is not None,
        "activeProvider": status.active_provider,
        "configured": status.configured,
        "providers": status.model_dump(mode="json", by_alias=True)["providers"],
        "supportedFormats": SUPPORTED_FORMATS,
        "maxFileSize": settings.max_upload_bytes,
        "maxFileSizeMB": settings.max_upload_bytes / 1024 / 1024,
    })
