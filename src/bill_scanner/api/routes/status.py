"""Provider status endpoint for diagnostics."""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from ...scanner import BillScanner
from .formats import SUPPORTED_FORMATS

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/status")
async def vlm_status(request: Request):
    """Probe every provider and report availability."""
    scanner: BillScanner = request.app.state.scanner
    try:
        status = await scanner.status()
    except Exception as e:
        logger.error("vlm_status_error", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e) or "Failed to check VLM status"},
        )

    return {
        "success": True,
        **status.model_dump(mode="json", by_alias=True),
        "supportedFormats": SUPPORTED_FORMATS,
    }
