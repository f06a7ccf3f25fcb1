"""JSON envelope shared by every API response."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse


def _meta() -> dict[str, str]:
    return {"timestamp": datetime.now(timezone.utc).isoformat()}


def success_response(data: Any, status_code: int = 200) -> JSONResponse:
    """``{success: true, data, meta}``."""
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data), "meta": _meta()},
    )


def error_response(code: str, message: str, status_code: int = 400, details: Any = None) -> JSONResponse:
    """``{success: false, error: {code, message, details?}, meta}``."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = jsonable_encoder(details)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "meta": _meta()},
    )


def bad_request(message: str, details: Any = None) -> JSONResponse:
    return error_response("BAD_REQUEST", message, 400, details)


def server_error(exc: Exception | None = None, debug: bool = False) -> JSONResponse:
    details = str(exc) if debug and exc is not None else None
    return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details)
