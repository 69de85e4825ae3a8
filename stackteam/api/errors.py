"""
Error envelope for every failed request.

Every error body has the same shape:
    {"error": {"kind": "<stable kind>", "message": "<human readable>", "request_id": "<id>"}}
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse

from stackteam.core.exceptions import AppError
from stackteam.core.logging import capture_error
from stackteam.logging import get_logger

logger = get_logger(__name__)

_STATUS_TO_KIND: Dict[int, str] = {
    400: "validation_error",
    401: "unauthenticated",
    403: "forbidden",
    404: "not_found",
    405: "invalid_operation",
    409: "conflict",
    422: "validation_error",
    503: "unavailable",
}


def make_error_envelope(kind: str, message: str, request_id: Optional[str] = None) -> Dict[str, Any]:
    """Build the standard error envelope dict."""
    return {
        "error": {
            "kind": kind,
            "message": message,
            "request_id": request_id,
        }
    }


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=make_error_envelope(exc.kind, exc.message, _request_id(request)),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert HTTPException to the error envelope."""
    kind = _STATUS_TO_KIND.get(exc.status_code, "internal")
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=make_error_envelope(kind, message, _request_id(request)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Pydantic validation errors are reported as 400 validation_error."""
    parts = []
    for err in exc.errors():
        loc = " -> ".join(str(part) for part in err.get("loc", []))
        msg = err.get("msg", "")
        parts.append(f"{loc}: {msg}" if loc else msg)
    message = "; ".join(parts) or "Invalid input"
    return JSONResponse(
        status_code=400,
        content=make_error_envelope("validation_error", message, _request_id(request)),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """A unique-constraint race that slipped past the service checks."""
    logger.warning("Integrity error", path=request.url.path)
    return JSONResponse(
        status_code=409,
        content=make_error_envelope("conflict", "Resource already exists", _request_id(request)),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log, report to Sentry and return a bare 500."""
    request_id = _request_id(request)
    logger.error("Unhandled error", path=request.url.path, method=request.method, request_id=request_id)
    capture_error(exc, context={"request": {"path": request.url.path, "method": request.method}})
    return JSONResponse(
        status_code=500,
        content=make_error_envelope("internal", "Internal server error", request_id),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
