"""Global exception handlers for consistent error responses.

Every error leaves the API as ``{"error": <message>, "code": <code>,
"request_id": <id>}``:

- AppError subclasses -> the status carried by the error class
- Request validation failures -> 400
- Unexpected Exception -> generic 500 without internals
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agency_toolkit.core.config import settings
from agency_toolkit.core.errors import AppError, RateLimitedAppError
from agency_toolkit.core.logging import get_request_id

logger = logging.getLogger(__name__)


def error_body(code: str, message: str, **extra) -> dict:
    body = {"error": message, "code": code, "request_id": get_request_id()}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error with the status code its class declares.

    Server-side errors (5xx) are logged at error level, client errors at
    warning level. Rate limited responses carry ``retry_after`` in the body
    and, when enabled, a ``Retry-After`` header.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the error's status code.
    """
    status_code = exc.status_code
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    headers: dict[str, str] = {}
    retry_after = None
    if isinstance(exc, RateLimitedAppError):
        retry_after = exc.retry_after
        if settings.rate_gate.include_headers:
            headers["Retry-After"] = str(retry_after)

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.code, exc.message, details=exc.details or None, retry_after=retry_after),
        headers=headers or None,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map FastAPI's 422 request validation failures onto the 400 error shape."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = f"Invalid {field}" if field else "Invalid request"

    logger.warning(
        "request_validation_failed",
        extra={"request_path": request.url.path, "field": field, "error_count": len(errors)},
    )
    return JSONResponse(
        status_code=400,
        content=error_body("invalid_request", message, details={"field": field} if field else None),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method) in the same shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(f"http_{exc.status_code}", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure with its type and message for debugging and returns a
    generic body so nothing about the implementation reaches the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
