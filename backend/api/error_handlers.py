"""
Error translation boundary.

Domain exceptions are raised by services and guards and converted here,
once, into the ``{"success": false, "error", "code"}`` envelope. Routes do
not format errors themselves.
"""

import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config import get_settings
from shared.exceptions import EcoLearnError

logger = logging.getLogger(__name__)

_STATUS_TO_CODE = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMITED",
}


def error_code_for_status(status_code: int) -> str:
    """Map an HTTP status to a stable error code."""
    if status_code >= 500:
        return "INTERNAL_ERROR"
    return _STATUS_TO_CODE.get(status_code, "HTTP_ERROR")


def error_response(
    status_code: int,
    message: str,
    code: str,
    details: Optional[Any] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build the error envelope."""
    content: dict[str, Any] = {"success": False, "error": message, "code": code}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = str(error.get("msg", "Invalid value"))
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(loc) or "body", "message": message})
    return details


def register_exception_handlers(app: FastAPI) -> None:
    """Install the application's exception handlers."""

    @app.exception_handler(EcoLearnError)
    async def handle_domain_error(request: Request, exc: EcoLearnError):
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            f"{exc.code} on {request.method} {request.url.path} "
            f"(status={exc.status_code}, ip={_client_ip(request)}): {exc.message}"
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = _validation_details(exc)
        logger.info(
            f"Validation failed on {request.method} {request.url.path} "
            f"(fields={[d['field'] for d in details]})"
        )
        return error_response(400, "Validation failed", "VALIDATION_ERROR", details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            logger.error(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(
            exc.status_code,
            message,
            error_code_for_status(exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception):
        logger.exception(
            f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
            exc_info=exc,
        )
        details = None
        if get_settings().debug:
            details = {"traceback": traceback.format_exception(type(exc), exc, exc.__traceback__)}
        return error_response(500, "Internal server error", "INTERNAL_ERROR", details)
