"""
Exception handlers for the orders API.

Every failure leaves the service as
{"error": true, "code": ..., "message": ..., "details": ..., "status_code": ...}
so clients can branch on `code` (OUT_OF_STOCK, INVALID_TRANSITION, ...).
"""

import logging

import sentry_sdk
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from orderflow.core.domain import DomainException

logger = logging.getLogger(__name__)


def error_body(status_code: int, code: str, message: str, details=None) -> dict:
    return {
        "error": True,
        "code": code,
        "message": message,
        "details": details if details is not None else {},
        "status_code": status_code,
    }


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a DomainException with the status code it carries."""
    if not isinstance(exc, DomainException):
        return await unhandled_exception_handler(request, exc)

    # 4xx are expected outcomes (declined transition, stock gone), not faults
    log_level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(log_level, f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """HTTPException from auth dependencies (401/403) in the common shape."""
    if not isinstance(exc, HTTPException):
        return await unhandled_exception_handler(request, exc)

    code = {
        status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
        status.HTTP_403_FORBIDDEN: "FORBIDDEN",
        status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    }.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, code, str(exc.detail)),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Request bodies and query strings that fail their pydantic schema.

    Also covers pydantic errors raised while building response models.
    """
    if not isinstance(exc, (RequestValidationError, ValidationError)):
        return await unhandled_exception_handler(request, exc)

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation error on {request.method} {request.url.path}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "REQUEST_VALIDATION_ERROR",
            "Validation error",
            errors,
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log with traceback, report to Sentry and answer with a body that leaks nothing."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc!s}", exc_info=exc)
    sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
