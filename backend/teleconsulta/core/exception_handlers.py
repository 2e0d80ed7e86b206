"""
Exception handlers for the FastAPI application.

Every error leaves the API in the same envelope:
``{"error": true, "message": ..., "status_code": ...}``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from teleconsulta.core.exceptions import (
    BusinessRuleError,
    PermissionDeniedError,
    ResourceNotFoundError,
    SlotConflictError,
    TeleconsultaError,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message, headers=None, **extra) -> JSONResponse:
    content = {"error": True, "message": message, "status_code": status_code}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def status_for(exc: TeleconsultaError) -> int:
    """Map a domain failure onto an HTTP status code."""
    # SlotConflictError is a BusinessRuleError, so it must be matched first
    if isinstance(exc, SlotConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ResourceNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, PermissionDeniedError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, BusinessRuleError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle workflow failures raised by the service layer."""
    if not isinstance(exc, TeleconsultaError):
        return await global_exception_handler(request, exc)

    status_code = status_for(exc)
    logger.info(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
    )
    return _error_response(status_code, exc.message)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle HTTPException (ours and the router's 404/405) with consistent response format."""
    http_exc = exc if isinstance(exc, HTTPException) else HTTPException(status_code=500, detail=str(exc))
    return _error_response(http_exc.status_code, http_exc.detail, headers=http_exc.headers)


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle request validation errors with detailed error messages."""
    if not isinstance(exc, RequestValidationError):
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", details=errors
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all unhandled exceptions.

    Logs the full exception with traceback and returns a safe error response.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(TeleconsultaError, domain_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
