from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.economy.errors import (
    EconomyError,
    NotFoundError,
    QuotaExceededError,
    TransientStorageError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

GENERIC_SERVER_ERROR_MESSAGE = "Internal server error"


def status_code_for(exc: EconomyError) -> int:
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, QuotaExceededError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, TransientStorageError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(*, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"code": code, "message": message}},
    )


async def handle_economy_error(request: Request, exc: EconomyError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error_code=exc.code,
            error_type=type(exc).__name__,
        )
        message = GENERIC_SERVER_ERROR_MESSAGE
    else:
        message = exc.message
    return _error_response(status_code=status_code, code=exc.code, message=message)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "invalid request"))
    return _error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ValidationError.code,
        message=f"{location}: {message}" if location else message,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EconomyError, handle_economy_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
