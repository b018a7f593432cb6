from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("app.errors")


class DomainError(Exception):
    """Base class for errors that map straight onto an HTTP status."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError, ValueError):
    default_message = "Invalid input"


class OrderingError(ValidationError):
    default_message = "End time must be after start time"


class Unauthorized(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class AccessDenied(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Project not found or access denied"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class AlreadyRunning(DomainError):
    default_message = "Timer already running"


class NoActiveTimer(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "No active timer found"


class InternalError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__({"error": message}, status_code=status_code, headers=headers)


async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("request.failed", exc_info=exc, extra={"extra_data": {"path": request.url.path}})
    return ErrorEnvelope(status_code=exc.status_code, message=exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    return ErrorEnvelope(status_code=exc.status_code, message=message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    fields = sorted({".".join(str(part) for part in err.get("loc", ())[1:]) for err in errors} - {""})
    message = "Invalid request body"
    if fields:
        message = f"{message}: {', '.join(fields)}"
    return ErrorEnvelope(status_code=status.HTTP_400_BAD_REQUEST, message=message)


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("database.error", exc_info=exc, extra={"extra_data": {"path": request.url.path}})
    return ErrorEnvelope(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, message=InternalError.default_message)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("request.unhandled", exc_info=exc, extra={"extra_data": {"path": request.url.path}})
    return ErrorEnvelope(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, message=InternalError.default_message)


def register_exception_handlers(app) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "AccessDenied",
    "AlreadyRunning",
    "DomainError",
    "ErrorEnvelope",
    "InternalError",
    "NoActiveTimer",
    "NotFound",
    "OrderingError",
    "Unauthorized",
    "ValidationError",
    "register_exception_handlers",
]
