"""Error taxonomy shared by the account core and the HTTP layer.

The core raises ``ServiceError`` subclasses; the FastAPI handlers below turn
them into the JSON error envelope. Messages are passed to the client as-is,
including the text of unexpected storage errors.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailure(ServiceError):
    """Malformed or missing input; raised before storage is touched."""

    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class BlobTooLarge(ValidationFailure):
    code = "payload_too_large"
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class ConflictFailure(ServiceError):
    """Duplicate email or username."""

    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class NotFoundFailure(ServiceError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class CredentialFailure(ServiceError):
    """The account exists but the password does not verify."""

    code = "invalid_credentials"
    status_code = status.HTTP_401_UNAUTHORIZED


class ServerFailure(ServiceError):
    """Unexpected storage or hashing error, carrying the underlying message."""

    code = "server_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def service_error_handler(request: Request, exc: ServiceError):
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, code="http_error", message=message, details=details)


async def validation_exception_handler(request: Request, exc):  # type: ignore[override]
    from fastapi.exceptions import RequestValidationError

    if isinstance(exc, RequestValidationError):
        return ErrorEnvelope(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": exc.errors()},
        )
    raise exc


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "request.unhandled_error",
        extra={"extra_data": {"method": request.method, "path": request.url.path}},
    )
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ServerFailure.code,
        message=str(exc) or "server error",
    )
