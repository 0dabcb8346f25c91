"""Interface layer errors.

Every exception that reaches the HTTP surface is rendered as::

    {"error": {"kind": "...", "message": "...", "details": ...}}

with the status of its kind.
"""

from enum import StrEnum
from typing import Any

import logfire
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from donorlink.adapter.error import AdapterError, PortalServerSelectionRequired
from donorlink.adapter.http import describe_attempts
from donorlink.domain.error import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    ServiceDisabledError,
    UnauthorizedError,
    ValidationError,
)
from donorlink.domain.repository import TransactionManager


class InterfaceError(Exception):
    """Base interface error."""

    pass


class InvalidPayloadError(InterfaceError):
    """Request body is not valid JSON."""

    pass


class RateLimitedError(InterfaceError):
    """A client exceeded its request allowance."""

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class ErrorKind(StrEnum):
    VALIDATION = "Validation"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    RATE_LIMITED = "RateLimited"
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    UPSTREAM_CONFIGURATION_REQUIRED = "UpstreamConfigurationRequired"
    UPSTREAM_REQUEST_FAILED = "UpstreamRequestFailed"
    INTERNAL = "Internal"


class ErrorEnvelope(BaseModel):
    """Structured error returned to HTTP callers."""

    kind: ErrorKind
    message: str
    details: Any = None
    status: int

    def body(self) -> dict[str, Any]:
        return {
            "error": {
                "kind": self.kind.value,
                "message": self.message,
                "details": self.details,
            }
        }


# Domain errors, most specific first
_DOMAIN_KINDS: list[tuple[type[DomainError], ErrorKind, int]] = [
    (ValidationError, ErrorKind.VALIDATION, 400),
    (UnauthorizedError, ErrorKind.UNAUTHORIZED, 401),
    (ForbiddenError, ErrorKind.FORBIDDEN, 403),
    (NotFoundError, ErrorKind.NOT_FOUND, 404),
    (ConflictError, ErrorKind.CONFLICT, 409),
    (ServiceDisabledError, ErrorKind.UPSTREAM_UNAVAILABLE, 503),
]

# AdapterError.kind -> envelope
_ADAPTER_KINDS: dict[str, tuple[ErrorKind, int]] = {
    "upstream_unavailable": (ErrorKind.UPSTREAM_UNAVAILABLE, 502),
    "upstream_configuration_required": (
        ErrorKind.UPSTREAM_CONFIGURATION_REQUIRED,
        409,
    ),
    "upstream_request_failed": (ErrorKind.UPSTREAM_REQUEST_FAILED, 502),
    "service_disabled": (ErrorKind.UPSTREAM_UNAVAILABLE, 503),
}


def _adapter_details(exc: AdapterError) -> Any:
    details = exc.details
    extra: dict[str, Any] = {}
    if isinstance(exc, PortalServerSelectionRequired):
        extra["servers"] = [
            server.model_dump() if isinstance(server, BaseModel) else server
            for server in exc.servers
        ]
    if exc.status is not None:
        extra["status"] = exc.status
    if exc.attempts:
        extra["attempts"] = describe_attempts(exc.attempts)
    if not extra:
        return details
    if details is not None:
        extra["provider"] = details
    return extra


def envelope_for(exc: Exception) -> ErrorEnvelope:
    """Map an exception to its error envelope.

    Unknown exceptions become ``Internal`` without leaking their message.
    """
    if isinstance(exc, AdapterError):
        kind, status = _ADAPTER_KINDS.get(exc.kind, (ErrorKind.INTERNAL, 500))
        return ErrorEnvelope(
            kind=kind,
            message=exc.message,
            details=_adapter_details(exc),
            status=status,
        )

    if isinstance(exc, DomainError):
        for error_type, kind, status in _DOMAIN_KINDS:
            if isinstance(exc, error_type):
                return ErrorEnvelope(
                    kind=kind, message=exc.message, details=exc.details, status=status
                )
        return ErrorEnvelope(
            kind=ErrorKind.INTERNAL, message=exc.message, details=exc.details, status=500
        )

    if isinstance(exc, RateLimitedError):
        return ErrorEnvelope(
            kind=ErrorKind.RATE_LIMITED,
            message=str(exc),
            details={"retryAfter": exc.retry_after},
            status=429,
        )

    if isinstance(exc, InvalidPayloadError):
        return ErrorEnvelope(kind=ErrorKind.VALIDATION, message=str(exc), status=400)

    if isinstance(exc, RequestValidationError):
        return ErrorEnvelope(
            kind=ErrorKind.VALIDATION,
            message="Invalid request",
            details=[
                {"loc": list(error.get("loc", [])), "msg": error.get("msg", "")}
                for error in exc.errors()
            ],
            status=400,
        )

    return ErrorEnvelope(
        kind=ErrorKind.INTERNAL, message="Internal server error", status=500
    )


def _respond(exc: Exception) -> JSONResponse:
    envelope = envelope_for(exc)
    if envelope.status >= 500:
        logfire.error(
            "Request failed",
            kind=envelope.kind.value,
            status=envelope.status,
            error=str(exc),
            error_type=type(exc).__name__,
        )
    else:
        logfire.info(
            "Request rejected",
            kind=envelope.kind.value,
            status=envelope.status,
            error=envelope.message,
        )
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=envelope.status, content=envelope.body(), headers=headers
    )


async def _rollback_request(request: Request) -> None:
    container = getattr(request.state, "dishka_container", None)
    if container is None:
        return
    transaction = await container.get(TransactionManager)
    await transaction.rollback()


async def _handle_error(request: Request, exc: Exception) -> JSONResponse:
    """Render a rejected request, discarding what it wrote.

    The request scope still closes normally after a handled error, so its
    session would otherwise commit.
    """
    await _rollback_request(request)
    return _respond(exc)


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    # Unhandled errors unwind the request scope, which rolls back itself
    return _respond(exc)


def register_error_handlers(app: FastAPI) -> None:
    """Render domain, adapter and validation errors as envelopes."""
    app.add_exception_handler(DomainError, _handle_error)
    app.add_exception_handler(AdapterError, _handle_error)
    app.add_exception_handler(InterfaceError, _handle_error)
    app.add_exception_handler(RequestValidationError, _handle_error)
    app.add_exception_handler(Exception, _handle_unexpected)
