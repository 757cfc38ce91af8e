"""API error handling middleware: consistent error responses.

Registers FastAPI exception handlers that convert domain exceptions into
standardised ``{"error": {"code": "...", "message": "...", "details": ...}}``
JSON responses.

Status code mapping:
- ``AuthenticationError`` → 401 ``AUTHENTICATION_FAILED``
- ``NotAuthenticatedError`` → 401 ``NOT_AUTHENTICATED``
- ``AuthorizationError`` → 403 ``FORBIDDEN``
- ``NotFoundError`` → 404 ``NOT_FOUND``
- ``SessionNotFoundError`` → 404 ``SESSION_NOT_FOUND``
- ``SchedulingConflictError`` → 409 ``SCHEDULING_CONFLICT``
- ``ValidationError`` / ``ValueError`` → 400 ``VALIDATION_ERROR``
- ``KeyError`` → 404 ``NOT_FOUND``
- Any other ``Exception`` → 500 ``INTERNAL_ERROR``
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from peniel.api.models import ErrorDetail, ErrorResponse
from peniel.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotAuthenticatedError,
    NotFoundError,
    PenielError,
    SchedulingConflictError,
    ValidationError,
)
from peniel.core.sessions import SessionNotFoundError

logger = logging.getLogger(__name__)

_DOMAIN_ERRORS: dict[type[PenielError], tuple[int, str]] = {
    AuthenticationError: (401, "AUTHENTICATION_FAILED"),
    NotAuthenticatedError: (401, "NOT_AUTHENTICATED"),
    AuthorizationError: (403, "FORBIDDEN"),
    NotFoundError: (404, "NOT_FOUND"),
    SessionNotFoundError: (404, "SESSION_NOT_FOUND"),
    SchedulingConflictError: (409, "SCHEDULING_CONFLICT"),
    ValidationError: (400, "VALIDATION_ERROR"),
}


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _details(exc: PenielError) -> dict | None:
    if isinstance(exc, SchedulingConflictError):
        if exc.conflicting is None:
            return None
        return {"conflicting_event": exc.conflicting.to_dict()}
    if isinstance(exc, SessionNotFoundError):
        return {"session_id": exc.session_id}
    if isinstance(exc, NotFoundError):
        return {"kind": exc.kind, "id": exc.item_id}
    if isinstance(exc, (AuthorizationError, NotAuthenticatedError)):
        return {"action": exc.action}
    return None


async def _handle_domain_error(
    request: Request,
    exc: PenielError,
) -> JSONResponse:
    """Map a domain error to its status code via the class table."""
    for cls in type(exc).__mro__:
        if cls in _DOMAIN_ERRORS:
            status_code, code = _DOMAIN_ERRORS[cls]
            break
    else:
        status_code, code = 400, "VALIDATION_ERROR"
    logger.info("%s on %s %s: %s", code, request.method, request.url.path, exc)
    return _error_response(status_code, code, str(exc), _details(exc))


async def _handle_key_error(
    request: Request,
    exc: KeyError,
) -> JSONResponse:
    """Return 404 for lookups that escaped the domain layer."""
    key = exc.args[0] if exc.args else None
    logger.info("Not found: %s", key)
    return _error_response(404, "NOT_FOUND", f"Not found: {key}")


async def _handle_value_error(
    request: Request,
    exc: ValueError,
) -> JSONResponse:
    """Return 400 for validation / value errors."""
    logger.info("Validation error: %s", exc)
    return _error_response(400, "VALIDATION_ERROR", str(exc))


class CatchAllErrorMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that catches any unhandled exception and returns a 500.

    This sits above the Starlette exception handler layer, ensuring that
    even exceptions not caught by ``add_exception_handler`` are converted
    to the standard error envelope rather than bubbling up as raw 500s.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.error(
                "Unhandled exception on %s %s",
                request.method,
                request.url.path,
                exc_info=True,
            )
            return _error_response(500, "INTERNAL_ERROR", "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI application.

    Starlette resolves handlers along the exception's MRO, so the domain
    classes (several of which also derive from ``KeyError`` or
    ``ValueError``) win over the generic builtin handlers.
    """
    for exc_class in _DOMAIN_ERRORS:
        app.add_exception_handler(exc_class, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(PenielError, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(KeyError, _handle_key_error)  # type: ignore[arg-type]
    app.add_exception_handler(ValueError, _handle_value_error)  # type: ignore[arg-type]
    app.add_middleware(CatchAllErrorMiddleware)
