"""
Error taxonomy and Flask error handlers.

Every domain failure raised by the core modules is a subclass of
:class:`TaskApiError` and carries the HTTP status it maps to.  Handlers
registered by :func:`register_error_handlers` turn those exceptions into the
standard response envelope, so route functions simply raise and never build
error responses by hand.

Exception Hierarchy:
    TaskApiError (base)
    ├── ValidationError      400
    ├── AuthError            401
    ├── TokenError           401
    ├── AuthzError           403
    ├── NotFoundError        404
    ├── ConflictError        409
    └── InternalError        500
        ├── HashingError
        └── SigningError
"""

from __future__ import annotations

import logging
from enum import Enum

from flask import Flask, Response
from werkzeug.exceptions import HTTPException

from .responses import respond_error

logger = logging.getLogger(__name__)


class TaskApiError(Exception):
    """
    Base exception for all task API errors.

    Attributes:
        message: Client-safe description placed in the envelope's ``error``.
        status_code: HTTP status the error maps to.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(TaskApiError):
    """Malformed or out-of-range input."""

    status_code = 400


class AuthErrorKind(str, Enum):
    """Reasons a request could not be authenticated."""

    MISSING_HEADER = "missing_header"
    MALFORMED_HEADER = "malformed_header"
    INVALID_TOKEN = "invalid_token"
    INVALID_CREDENTIALS = "invalid_credentials"


_AUTH_MESSAGES = {
    AuthErrorKind.MISSING_HEADER: "Authorization header required",
    AuthErrorKind.MALFORMED_HEADER: "Invalid authorization header format",
    AuthErrorKind.INVALID_TOKEN: "Invalid or expired token",
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid credentials",
}


class AuthError(TaskApiError):
    """Missing, malformed or invalid credentials."""

    status_code = 401

    def __init__(self, kind: AuthErrorKind) -> None:
        self.kind = kind
        super().__init__(_AUTH_MESSAGES[kind])


class TokenErrorKind(str, Enum):
    """Reasons a token failed verification."""

    MALFORMED = "malformed"
    SIGNATURE_MISMATCH = "signature_mismatch"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"


class TokenError(TaskApiError):
    """Raised by the token module when a token cannot be trusted."""

    status_code = 401

    def __init__(self, kind: TokenErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or f"Token rejected: {kind.value}")


class AuthzError(TaskApiError):
    """Authenticated, but not permitted to touch the resource."""

    status_code = 403


class NotFoundError(TaskApiError):
    """The requested resource does not exist."""

    status_code = 404


class ConflictError(TaskApiError):
    """The request collides with existing state (duplicate email)."""

    status_code = 409


class InternalError(TaskApiError):
    """Store, hashing or signing failure.  Details are logged, not returned."""

    status_code = 500


class HashingError(InternalError):
    """Password hashing or verification could not be carried out."""


class SigningError(InternalError):
    """A token could not be signed."""


# Short messages for errors raised by Flask/Werkzeug itself (unknown routes,
# wrong methods, undecodable bodies).
_HTTP_MESSAGES = {
    400: "Bad request",
    404: "Resource not found",
    405: "Method not allowed",
    415: "Unsupported media type",
}


def register_error_handlers(app: Flask) -> None:
    """Register the domain, HTTP and catch-all handlers on *app*."""

    @app.errorhandler(TaskApiError)
    def handle_task_api_error(exc: TaskApiError) -> tuple[Response, int]:
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message, exc_info=exc.__cause__)
        else:
            logger.info("%s (%d): %s", type(exc).__name__, exc.status_code, exc.message)
        return respond_error(exc.status_code, exc.message)

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException) -> tuple[Response, int]:
        status_code = exc.code or 500
        return respond_error(status_code, _HTTP_MESSAGES.get(status_code, exc.name))

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception) -> tuple[Response, int]:
        # Never leak internal details to the client.
        logger.exception("Unhandled exception: %s", exc)
        return respond_error(500, "Internal server error")
