"""
Request identity propagation.

Turns the raw ``Authorization`` header of a request into a verified
:class:`~task_api.tokens.Claim`.  The ``require_auth`` decorator runs this
before a view and passes the claim to the view as an explicit ``claim``
keyword argument, so every function that needs the caller's identity
declares it in its signature.  Nothing is cached on ``flask.g`` or shared
between requests.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import current_app, request

from .errors import AuthError, AuthErrorKind, TokenError
from .tokens import Claim, TokenService


def extract_bearer_token(auth_header: str | None) -> str:
    """
    Return the token part of a ``Bearer <token>`` header value.

    The header must split on single spaces into exactly two parts, the first
    being literally ``Bearer``.

    Raises:
        AuthError: ``MISSING_HEADER`` if the header is absent or empty,
            ``MALFORMED_HEADER`` if it has any other shape.
    """
    if not auth_header:
        raise AuthError(AuthErrorKind.MISSING_HEADER)

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise AuthError(AuthErrorKind.MALFORMED_HEADER)
    return parts[1]


def authenticate(auth_header: str | None, token_service: TokenService) -> Claim:
    """
    Verify the bearer token in *auth_header* and return its claim.

    Raises:
        AuthError: For a missing or malformed header, or ``INVALID_TOKEN``
            chained to the underlying :class:`TokenError`.
    """
    token = extract_bearer_token(auth_header)
    try:
        return token_service.verify(token)
    except TokenError as exc:
        raise AuthError(AuthErrorKind.INVALID_TOKEN) from exc


def get_token_service() -> TokenService:
    """Return the token service built by ``create_app``."""
    return current_app.extensions["token_service"]


def require_auth(view_func: Callable):
    """
    Decorator that enforces Bearer-token authentication on an endpoint.

    On success the wrapped view is called with an extra ``claim`` keyword
    argument.  On failure an :class:`AuthError` propagates to the registered
    error handler, which answers 401 before the view runs.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        claim = authenticate(request.headers.get("Authorization"), get_token_service())
        return view_func(*args, claim=claim, **kwargs)

    return wrapper
