"""
Account endpoints.

Endpoints:
    POST /api/register  -- Create a new user account.
    POST /api/login     -- Authenticate and receive a bearer token.

Emails are trimmed and lower-cased before every lookup, so registration and
login are case-insensitive on the email address.  Login answers the same
``"Invalid credentials"`` error whether the email is unknown or the password
is wrong.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Response

from .. import db
from ..auth import get_token_service
from ..errors import (
    AuthError,
    AuthErrorKind,
    ConflictError,
    HashingError,
    InternalError,
    SigningError,
    ValidationError,
)
from ..models import User
from ..passwords import hash_password, verify_password
from ..repositories import SqlAlchemyUserRepository
from ..responses import respond_created, respond_success
from ..validation import validate_email, validate_name, validate_password
from . import json_body

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth_api", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


def _string_fields(data: dict[str, Any], fields: list[str]) -> list[str]:
    """
    Pull *fields* out of *data* as trimmed strings.

    Missing fields become ``""``; a present field of any other JSON type is
    rejected as an invalid body.
    """
    values = []
    for field in fields:
        value = data.get(field, "")
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValidationError("Invalid request body")
        values.append(value.strip())
    return values


def _user_repository() -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(db.session)


# =====================================================================
# API Endpoints
# =====================================================================


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new user account.

    Expects ``name``, ``email`` and ``password``.

    Returns:
        201 with the created user (no password hash).
        400 if any field fails validation.
        409 if the email is already registered.
    """
    name, email, password = _string_fields(json_body(), ["name", "email", "password"])
    email = email.lower()

    for is_valid, error in (
        validate_name(name),
        validate_email(email),
        validate_password(password),
    ):
        if not is_valid:
            raise ValidationError(error)

    users = _user_repository()
    if users.get_by_email(email) is not None:
        raise ConflictError("Email already registered")

    try:
        password_hash = hash_password(password)
    except HashingError as exc:
        raise InternalError("Failed to process password") from exc

    user = users.create(User(name=name, email=email, password_hash=password_hash))
    return respond_created("User registered successfully", user.to_dict())


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate a user and issue a token.

    Expects ``email`` and ``password``.

    Returns:
        200 with ``token`` and ``user``.
        400 if either field is missing.
        401 if the credentials are wrong.
    """
    email, password = _string_fields(json_body(), ["email", "password"])
    email = email.lower()
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = _user_repository().get_by_email(email)
    if user is None:
        logger.info("Login failed: unknown email")
        raise AuthError(AuthErrorKind.INVALID_CREDENTIALS)

    try:
        password_matches = verify_password(user.password_hash, password)
    except HashingError as exc:
        raise InternalError("Failed to authenticate") from exc
    if not password_matches:
        logger.info("Login failed: wrong password for user_id=%s", user.id)
        raise AuthError(AuthErrorKind.INVALID_CREDENTIALS)

    try:
        token = get_token_service().issue(user.id, user.email)
    except SigningError as exc:
        raise InternalError("Failed to generate token") from exc
    logger.info("User id=%s logged in", user.id)
    return respond_success("Login successful", {"token": token, "user": user.to_dict()})
