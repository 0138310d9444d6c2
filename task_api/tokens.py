"""
JWT issuance and verification.

Tokens are compact JWS strings signed with HS256 (HMAC-SHA256) using a
secret supplied when the :class:`TokenService` is constructed.  The service
holds no other state, so one instance is built at application start-up and
shared by every request.

Token structure (claims):
    - ``user_id`` -- integer primary key of the authenticated user.
    - ``email``   -- the user's (lower-cased) email address.
    - ``iat``     -- issued-at, UTC epoch seconds.
    - ``nbf``     -- not-before, equal to ``iat``.
    - ``exp``     -- expiration, ``iat`` + 24 hours.

Verification only accepts HS256.  A token whose header names any other
algorithm, ``none`` included, is rejected before its claims are looked at.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from .errors import SigningError, TokenError, TokenErrorKind

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(hours=24)
REQUIRED_TOKEN_CLAIMS = ["user_id", "email", "iat", "nbf", "exp"]


@dataclass(frozen=True)
class Claim:
    """Verified identity extracted from a token.  Lives for one request."""

    user_id: int
    email: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime


def _from_epoch(value: int) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class TokenService:
    """
    Issue and verify signed identity tokens.

    Args:
        secret: HMAC key shared by issuer and verifier.
        leeway: Seconds of tolerance applied to ``exp``/``nbf``/``iat``.
    """

    def __init__(self, secret: str, *, leeway: int = 0) -> None:
        self._secret = secret
        self._leeway = leeway

    def issue(self, user_id: int, email: str, *, now: datetime | None = None) -> str:
        """
        Create a signed token for *user_id*/*email*, valid for 24 hours.

        Args:
            user_id: Primary key of the authenticated user.
            email: The user's email address.
            now: Issue time; defaults to the current UTC time.

        Raises:
            SigningError: If the secret is empty, the identity is invalid,
                or encoding fails.
        """
        if not self._secret:
            raise SigningError("JWT signing secret is not configured")
        if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
            raise SigningError("user_id must be a positive integer")
        if not isinstance(email, str) or not email.strip():
            raise SigningError("email must be a non-empty string")

        issued_at = now or datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "user_id": user_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "nbf": int(issued_at.timestamp()),
            "exp": int((issued_at + TOKEN_LIFETIME).timestamp()),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise SigningError("Failed to sign token") from exc

    def verify(self, token: str) -> Claim:
        """
        Verify *token* and return its claim.

        Raises:
            TokenError: ``SIGNATURE_MISMATCH`` for a bad signature or an
                unexpected algorithm, ``EXPIRED`` past ``exp``,
                ``NOT_YET_VALID`` before ``nbf``/``iat``, ``MALFORMED`` for
                anything else.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": REQUIRED_TOKEN_CLAIMS},
                leeway=self._leeway,
            )
        # InvalidSignatureError subclasses DecodeError, so it must come first.
        except jwt.InvalidSignatureError as exc:
            raise TokenError(TokenErrorKind.SIGNATURE_MISMATCH) from exc
        except jwt.InvalidAlgorithmError as exc:
            raise TokenError(TokenErrorKind.SIGNATURE_MISMATCH) from exc
        except jwt.ExpiredSignatureError as exc:
            raise TokenError(TokenErrorKind.EXPIRED) from exc
        except jwt.ImmatureSignatureError as exc:
            raise TokenError(TokenErrorKind.NOT_YET_VALID) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenError(TokenErrorKind.MALFORMED) from exc

        user_id = payload["user_id"]
        email = payload["email"]
        if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
            raise TokenError(TokenErrorKind.MALFORMED, "Invalid user_id claim")
        if not isinstance(email, str) or not email.strip():
            raise TokenError(TokenErrorKind.MALFORMED, "Invalid email claim")

        return Claim(
            user_id=user_id,
            email=email,
            issued_at=_from_epoch(payload["iat"]),
            not_before=_from_epoch(payload["nbf"]),
            expires_at=_from_epoch(payload["exp"]),
        )
