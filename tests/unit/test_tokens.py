"""
Unit tests for token issuance and verification.

Exercises ``TokenService`` against valid tokens and a comprehensive set of
invalid ones (expired, not yet valid, wrong secret, tampered, wrong
algorithm, missing or ill-typed claims).

Key Concepts Demonstrated:
- Pure unit testing with no database or HTTP layer
- Boundary testing for time-sensitive logic (24h lifetime, leeway)
- Algorithm-confusion attack prevention (none, HS512)
- Asserting the precise failure kind, not just "it failed"
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from task_api.errors import SigningError, TokenError, TokenErrorKind
from task_api.tokens import TOKEN_LIFETIME, TokenService

pytestmark = pytest.mark.unit

SECRET = "unit-test-secret-key-with-plenty-of-entropy-0123456789"
OTHER_SECRET = "another-secret-key-that-is-long-enough-9876543210"


@pytest.fixture
def service() -> TokenService:
    return TokenService(SECRET)


def _claims(**overrides) -> dict:
    """Build a valid claim set with a 1-hour expiry."""
    now = datetime.now(timezone.utc)
    claims = {
        "user_id": 1,
        "email": "user@example.com",
        "iat": int(now.timestamp()),
        "nbf": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
    }
    claims.update(overrides)
    return claims


def _kind_of(service: TokenService, token: str) -> TokenErrorKind:
    with pytest.raises(TokenError) as exc_info:
        service.verify(token)
    return exc_info.value.kind


def test_issue_then_verify_round_trips_identity(service):
    """Test that a fresh token verifies to the same user id and email."""
    # Act
    claim = service.verify(service.issue(7, "alice@example.com"))

    # Assert
    assert claim.user_id == 7
    assert claim.email == "alice@example.com"


def test_issued_token_lives_for_24_hours(service):
    """Test the fixed lifetime and that nbf equals iat."""
    # Arrange
    issued_at = datetime.now(timezone.utc).replace(microsecond=0)

    # Act
    claim = service.verify(service.issue(1, "a@example.com", now=issued_at))

    # Assert
    assert claim.issued_at == issued_at
    assert claim.not_before == issued_at
    assert claim.expires_at - claim.issued_at == TOKEN_LIFETIME


def test_issued_token_uses_hs256(service):
    header = jwt.get_unverified_header(service.issue(1, "a@example.com"))

    assert header["alg"] == "HS256"


def test_token_past_its_window_is_expired(service):
    """Test that a token issued 25 hours ago fails with EXPIRED."""
    # Arrange
    token = service.issue(
        1, "a@example.com", now=datetime.now(timezone.utc) - timedelta(hours=25)
    )

    # Act & Assert
    assert _kind_of(service, token) is TokenErrorKind.EXPIRED


def test_token_from_the_future_is_not_yet_valid(service):
    """Test that nbf in the future fails with NOT_YET_VALID."""
    # Arrange
    token = service.issue(
        1, "a@example.com", now=datetime.now(timezone.utc) + timedelta(hours=1)
    )

    # Act & Assert
    assert _kind_of(service, token) is TokenErrorKind.NOT_YET_VALID


def test_token_signed_with_other_secret_is_signature_mismatch(service):
    """Test that a token from a different secret is rejected as SIGNATURE_MISMATCH."""
    # Arrange
    token = TokenService(OTHER_SECRET).issue(1, "a@example.com")

    # Act & Assert
    assert _kind_of(service, token) is TokenErrorKind.SIGNATURE_MISMATCH


def test_tampered_payload_is_signature_mismatch(service):
    """Test that swapping in another payload invalidates the signature."""
    # Arrange
    header, _, signature = service.issue(1, "a@example.com").split(".")
    forged_payload = jwt.encode(_claims(user_id=2), OTHER_SECRET, algorithm="HS256").split(".")[1]
    forged = f"{header}.{forged_payload}.{signature}"

    # Act & Assert
    assert _kind_of(service, forged) is TokenErrorKind.SIGNATURE_MISMATCH


def test_none_algorithm_is_rejected(service):
    """Test that an unsigned 'none' token is rejected (algorithm confusion)."""
    # Arrange
    token = jwt.encode(_claims(), "", algorithm="none")

    # Act & Assert
    assert _kind_of(service, token) is TokenErrorKind.SIGNATURE_MISMATCH


def test_other_hmac_algorithm_is_rejected(service):
    """Test that HS512 is refused even with the right secret."""
    # Arrange
    token = jwt.encode(_claims(), SECRET, algorithm="HS512")

    # Act & Assert
    assert _kind_of(service, token) is TokenErrorKind.SIGNATURE_MISMATCH


@pytest.mark.parametrize("token", ["not-a-jwt", "", "a.b.c"])
def test_garbage_is_malformed(service, token):
    assert _kind_of(service, token) is TokenErrorKind.MALFORMED


@pytest.mark.parametrize("missing", ["user_id", "email", "iat", "nbf", "exp"])
def test_missing_required_claim_is_malformed(service, missing):
    """Test that each of the five claims is mandatory."""
    # Arrange
    claims = _claims()
    claims.pop(missing)
    token = jwt.encode(claims, SECRET, algorithm="HS256")

    # Act & Assert
    assert _kind_of(service, token) is TokenErrorKind.MALFORMED


@pytest.mark.parametrize(
    "overrides",
    [{"user_id": "1"}, {"user_id": 0}, {"user_id": True}, {"email": ""}, {"email": 42}],
)
def test_ill_typed_identity_claims_are_malformed(service, overrides):
    # Arrange
    token = jwt.encode(_claims(**overrides), SECRET, algorithm="HS256")

    # Act & Assert
    assert _kind_of(service, token) is TokenErrorKind.MALFORMED


def test_leeway_accepts_recently_expired_token():
    """Test that a token expired 20 seconds ago passes with 30 seconds of leeway."""
    # Arrange
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        _claims(
            iat=int((now - timedelta(minutes=2)).timestamp()),
            nbf=int((now - timedelta(minutes=2)).timestamp()),
            exp=int((now - timedelta(seconds=20)).timestamp()),
        ),
        SECRET,
        algorithm="HS256",
    )

    # Act
    claim = TokenService(SECRET, leeway=30).verify(token)

    # Assert
    assert claim.user_id == 1


def test_issue_with_empty_secret_raises_signing_error():
    with pytest.raises(SigningError):
        TokenService("").issue(1, "a@example.com")


@pytest.mark.parametrize("user_id, email", [(0, "a@example.com"), (-1, "a@example.com"), (1, "  ")])
def test_issue_rejects_invalid_identity(service, user_id, email):
    with pytest.raises(SigningError):
        service.issue(user_id, email)
