"""
Password hashing and verification.

Thin wrapper around Werkzeug's password helpers.  ``generate_password_hash``
draws a fresh random salt on every call, so hashing the same password twice
never yields the same string; ``check_password_hash`` compares digests in
constant time.

Hashes are stored in Werkzeug's ``method$salt$digest`` encoding, e.g.
``scrypt:32768:8:1$<salt>$<hex digest>``.
"""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from .errors import HashingError

_KNOWN_METHODS = ("scrypt", "pbkdf2")


def hash_password(password: str) -> str:
    """
    Produce a salted, irreversible hash of *password*.

    Raises:
        HashingError: If *password* is not a string or hashing fails.
    """
    if not isinstance(password, str):
        raise HashingError("Password must be a string")
    try:
        return generate_password_hash(password)
    except (ValueError, TypeError) as exc:
        raise HashingError("Failed to hash password") from exc


def _is_recognised_hash(pwhash: object) -> bool:
    if not isinstance(pwhash, str):
        return False
    parts = pwhash.split("$", 2)
    if len(parts) != 3 or not parts[1] or not parts[2]:
        return False
    method = parts[0].split(":", 1)[0]
    return method in _KNOWN_METHODS


def verify_password(pwhash: str, candidate: str) -> bool:
    """
    Check *candidate* against a stored hash.

    Returns ``False`` on a mismatch; a wrong password is an expected outcome,
    not an error.

    Raises:
        HashingError: If *pwhash* is not a recognised hash encoding.
    """
    if not _is_recognised_hash(pwhash):
        raise HashingError("Unrecognised password hash encoding")
    try:
        return check_password_hash(pwhash, candidate)
    except (ValueError, TypeError) as exc:
        # Raised for corrupt method parameters such as "scrypt:abc".
        raise HashingError("Unrecognised password hash encoding") from exc
