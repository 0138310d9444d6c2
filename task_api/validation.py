"""
Input validation rules for users and tasks.

Each validator returns a two-element tuple ``(is_valid, error_message)``;
``error_message`` is ``None`` when the value is valid.  Validators never
mutate their input; callers trim/normalise before storing.
"""

from __future__ import annotations

import re

from email_validator import EmailNotValidError, validate_email as _check_email

from .models import TaskStatus

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100
TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000

_NAME_PATTERN = re.compile(r"[A-Za-z\s]+")


def validate_name(name: str) -> tuple[bool, str | None]:
    """Names are 2-100 characters after trimming, letters and spaces only."""
    name = name.strip()
    if len(name) < NAME_MIN_LENGTH:
        return False, f"Name must be at least {NAME_MIN_LENGTH} characters long"
    if len(name) > NAME_MAX_LENGTH:
        return False, f"Name must not exceed {NAME_MAX_LENGTH} characters"
    if not _NAME_PATTERN.fullmatch(name):
        return False, "Name can only contain letters and spaces"
    return True, None


def validate_email(email: str) -> tuple[bool, str | None]:
    """Check the address syntax only; no DNS lookup is performed."""
    try:
        _check_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False, "Invalid email format"
    return True, None


def validate_password(password: str) -> tuple[bool, str | None]:
    if len(password) < PASSWORD_MIN_LENGTH:
        return False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    if len(password) > PASSWORD_MAX_LENGTH:
        return False, f"Password must not exceed {PASSWORD_MAX_LENGTH} characters"
    return True, None


def validate_task_title(title: str) -> tuple[bool, str | None]:
    title = title.strip()
    if not title:
        return False, "Title is required"
    if len(title) > TITLE_MAX_LENGTH:
        return False, f"Title must not exceed {TITLE_MAX_LENGTH} characters"
    return True, None


def validate_task_description(description: str) -> tuple[bool, str | None]:
    if len(description) > DESCRIPTION_MAX_LENGTH:
        return False, f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters"
    return True, None


def is_valid_status(status: str) -> bool:
    """Return True when *status* is one of the ``TaskStatus`` values."""
    return status in {s.value for s in TaskStatus}
