"""
Routes package for the task API.

This package contains route blueprints:
- auth: account registration and login
- tasks: authenticated task CRUD and the health check

plus the request-body helper both blueprints share.
"""

from __future__ import annotations

from typing import Any

from flask import request

from ..errors import ValidationError


def json_body() -> dict[str, Any]:
    """Return the request body as a dict or raise a 400."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid request body")
    return data
