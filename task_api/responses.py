"""
Standard JSON response envelope.

Every endpoint answers with ``{"success": bool, "message"?, "data"?, "error"?}``.
Keys without a value are omitted rather than sent as ``null``.
"""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify


def _envelope(
    success: bool,
    message: str | None = None,
    data: Any = None,
    error: str | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if error:
        body["error"] = error
    return body


def respond_success(message: str, data: Any = None) -> tuple[Response, int]:
    """Return a 200 envelope carrying *message* and optional *data*."""
    return jsonify(_envelope(True, message=message, data=data)), 200


def respond_created(message: str, data: Any = None) -> tuple[Response, int]:
    """Return a 201 envelope for a freshly created resource."""
    return jsonify(_envelope(True, message=message, data=data)), 201


def respond_error(status_code: int, message: str) -> tuple[Response, int]:
    """Return a failure envelope with *message* in the ``error`` field."""
    return jsonify(_envelope(False, error=message)), status_code
