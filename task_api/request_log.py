"""
Per-request access logging.

Logs one line per request with method, path, remote address, status and
duration.  Failed responses (status >= 400) are logged at WARNING together
with their JSON body.  Request bodies are never logged because they carry
passwords.
"""

from __future__ import annotations

import logging
import time

from flask import Flask, Response, g, request

logger = logging.getLogger(__name__)


def register_request_logging(app: Flask) -> None:
    """Attach the before/after request hooks to *app*."""

    @app.before_request
    def _start_timer() -> None:
        g.request_started_at = time.perf_counter()

    @app.after_request
    def _log_request(response: Response) -> Response:
        started_at = g.pop("request_started_at", None)
        duration_ms = (time.perf_counter() - started_at) * 1000 if started_at else 0.0
        logger.info(
            "[%s] %s %s | Status: %d | Duration: %.1fms",
            request.method,
            request.full_path.rstrip("?"),
            request.remote_addr,
            response.status_code,
            duration_ms,
        )
        if response.status_code >= 400 and response.is_json:
            logger.warning("Response error: %s", response.get_data(as_text=True).strip())
        return response
