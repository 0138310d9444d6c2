"""
Task API Flask application factory.

Provides the ``create_app`` factory that assembles the task-management API:
configuration, the SQLAlchemy extension, the token service, request logging,
error handlers, CORS and the two route blueprints.

The factory builds every piece of shared state exactly once per
application.  The token service (holding the signing secret) is stored in
``app.extensions`` and handed explicitly to the code that needs it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event

from config import get_config, load_jwt_secret

from .tokens import TokenService

db = SQLAlchemy()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    db_parent = Path(sqlite_path).parent
    db_parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the task API application.

    Args:
        config_name: Configuration environment name (``"development"``,
            ``"testing"``, ``"production"``).  When ``None``, the value is
            read from the ``FLASK_ENV`` environment variable.

    Returns:
        A fully configured Flask application with its database tables created.

    Raises:
        RuntimeError: If no JWT signing secret is configured.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logger.info("Creating task API app with config: %s", config_class.__name__)

    app.extensions["token_service"] = TokenService(
        load_jwt_secret(testing=bool(app.config.get("TESTING"))),
        leeway=int(app.config.get("JWT_CLOCK_SKEW_SECONDS", 0)),
    )

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    db.init_app(app)

    from .errors import register_error_handlers
    from .request_log import register_request_logging
    from .routes.auth import auth_bp
    from .routes.tasks import tasks_bp

    register_error_handlers(app)
    register_request_logging(app)

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
        expose_headers=["Link"],
        supports_credentials=True,
        max_age=app.config["CORS_MAX_AGE"],
    )

    # Both blueprints share the /api prefix: /api/register, /api/login,
    # /api/tasks and /api/health.
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(tasks_bp, url_prefix="/api")

    with app.app_context():
        if db.engine.dialect.name == "sqlite":
            event.listen(db.engine, "connect", _enable_sqlite_foreign_keys)
        db.create_all()
        logger.info("Database tables created")

    return app
