"""
Shared pytest fixtures for the task API test suite.

Provides the Flask application, HTTP client, a clean database per test,
factories for users and tasks, and bearer-token headers for two distinct
users so ownership rules can be exercised from both sides.

Key Concepts Demonstrated:
- Session-scoped app vs function-scoped client/database for isolation
- Factory fixtures (user_factory, task_factory) for flexible test data
- Tokens minted by the application's own TokenService
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime

import pytest
from faker import Faker

TEST_JWT_SECRET = "test-jwt-secret-key-for-local-tests-1234567890"

# Set testing environment before importing the app
os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_SECRET_KEY"] = TEST_JWT_SECRET

from task_api import create_app, db
from task_api.models import Task, TaskStatus, User
from task_api.passwords import hash_password
from task_api.tokens import TokenService

fake = Faker()

DEFAULT_PASSWORD = "password123"


def bearer_headers(token: str) -> dict[str, str]:
    """Build JSON API headers carrying a bearer token."""
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """Create the application once for the whole test session."""
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a fresh test client for every test."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test.

    Creates all tables before the test, then rolls back anything
    uncommitted and drops every table afterwards.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def token_service(app) -> TokenService:
    """The token service the application verifies requests with."""
    return app.extensions["token_service"]


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session) -> Callable[..., User]:
    """
    Factory fixture that persists User rows.

    Emails default to unique Faker addresses; the password defaults to
    ``DEFAULT_PASSWORD`` so login tests know what to send.
    """

    def _create_user(
        name: str = "Test User",
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            name=name,
            email=(email or fake.unique.email()).lower(),
            password_hash=hash_password(password),
        )
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def task_factory(db_session) -> Callable[..., Task]:
    """
    Factory fixture that persists Task rows for a given owner.

    ``created_at`` may be pinned so ordering tests do not depend on clock
    resolution.
    """

    def _create_task(
        owner: User,
        *,
        title: str | None = None,
        description: str | None = None,
        status: str = TaskStatus.PENDING.value,
        created_at: datetime | None = None,
    ) -> Task:
        task = Task(
            user_id=owner.id,
            title=title or fake.sentence(nb_words=4),
            description=description or fake.paragraph(),
            status=status,
        )
        if created_at is not None:
            task.created_at = created_at
            task.updated_at = created_at
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def user_one(user_factory) -> User:
    return user_factory(name="User One", email="user.one@example.com")


@pytest.fixture
def user_two(user_factory) -> User:
    return user_factory(name="User Two", email="user.two@example.com")


@pytest.fixture
def api_headers(token_service, user_one) -> dict[str, str]:
    """Headers authenticating as ``user_one``."""
    return bearer_headers(token_service.issue(user_one.id, user_one.email))


@pytest.fixture
def second_user_headers(token_service, user_two) -> dict[str, str]:
    """Headers authenticating as ``user_two``."""
    return bearer_headers(token_service.issue(user_two.id, user_two.email))


@pytest.fixture
def sample_task(task_factory, user_one) -> Task:
    """A single known task owned by ``user_one``."""
    return task_factory(
        user_one,
        title="Sample Task",
        description="This is a sample task for testing",
        status=TaskStatus.PENDING.value,
    )
