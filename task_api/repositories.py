"""
Repository ports and their SQLAlchemy implementations.

The query engine and the route handlers depend on the ``TaskRepository`` and
``UserRepository`` protocols rather than on the ORM, which keeps the
listing and ownership logic testable against an in-memory fake.

Every task query excludes soft-deleted rows.  ``create`` and ``update``
commit and then re-read the row, so callers always get back what the store
actually holds (server defaults, ``updated_at``, the eager-loaded owner).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ConflictError, InternalError
from .models import Task, User

logger = logging.getLogger(__name__)

# Column names a listing may be ordered by.  Anything else is resolved to
# created_at by the query engine before it reaches a repository.
SORTABLE_FIELDS = ("created_at", "updated_at", "title", "status")


class TaskRepository(Protocol):
    """Persistence operations the task endpoints need."""

    def create(self, task: Task) -> Task: ...

    def get(self, task_id: int) -> Task | None: ...

    def update(self, task: Task) -> Task: ...

    def soft_delete(self, task: Task) -> None: ...

    def count_for_user(self, user_id: int, status: str | None) -> int: ...

    def list_for_user(
        self,
        user_id: int,
        *,
        status: str | None,
        sort_by: str,
        descending: bool,
        limit: int,
        offset: int,
    ) -> Sequence[Task]: ...


class UserRepository(Protocol):
    """Persistence operations registration and login need."""

    def create(self, user: User) -> User: ...

    def get_by_email(self, email: str) -> User | None: ...


class SqlAlchemyTaskRepository:
    """``TaskRepository`` backed by a Flask-SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _live_tasks(self):
        return select(Task).where(Task.deleted_at.is_(None))

    def _commit(self, action: str) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise InternalError(f"Failed to {action} task") from exc

    def _reload(self, task: Task) -> Task:
        self._session.refresh(task)
        return task

    def create(self, task: Task) -> Task:
        self._session.add(task)
        self._commit("create")
        logger.info("Created task id=%s for user_id=%s", task.id, task.user_id)
        return self._reload(task)

    def get(self, task_id: int) -> Task | None:
        return self._session.scalar(self._live_tasks().where(Task.id == task_id))

    def update(self, task: Task) -> Task:
        self._commit("update")
        logger.info("Updated task id=%s", task.id)
        return self._reload(task)

    def soft_delete(self, task: Task) -> None:
        task.deleted_at = datetime.now(timezone.utc)
        self._commit("delete")
        logger.info("Soft-deleted task id=%s", task.id)

    def _user_filter(self, stmt, user_id: int, status: str | None):
        stmt = stmt.where(Task.user_id == user_id, Task.deleted_at.is_(None))
        if status:
            stmt = stmt.where(Task.status == status)
        return stmt

    def count_for_user(self, user_id: int, status: str | None) -> int:
        stmt = self._user_filter(select(func.count(Task.id)), user_id, status)
        return self._session.scalar(stmt) or 0

    def list_for_user(
        self,
        user_id: int,
        *,
        status: str | None,
        sort_by: str,
        descending: bool,
        limit: int,
        offset: int,
    ) -> Sequence[Task]:
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Unsupported sort field: {sort_by}")

        column = getattr(Task, sort_by)
        ordering = (
            (column.desc(), Task.id.desc()) if descending else (column.asc(), Task.id.asc())
        )
        stmt = (
            self._user_filter(select(Task), user_id, status)
            .order_by(*ordering)
            .limit(limit)
            .offset(offset)
        )
        return self._session.scalars(stmt).unique().all()


class SqlAlchemyUserRepository:
    """``UserRepository`` backed by a Flask-SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, user: User) -> User:
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email.
            self._session.rollback()
            raise ConflictError("Email already registered") from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise InternalError("Failed to create user") from exc
        self._session.refresh(user)
        logger.info("Registered user id=%s", user.id)
        return user

    def get_by_email(self, email: str) -> User | None:
        return self._session.scalar(select(User).where(User.email == email))
