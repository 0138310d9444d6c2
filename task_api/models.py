"""
Database models for the task API.

Defines the SQLAlchemy models for users and their tasks.  Tasks reference
their owner through a real foreign key and are soft-deleted: ``deleted_at``
is stamped instead of removing the row, and every repository query filters
on it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from . import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_utc_iso(value: datetime | None) -> str | None:
    """
    Convert a datetime to an ISO-8601 UTC string.

    SQLite returns naive datetime values even when timezone-aware columns
    are declared.  Naive values are assumed to be UTC; aware values are
    converted to UTC before formatting.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


class TaskStatus(str, Enum):
    """Enumeration of possible task statuses."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class User(db.Model):
    """
    Registered user.

    Attributes:
        id: Auto-incrementing primary key.
        name: Display name (letters and spaces).
        email: Unique, lower-cased email address used to log in.
        password_hash: Salted one-way hash; never serialised.
        created_at: Timestamp of registration (UTC).
        updated_at: Timestamp of the last modification (UTC).
    """

    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(100), nullable=False)
    # Indexed because registration and login both look users up by email
    email: str = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    tasks = db.relationship("Task", back_populates="owner", lazy="select")

    def to_dict(self) -> dict[str, Any]:
        """
        Return a user-safe dictionary representation.

        ``password_hash`` is excluded so the output can go straight into a
        JSON response.
        """
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": _to_utc_iso(self.created_at),
            "updated_at": _to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class Task(db.Model):
    """
    Task owned by a single user.

    Attributes:
        id: Auto-incrementing primary key.
        user_id: Owning user; enforced by a foreign key.
        title: Short summary (max 255 characters).
        description: Optional details (max 1000 characters).
        status: Lifecycle status (see ``TaskStatus``).
        created_at: Timestamp of creation (UTC).
        updated_at: Timestamp of last modification (UTC, auto-updated).
        deleted_at: Soft-delete marker; ``None`` while the task is live.
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    title: str = db.Column(db.String(255), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    status: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskStatus.PENDING.value,
    )
    created_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
    deleted_at: datetime | None = db.Column(
        db.DateTime(timezone=True), nullable=True, index=True
    )

    # Eager-loaded so a page of tasks serialises its owners without N+1 queries
    owner = db.relationship("User", back_populates="tasks", lazy="joined")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialise the task, including a summary of its owner."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "created_at": _to_utc_iso(self.created_at),
            "updated_at": _to_utc_iso(self.updated_at),
            "user": self.owner.to_dict() if self.owner is not None else None,
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
