"""
Task query engine.

Builds a user's filtered, sorted and paginated task listing, and performs the
ownership check shared by every single-task operation.  All persistence goes
through a :class:`~task_api.repositories.TaskRepository`, so the rules here
hold for any store.

Listing rules:
    - ``status`` must be one of the task statuses when given.
    - ``total`` counts every matching task, independent of pagination.
    - ``page < 1`` becomes 1; ``limit < 1`` becomes 10; ``limit > 100``
      becomes 100.  Query values outside the signed 32-bit range count as
      unparseable and take their defaults.
    - ``sort_by`` outside the sortable columns resolves to ``created_at``,
      so arbitrary column names never reach the store.
    - ``order == "asc"`` sorts ascending, anything else descending.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import AuthzError, NotFoundError, ValidationError
from .models import Task
from .repositories import SORTABLE_FIELDS, TaskRepository
from .tokens import Claim
from .validation import is_valid_status

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_SORT_FIELD = "created_at"
DEFAULT_ORDER = "desc"

# Query integers outside a signed 32-bit range are treated as unparseable.
MAX_QUERY_INT = 2**31 - 1


def _parse_int(raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if not -MAX_QUERY_INT - 1 <= value <= MAX_QUERY_INT:
        return default
    return value


@dataclass(frozen=True)
class TaskFilter:
    """Listing parameters as received from the client."""

    status: str | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = DEFAULT_SORT_FIELD
    order: str = DEFAULT_ORDER

    @classmethod
    def from_query_args(cls, args: Mapping[str, str]) -> TaskFilter:
        """
        Build a filter from request query arguments.

        Non-numeric ``page``/``limit`` values fall back to their defaults;
        range normalisation happens in :func:`list_user_tasks`.
        """
        return cls(
            status=args.get("status") or None,
            page=_parse_int(args.get("page"), DEFAULT_PAGE),
            limit=_parse_int(args.get("limit"), DEFAULT_LIMIT),
            sort_by=args.get("sort_by") or DEFAULT_SORT_FIELD,
            order=args.get("order") or DEFAULT_ORDER,
        )


@dataclass(frozen=True)
class TaskPage:
    """One page of a user's tasks plus pagination metadata."""

    tasks: Sequence[Task]
    total: int
    page: int
    limit: int
    total_pages: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [task.to_dict() for task in self.tasks],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
        }


def resolve_sort_field(sort_by: str | None) -> str:
    """Return *sort_by* if it is sortable, otherwise ``created_at``."""
    if sort_by in SORTABLE_FIELDS:
        return sort_by
    return DEFAULT_SORT_FIELD


def list_user_tasks(
    repo: TaskRepository, user_id: int, task_filter: TaskFilter
) -> TaskPage:
    """
    Return one page of *user_id*'s tasks matching *task_filter*.

    Raises:
        ValidationError: If ``task_filter.status`` is not a task status.
    """
    status = task_filter.status
    if status is not None and not is_valid_status(status):
        raise ValidationError("Invalid status value")

    total = repo.count_for_user(user_id, status)

    page = task_filter.page if task_filter.page >= 1 else DEFAULT_PAGE
    page = min(page, MAX_QUERY_INT)
    limit = task_filter.limit if task_filter.limit >= 1 else DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)
    offset = (page - 1) * limit

    tasks = repo.list_for_user(
        user_id,
        status=status,
        sort_by=resolve_sort_field(task_filter.sort_by),
        descending=task_filter.order != "asc",
        limit=limit,
        offset=offset,
    )

    return TaskPage(
        tasks=tasks,
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


def get_owned_task(repo: TaskRepository, task_id: int, claim: Claim) -> Task:
    """
    Fetch a task the caller owns.

    A task that exists under another owner answers 403 rather than 404, so
    existence is distinguishable from ownership.

    Raises:
        NotFoundError: No live task has *task_id*.
        AuthzError: The task belongs to a different user.
    """
    task = repo.get(task_id)
    if task is None:
        raise NotFoundError("Task not found")
    if task.user_id != claim.user_id:
        raise AuthzError("Access denied")
    return task
