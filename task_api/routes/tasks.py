"""
REST API endpoints for tasks.

Every task endpoint is protected by ``require_auth`` and receives the
caller's verified claim as its ``claim`` argument.  Single-task endpoints
answer 400 for an id that is not an unsigned 32-bit number, then go through
``get_owned_task``, which answers 404 for an unknown id and 403 for a task
owned by someone else.

Endpoints:
    GET    /api/health          - Service health check (public)
    GET    /api/tasks           - List tasks (filter, sort, paginate)
    GET    /api/tasks/<id>      - Retrieve a single task
    POST   /api/tasks           - Create a new task
    PUT    /api/tasks/<id>      - Update a task (only the fields sent)
    DELETE /api/tasks/<id>      - Soft-delete a task
"""

from __future__ import annotations

import logging
import os
from typing import Any

from flask import Blueprint, Response, request

from .. import db
from ..auth import require_auth
from ..errors import ValidationError
from ..models import Task, TaskStatus
from ..queries import TaskFilter, get_owned_task, list_user_tasks
from ..repositories import SqlAlchemyTaskRepository
from ..responses import respond_created, respond_success
from ..tokens import Claim
from ..validation import is_valid_status, validate_task_description, validate_task_title
from . import json_body

logger = logging.getLogger(__name__)

tasks_bp = Blueprint("task_api", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


MAX_TASK_ID = 2**32 - 1


def _parse_task_id(raw: str) -> int:
    """
    Convert the URL segment to a task id.

    Only plain unsigned decimal numbers up to ``MAX_TASK_ID`` are accepted;
    anything else is a 400.
    """
    if not (raw.isascii() and raw.isdigit()):
        raise ValidationError("Invalid task ID")
    task_id = int(raw)
    if task_id > MAX_TASK_ID:
        raise ValidationError("Invalid task ID")
    return task_id


def _clean_title(value: Any) -> str:
    """Return the trimmed title or raise a 400."""
    if not isinstance(value, str):
        raise ValidationError("Title is required")
    is_valid, error = validate_task_title(value)
    if not is_valid:
        raise ValidationError(error)
    return value.strip()


def _clean_description(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Description must be a string")
    is_valid, error = validate_task_description(value)
    if not is_valid:
        raise ValidationError(error)
    return value


def _clean_status(value: Any) -> str:
    if not isinstance(value, str) or not is_valid_status(value):
        raise ValidationError("Invalid status value")
    return value


def _task_repository() -> SqlAlchemyTaskRepository:
    return SqlAlchemyTaskRepository(db.session)


# =====================================================================
# API Endpoints
# =====================================================================


@tasks_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Public liveness probe for load balancers and orchestrators."""
    return respond_success(
        "Service is healthy",
        {
            "status": "healthy",
            "service": "task-api",
            "environment": os.getenv("ENVIRONMENT", "unknown"),
        },
    )


@tasks_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task(claim: Claim) -> tuple[Response, int]:
    """
    Create a task owned by the caller.

    Request Body (JSON):
        title: Task title (required, trimmed, max 255 characters)
        description: Task description (optional, max 1000 characters)
        status: Task status (optional, default: pending)
    """
    data = json_body()
    status = data.get("status") or TaskStatus.PENDING.value

    task = Task(
        user_id=claim.user_id,
        title=_clean_title(data.get("title")),
        description=_clean_description(data.get("description")),
        status=_clean_status(status),
    )
    task = _task_repository().create(task)
    return respond_created("Task created successfully", task.to_dict())


@tasks_bp.route("/tasks", methods=["GET"])
@require_auth
def list_tasks(claim: Claim) -> tuple[Response, int]:
    """
    List the caller's tasks.

    Query Parameters:
        status: Filter by status (pending, in_progress, completed)
        page: 1-based page number (default 1)
        limit: Page size (default 10, max 100)
        sort_by: created_at, updated_at, title or status (default created_at)
        order: asc or desc (default desc)
    """
    logger.info("Listing tasks for user_id=%s", claim.user_id)
    task_filter = TaskFilter.from_query_args(request.args)
    result = list_user_tasks(_task_repository(), claim.user_id, task_filter)
    return respond_success("Tasks fetched successfully", result.to_dict())


@tasks_bp.route("/tasks/<task_id>", methods=["GET"])
@require_auth
def get_task(task_id: str, claim: Claim) -> tuple[Response, int]:
    """Retrieve one of the caller's tasks."""
    task = get_owned_task(_task_repository(), _parse_task_id(task_id), claim)
    return respond_success("Task fetched successfully", task.to_dict())


@tasks_bp.route("/tasks/<task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: str, claim: Claim) -> tuple[Response, int]:
    """
    Update one of the caller's tasks.

    Only the fields present in the JSON body are modified.  A title that is
    blank after trimming is rejected; an empty ``status`` leaves the status
    unchanged.
    """
    repo = _task_repository()
    task = get_owned_task(repo, _parse_task_id(task_id), claim)
    data = json_body()

    # Validate everything before touching the row.
    changes: dict[str, Any] = {}
    if "title" in data:
        if isinstance(data["title"], str) and not data["title"].strip():
            raise ValidationError("Title cannot be empty")
        changes["title"] = _clean_title(data["title"])
    if "description" in data:
        changes["description"] = _clean_description(data["description"])
    if "status" in data and data["status"] != "":
        changes["status"] = _clean_status(data["status"])

    for field, value in changes.items():
        setattr(task, field, value)

    task = repo.update(task)
    return respond_success("Task updated successfully", task.to_dict())


@tasks_bp.route("/tasks/<task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: str, claim: Claim) -> tuple[Response, int]:
    """Soft-delete one of the caller's tasks."""
    repo = _task_repository()
    task = get_owned_task(repo, _parse_task_id(task_id), claim)
    repo.soft_delete(task)
    return respond_success("Task deleted successfully")
