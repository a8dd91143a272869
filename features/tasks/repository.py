"""Task repository: async CRUD over the ``tasks`` table.

Translates between the ``Task`` entity and ``TaskRow`` through a statically
declared field-to-column table. Updates are read-merge-write inside one
transaction without a version check, so two concurrent updates of the same
task resolve as last-write-wins.
"""

import json
import logging
import uuid

from fastapi import Depends
from pydantic import ValidationError

from core.database import Database, get_database
from features.tasks.models.db_models import TaskRow
from features.tasks.models.schemas import Task, TaskCreate, TaskUpdate
from patterns.repository import BaseRepository, RepositoryError

logger = logging.getLogger(__name__)


class TaskRepositoryError(RepositoryError):
    """A task storage operation failed."""


# Entity field -> table column
FIELD_COLUMNS: dict[str, str] = {
    "title": "title",
    "details": "details",
    "due_date": "due_date",
    "status": "status",
    "priority": "priority",
    "tags": "tags",
}


# ---------------------------------------------------------------------------
# Row <-> entity mapping
# ---------------------------------------------------------------------------

def _encode_tags(tags: list[str] | None) -> str | None:
    if tags is None:
        return None
    return json.dumps(tags, ensure_ascii=False)


def _decode_tags(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    tags = json.loads(raw)
    if not isinstance(tags, list):
        raise ValueError(f"tags column holds {type(tags).__name__}, expected list")
    return tags


def task_to_columns(task: Task) -> dict[str, object]:
    """Column values for every mapped field of ``task`` (id excluded)."""
    values = {
        "title": task.title,
        "details": task.details,
        "due_date": task.due_date,
        "status": task.status.value,
        "priority": task.priority.value if task.priority else None,
        "tags": _encode_tags(task.tags),
    }
    return {FIELD_COLUMNS[name]: value for name, value in values.items()}


def row_to_task(row: TaskRow) -> Task:
    try:
        return Task(
            id=row.id,
            title=row.title,
            details=row.details,
            due_date=row.due_date,
            status=row.status or "pending",
            priority=row.priority,
            tags=_decode_tags(row.tags),
        )
    except (ValueError, ValidationError) as exc:
        raise TaskRepositoryError(
            f"Stored task {row.id} is malformed: {exc}",
            cause=exc,
            action="read stored tasks",
        ) from exc


# ---------------------------------------------------------------------------
# Task repository
# ---------------------------------------------------------------------------

class TaskRepository(BaseRepository[TaskRow]):
    """Repository for task CRUD operations."""

    model = TaskRow
    error_class = TaskRepositoryError
    entity_name = "task"

    async def find_all(self) -> list[Task]:
        """All stored tasks; empty list when there are none. No order guarantee."""
        async with self.unit_of_work("fetch tasks") as session:
            rows = await self._select_all(session)
            return [row_to_task(r) for r in rows]

    async def find_by_id(self, task_id: str) -> Task | None:
        async with self.unit_of_work(f"fetch task {task_id}") as session:
            row = await self._select_one(session, task_id)
            return row_to_task(row) if row else None

    async def create(self, data: TaskCreate) -> Task:
        """Persist a new task under a freshly generated UUID-v4 id."""
        task = Task.model_validate({"id": str(uuid.uuid4()), **data.model_dump()})
        async with self.unit_of_work("create task") as session:
            session.add(TaskRow(id=task.id, **task_to_columns(task)))
        logger.info("Task created id=%s status=%s", task.id, task.status.value)
        return task

    async def update(self, task_id: str, data: TaskUpdate) -> Task | None:
        """Merge the supplied fields onto the stored task. None if not found.

        Fields absent from ``data`` keep their stored values; supplied ones
        replace wholesale (``tags`` is replaced, never appended to).
        """
        async with self.unit_of_work(f"update task {task_id}") as session:
            row = await self._select_one(session, task_id)
            if row is None:
                return None
            merged = row_to_task(row).merged(data)
            for column, value in task_to_columns(merged).items():
                setattr(row, column, value)
        logger.info("Task updated id=%s fields=%s", task_id, sorted(data.model_fields_set))
        return merged

    async def delete(self, task_id: str) -> bool:
        """Delete a task. Returns True if a row was removed, False if absent."""
        deleted = await super().delete(task_id)
        if deleted:
            logger.info("Task deleted id=%s", task_id)
        return deleted


# ---------------------------------------------------------------------------
# FastAPI dependency factory
# ---------------------------------------------------------------------------

def get_task_repository(
    database: Database = Depends(get_database),
) -> TaskRepository:
    """FastAPI dependency for TaskRepository."""
    return TaskRepository(database)
