"""Task service: repository calls plus response-cache bookkeeping.

Reads go through the TagCache under ``/tasks`` and ``/tasks/{id}``; every
successful mutation invalidates both tags. The router and the form helpers
both call into this layer so cache invalidation lives in one place.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from fastapi import Depends

from core.cache import TagCache, get_cache
from features.tasks.config import TasksConfig, config as default_config
from features.tasks.models.schemas import (
    TaskCreate,
    TaskUpdate,
    parse_form_fields,
    validate_create,
    validate_update,
)
from features.tasks.repository import TaskRepository, get_task_repository

logger = logging.getLogger(__name__)


class TaskService:
    """Cache-aware task operations returning JSON-ready dicts."""

    def __init__(
        self,
        repository: TaskRepository,
        cache: TagCache,
        config: TasksConfig = default_config,
    ):
        self.repository = repository
        self.cache = cache
        self.config = config

    # -- Reads --

    async def list_tasks(self) -> list[dict[str, Any]]:
        tag = self.config.collection_tag
        cached = self.cache.get(tag)
        if cached is not None:
            return cached
        generation = self.cache.generation(tag)
        tasks = [t.to_dict() for t in await self.repository.find_all()]
        self.cache.set(tag, tasks, generation=generation)
        return tasks

    async def get_task(self, task_id: str) -> Optional[dict[str, Any]]:
        tag = self.config.item_tag(task_id)
        cached = self.cache.get(tag)
        if cached is not None:
            return cached
        generation = self.cache.generation(tag)
        task = await self.repository.find_by_id(task_id)
        if task is None:
            return None
        payload = task.to_dict()
        self.cache.set(tag, payload, generation=generation)
        return payload

    # -- Mutations --

    async def create_task(self, data: TaskCreate) -> dict[str, Any]:
        task = await self.repository.create(data)
        self._invalidate(task.id)
        return task.to_dict()

    async def update_task(self, task_id: str, data: TaskUpdate) -> Optional[dict[str, Any]]:
        task = await self.repository.update(task_id, data)
        if task is None:
            return None
        self._invalidate(task_id)
        return task.to_dict()

    async def delete_task(self, task_id: str) -> bool:
        deleted = await self.repository.delete(task_id)
        if deleted:
            self._invalidate(task_id)
        return deleted

    # -- Form submissions --

    async def create_from_form(self, form: Mapping[str, Optional[str]]) -> dict[str, Any]:
        """Normalize and validate HTML form fields, then create.

        Raises TaskValidationError before touching storage.
        """
        return await self.create_task(validate_create(parse_form_fields(form)))

    async def update_from_form(
        self, task_id: str, form: Mapping[str, Optional[str]]
    ) -> Optional[dict[str, Any]]:
        return await self.update_task(task_id, validate_update(parse_form_fields(form)))

    def _invalidate(self, task_id: str) -> None:
        self.cache.invalidate(self.config.collection_tag, self.config.item_tag(task_id))


# ---------------------------------------------------------------------------
# FastAPI dependency factory
# ---------------------------------------------------------------------------

def get_task_service(
    repository: TaskRepository = Depends(get_task_repository),
    cache: TagCache = Depends(get_cache),
) -> TaskService:
    """FastAPI dependency for TaskService."""
    return TaskService(repository, cache)
