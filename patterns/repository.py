"""Async repository pattern for database access.

Provides a generic base repository that owns its unit of work: every public
operation opens one session on the shared ``Database``, commits before
returning and rolls back on error. Storage failures of any kind are wrapped
into a single ``RepositoryError`` channel; "not found" is a normal result
(``None`` / ``False``), never an exception.

Example: TaskRepository extending BaseRepository.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Generic, Sequence, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import Database, DatabaseUnavailableError
from core.models.base import Base

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

# Exceptions treated as storage-layer failures
STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    SQLAlchemyError,
    DatabaseUnavailableError,
    OSError,
)


class RepositoryError(Exception):
    """A storage operation failed.

    ``message`` is human-readable; ``cause`` keeps the original exception
    for logging. Callers must not show ``cause`` to end users.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        action: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.action = action

    @property
    def summary(self) -> str:
        """Caller-safe description without storage internals."""
        if self.action:
            return f"Failed to {self.action}"
        return "Storage operation failed"


# ---------------------------------------------------------------------------
# Type variable for model classes
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=Base)


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class BaseRepository(Generic[ModelT]):
    """Generic async repository with row-level CRUD helpers.

    Subclass and set `model` to your SQLAlchemy model::

        class TaskRepository(BaseRepository[TaskRow]):
            model = TaskRow
            error_class = TaskRepositoryError
            entity_name = "task"

            async def find_all(self) -> list[Task]:
                async with self.unit_of_work("fetch tasks") as session:
                    rows = await self._select_all(session)
                    return [row_to_task(r) for r in rows]
    """

    model: type[ModelT]
    error_class: type[RepositoryError] = RepositoryError
    entity_name: str = "item"

    def __init__(self, database: Database):
        self.database = database

    # -- Unit of work --

    @asynccontextmanager
    async def unit_of_work(self, action: str) -> AsyncGenerator[AsyncSession, None]:
        """Open a session for one operation, translating storage errors.

        ``action`` completes the sentence "Failed to ..." in error messages.
        """
        try:
            async with self.database.session() as session:
                yield session
        except STORAGE_ERRORS as exc:
            raise self.error_class(
                f"Failed to {action}: {exc}", cause=exc, action=action
            ) from exc

    # -- Row helpers (run inside a unit of work) --

    async def _select_all(self, session: AsyncSession) -> Sequence[ModelT]:
        result = await session.execute(select(self.model))
        return result.scalars().all()

    async def _select_one(self, session: AsyncSession, item_id: Any) -> ModelT | None:
        return await session.get(self.model, item_id)

    async def _delete_one(self, session: AsyncSession, item_id: Any) -> bool:
        result = await session.execute(delete(self.model).where(self.model.id == item_id))
        return (result.rowcount or 0) > 0

    # -- Generic delete --

    async def delete(self, item_id: Any) -> bool:
        """Delete an item. Returns True if deleted, False if not found."""
        async with self.unit_of_work(f"delete {self.entity_name} {item_id}") as session:
            deleted = await self._delete_one(session, item_id)
        logger.debug("Deleted %s id=%s found=%s", self.entity_name, item_id, deleted)
        return deleted
