"""Test the task repository against a temporary SQLite database."""
import uuid

import pytest

from features.tasks.models.db_models import TaskRow
from features.tasks.models.schemas import TaskPriority, TaskStatus, validate_create, validate_update
from features.tasks.repository import FIELD_COLUMNS, TaskRepository, TaskRepositoryError


def test_field_columns_cover_table():
    assert set(FIELD_COLUMNS.values()) | {"id"} == set(TaskRow.__table__.columns.keys())


@pytest.mark.asyncio
async def test_find_all_empty(repo: TaskRepository):
    assert await repo.find_all() == []


@pytest.mark.asyncio
async def test_create_assigns_uuid4(repo: TaskRepository):
    task = await repo.create(validate_create({"title": "A"}))
    assert uuid.UUID(task.id).version == 4
    assert task.status == TaskStatus.PENDING


@pytest.mark.asyncio
async def test_create_then_fetch_round_trip(repo: TaskRepository):
    created = await repo.create(validate_create({
        "title": "Pay rent",
        "details": "Before the 5th",
        "dueDate": "2025-03-05T00:00:00Z",
        "priority": "high",
        "tags": ["home", "money", "home"],
    }))
    fetched = await repo.find_by_id(created.id)
    assert fetched == created
    assert fetched.tags == ["home", "money", "home"]
    assert fetched.priority == TaskPriority.HIGH


@pytest.mark.asyncio
async def test_unsupplied_fields_stay_absent(repo: TaskRepository):
    created = await repo.create(validate_create({"title": "Bare"}))
    fetched = await repo.find_by_id(created.id)
    assert fetched.details is None
    assert fetched.due_date is None
    assert fetched.priority is None
    assert fetched.tags is None
    assert fetched.to_dict() == {"id": created.id, "title": "Bare", "status": "pending"}


@pytest.mark.asyncio
async def test_empty_tags_round_trip_as_empty_list(repo: TaskRepository):
    created = await repo.create(validate_create({"title": "A", "tags": []}))
    fetched = await repo.find_by_id(created.id)
    assert fetched.tags == []


@pytest.mark.asyncio
async def test_partial_update_preserves_untouched_fields(repo: TaskRepository):
    created = await repo.create(validate_create({"title": "A", "details": "D", "status": "pending"}))
    await repo.update(created.id, validate_update({"title": "B"}))
    fetched = await repo.find_by_id(created.id)
    assert fetched.title == "B"
    assert fetched.details == "D"
    assert fetched.status == TaskStatus.PENDING


@pytest.mark.asyncio
async def test_update_returns_merged_task(repo: TaskRepository):
    created = await repo.create(validate_create({"title": "A", "priority": "low", "tags": ["x"]}))
    updated = await repo.update(created.id, validate_update({"status": "completed"}))
    assert updated.status == TaskStatus.COMPLETED
    assert updated.priority == TaskPriority.LOW
    assert updated.tags == ["x"]
    assert await repo.find_by_id(created.id) == updated


@pytest.mark.asyncio
async def test_update_replaces_tags_wholesale(repo: TaskRepository):
    created = await repo.create(validate_create({"title": "A", "tags": ["a", "b"]}))
    await repo.update(created.id, validate_update({"tags": ["c"]}))
    assert (await repo.find_by_id(created.id)).tags == ["c"]


@pytest.mark.asyncio
async def test_update_explicit_null_clears(repo: TaskRepository):
    created = await repo.create(validate_create({
        "title": "A",
        "priority": "urgent",
        "tags": ["a"],
        "dueDate": "2025-03-05T00:00:00Z",
    }))
    await repo.update(created.id, validate_update({"priority": None, "tags": None, "dueDate": None}))
    fetched = await repo.find_by_id(created.id)
    assert fetched.priority is None
    assert fetched.tags is None
    assert fetched.due_date is None
    assert fetched.title == "A"


@pytest.mark.asyncio
async def test_not_found_semantics(repo: TaskRepository):
    missing = str(uuid.uuid4())
    assert await repo.find_by_id(missing) is None
    assert await repo.update(missing, validate_update({"title": "B"})) is None
    assert await repo.delete(missing) is False


@pytest.mark.asyncio
async def test_delete_absent_twice(repo: TaskRepository):
    missing = str(uuid.uuid4())
    assert await repo.delete(missing) is False
    assert await repo.delete(missing) is False


@pytest.mark.asyncio
async def test_delete_is_permanent(repo: TaskRepository):
    created = await repo.create(validate_create({"title": "A"}))
    assert await repo.delete(created.id) is True
    assert await repo.find_by_id(created.id) is None
    assert await repo.delete(created.id) is False


@pytest.mark.asyncio
async def test_list_after_creates_and_delete(repo: TaskRepository):
    ids = [(await repo.create(validate_create({"title": f"T{i}"}))).id for i in range(5)]
    assert await repo.delete(ids[2]) is True
    tasks = await repo.find_all()
    assert len(tasks) == 4
    assert ids[2] not in {t.id for t in tasks}


@pytest.mark.asyncio
async def test_storage_failure_wrapped(repo: TaskRepository, database):
    await database.close()
    with pytest.raises(TaskRepositoryError) as exc_info:
        await repo.find_all()
    assert exc_info.value.cause is not None
    assert exc_info.value.summary == "Failed to fetch tasks"


@pytest.mark.asyncio
async def test_storage_failure_on_each_operation(repo: TaskRepository, database):
    created = await repo.create(validate_create({"title": "A"}))
    await database.close()
    with pytest.raises(TaskRepositoryError):
        await repo.create(validate_create({"title": "B"}))
    with pytest.raises(TaskRepositoryError):
        await repo.find_by_id(created.id)
    with pytest.raises(TaskRepositoryError):
        await repo.update(created.id, validate_update({"title": "B"}))
    with pytest.raises(TaskRepositoryError):
        await repo.delete(created.id)


@pytest.mark.asyncio
async def test_duplicate_id_is_repository_error(repo: TaskRepository, database):
    created = await repo.create(validate_create({"title": "A"}))
    with pytest.raises(TaskRepositoryError):
        async with repo.unit_of_work("insert duplicate") as session:
            session.add(TaskRow(id=created.id, title="dup", status="pending"))


@pytest.mark.asyncio
async def test_malformed_stored_tags(repo: TaskRepository, database):
    async with database.session() as session:
        session.add(TaskRow(id="broken", title="A", status="pending", tags="{not json"))
    with pytest.raises(TaskRepositoryError) as exc_info:
        await repo.find_by_id("broken")
    assert "broken" in exc_info.value.message
