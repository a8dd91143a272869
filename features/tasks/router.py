"""Tasks API router: CRUD over ``/tasks``.

Status-code contract:
- validation failures -> 400 (handled app-wide, never reach storage)
- unknown id -> 404
- storage failures -> 500 (handled app-wide, cause logged, not echoed)

Every successful mutation invalidates the ``/tasks`` and ``/tasks/{id}``
cache tags via TaskService.
"""

from fastapi import APIRouter, Depends, HTTPException

from features.tasks.models.schemas import TaskCreate, TaskUpdate
from features.tasks.service import TaskService, get_task_service

router = APIRouter()

NOT_FOUND = "Task not found"


# ============================================================================
# Collection
# ============================================================================

@router.get("/tasks")
async def list_tasks(service: TaskService = Depends(get_task_service)):
    """Return every task. No ordering guarantee."""
    return await service.list_tasks()


@router.post("/tasks", status_code=201)
async def create_task(
    request: TaskCreate,
    service: TaskService = Depends(get_task_service),
):
    """Create a task; the id is generated server-side."""
    return await service.create_task(request)


# ============================================================================
# Single item
# ============================================================================

@router.get("/tasks/{task_id}")
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    task = await service.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return task


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    request: TaskUpdate,
    service: TaskService = Depends(get_task_service),
):
    """Apply a partial update; omitted fields keep their stored values."""
    task = await service.update_task(task_id, request)
    if task is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return task


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    deleted = await service.delete_task(task_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True}
