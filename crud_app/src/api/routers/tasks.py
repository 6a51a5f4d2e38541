from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, Request, status

from ..errors import NotFoundError, store_failures
from ..repositories import TaskRepository
from ..schemas import MAX_ID, TaskCreate, TaskOut

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


def _get_repo(request: Request) -> TaskRepository:
    """
    Dependency returning the tasks store owned by the running application.
    """
    return request.app.state.tasks


def _not_found() -> NotFoundError:
    return NotFoundError("Task not found", code="task_not_found")


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Return every task in insertion order.",
    responses={
        200: {"description": "Tasks retrieved successfully"},
        500: {"description": "Store unavailable"},
    },
)
def list_tasks(repo: TaskRepository = Depends(_get_repo)) -> List[TaskOut]:
    with store_failures("tasks_fetch_failed", "Error fetching tasks"):
        tasks = repo.list()
    return [TaskOut(**t) for t in tasks]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a task. New tasks are never completed; id and completed in the payload are ignored.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"description": "Validation error"},
        500: {"description": "Store unavailable"},
    },
)
def create_task(payload: TaskCreate, repo: TaskRepository = Depends(_get_repo)) -> TaskOut:
    with store_failures("task_create_failed", "Error creating task"):
        created = repo.create(payload)
    return TaskOut(**created)


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskOut,
    summary="Toggle Task",
    description="Flip the completed flag of a task and return the updated task.",
    responses={
        200: {"description": "Task updated"},
        400: {"description": "Non-numeric or out-of-range id"},
        404: {"description": "Task not found"},
        500: {"description": "Store unavailable"},
    },
)
def toggle_task(
    task_id: int = Path(..., ge=1, le=MAX_ID, description="Id of the task to toggle"),
    repo: TaskRepository = Depends(_get_repo),
) -> TaskOut:
    with store_failures("task_toggle_failed", "Error toggling task"):
        updated = repo.toggle_completed(task_id)
    if updated is None:
        raise _not_found()
    return TaskOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=TaskOut,
    summary="Delete Task",
    description="Delete a task by ID and return the deleted task.",
    responses={
        200: {"description": "Task deleted"},
        400: {"description": "Non-numeric or out-of-range id"},
        404: {"description": "Task not found"},
        500: {"description": "Store unavailable"},
    },
)
def delete_task(
    task_id: int = Path(..., ge=1, le=MAX_ID, description="Id of the task to delete"),
    repo: TaskRepository = Depends(_get_repo),
) -> TaskOut:
    with store_failures("task_delete_failed", "Error deleting task"):
        deleted = repo.remove(task_id)
    if deleted is None:
        raise _not_found()
    return TaskOut(**deleted)
