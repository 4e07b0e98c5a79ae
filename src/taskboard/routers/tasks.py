from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import get_user_dependency
from ..models import PRIORITIES
from ..query import parse_query
from ..repositories import Repository, get_repository
from ..schemas import (
    DeleteResult,
    TaskCreate,
    TaskEnvelope,
    TaskListEnvelope,
    TaskOut,
    TaskUpdate,
)
from ..service import TaskService
from ..utils import duration_choices

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)

current_user = get_user_dependency()


# PUBLIC_INTERFACE
def get_service(
    user_id: str = Depends(current_user),
    repo: Repository = Depends(get_repository),
) -> TaskService:
    """
    Dependency building a TaskService bound to the acting user.
    """
    return TaskService(repo, user_id)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TaskListEnvelope,
    summary="List Tasks",
    description=(
        "List the caller's tasks with optional filters and sorting.\n\n"
        "Query parameters:\n"
        "- date: only tasks due on this day (YYYY-MM-DD)\n"
        "- search: case-insensitive substring of the title\n"
        "- completed: 'true' or 'false'\n"
        "- sortBy: priority, duration or createdAt (default createdAt)\n"
        "- sortOrder: asc or desc (default desc)\n"
        "- thenBy: optional secondary sort key, e.g. duration under a priority sort"
    ),
    responses={
        200: {"description": "Tasks retrieved successfully"},
        422: {"description": "Invalid query parameters"},
    },
)
def list_tasks(
    date: Optional[str] = Query(None, description="Exact due date filter (YYYY-MM-DD)"),
    search: Optional[str] = Query(None, description="Search text for the title"),
    completed: Optional[str] = Query(None, description="Filter by completion status: 'true' or 'false'"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="priority, duration or createdAt"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
    then_by: Optional[str] = Query(None, alias="thenBy", description="Secondary sort key"),
    service: TaskService = Depends(get_service),
) -> TaskListEnvelope:
    """
    List tasks filtered and ordered by the query engine.
    """
    query = parse_query(
        date=date,
        search=search,
        completed=completed,
        sort_by=sort_by,
        sort_order=sort_order,
        then_by=then_by,
    )
    return TaskListEnvelope(tasks=[TaskOut(**t) for t in service.list(query)])  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task for the caller and return it.",
    responses={
        201: {"description": "Task created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_task(payload: TaskCreate, service: TaskService = Depends(get_service)) -> TaskEnvelope:
    """
    Create a new task.
    """
    created = service.create(
        payload.title,
        priority=payload.priority,
        due_date=payload.due_date,
        time_cost=payload.time_cost,
    )
    return TaskEnvelope(task=TaskOut(**created))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/options",
    summary="Task Field Options",
    description="Priorities and duration choices offered by the task editor.",
)
def task_options() -> dict:
    return {
        "priorities": list(PRIORITIES),
        "durations": [{"value": m, "label": label} for m, label in duration_choices()],
    }


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={
        200: {"description": "Task found"},
        403: {"description": "Task belongs to another user"},
        404: {"description": "Task not found"},
    },
)
def get_task(task_id: str, service: TaskService = Depends(get_service)) -> TaskEnvelope:
    return TaskEnvelope(task=TaskOut(**service.get(task_id)))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskEnvelope,
    summary="Update Task",
    description="Partially update a task. Send null to clear priority, dueDate or timeCost.",
    responses={
        200: {"description": "Task updated"},
        403: {"description": "Task belongs to another user"},
        404: {"description": "Task not found"},
        422: {"description": "Validation error"},
    },
)
def patch_task(task_id: str, payload: TaskUpdate, service: TaskService = Depends(get_service)) -> TaskEnvelope:
    """
    Partial update of a task.
    """
    updated = service.update(task_id, payload)
    return TaskEnvelope(task=TaskOut(**updated))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=TaskEnvelope,
    summary="Toggle Task Completion",
    description="Flip the completed flag of a task.",
    responses={
        200: {"description": "Task updated"},
        403: {"description": "Task belongs to another user"},
        404: {"description": "Task not found"},
    },
)
def toggle_task(task_id: str, service: TaskService = Depends(get_service)) -> TaskEnvelope:
    return TaskEnvelope(task=TaskOut(**service.toggle_complete(task_id)))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=DeleteResult,
    summary="Delete Task",
    description="Delete a task by ID.",
    responses={
        200: {"description": "Task deleted"},
        403: {"description": "Task belongs to another user"},
        404: {"description": "Task not found"},
    },
)
def delete_task(task_id: str, service: TaskService = Depends(get_service)) -> DeleteResult:
    """
    Delete a task permanently.
    """
    service.delete(task_id)
    return DeleteResult(success=True)
