"""Task management routes."""

from typing import Optional
from datetime import datetime
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ...domain.errors import NotFoundError
from ...domain.models import (
    CreateTaskRequest,
    Task,
    TaskId,
    TaskPriority,
    TaskStatus,
    UpdateTaskRequest,
)
from ...services.task_service import TaskService
from ...container import get_container

router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskResponse(BaseModel):
    """Task response model."""

    id: str
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    category: str
    estimated_time: int
    actual_time: Optional[int] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """Task list response model."""

    tasks: list[TaskResponse]
    total: int


class TaskCreateRequest(BaseModel):
    """Task creation request model."""

    title: str
    description: Optional[str] = None
    priority: str = "medium"
    category: str = "general"
    estimated_time: int = 0
    due_date: Optional[datetime] = None


class TaskUpdateRequest(BaseModel):
    """Task update request model. Omitted fields are left unchanged."""

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    estimated_time: Optional[int] = None
    actual_time: Optional[int] = None
    due_date: Optional[datetime] = None


def get_task_service() -> TaskService:
    """Get TaskService from container."""
    container = get_container()
    return container.task_service


def parse_status(value: str) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise HTTPException(400, f"Invalid status: {value}")


def parse_priority(value: str) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError:
        raise HTTPException(400, f"Invalid priority: {value}")


def task_to_response(task: Task) -> TaskResponse:
    """Convert Task to TaskResponse."""
    return TaskResponse(
        id=task.id.value,
        title=task.title,
        description=task.description,
        priority=task.priority.value,
        status=task.status.value,
        category=task.category,
        estimated_time=task.estimated_time,
        actual_time=task.actual_time,
        due_date=task.due_date,
        completed_at=task.completed_at,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


# Static routes must come before dynamic routes
@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status: Optional[str] = Query(
        None,
        description="Filter by status (pending, in_progress, completed, paused, cancelled)",
    ),
) -> TaskListResponse:
    """List tasks newest first."""
    service = get_task_service()
    task_status = parse_status(status) if status else None

    tasks = await service.list_tasks(task_status)

    return TaskListResponse(
        tasks=[task_to_response(t) for t in tasks],
        total=len(tasks),
    )


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(request: TaskCreateRequest) -> TaskResponse:
    """Create a new task."""
    service = get_task_service()

    created = await service.create_task(
        CreateTaskRequest(
            title=request.title,
            description=request.description,
            priority=parse_priority(request.priority),
            category=request.category,
            estimated_time=request.estimated_time,
            due_date=request.due_date,
        )
    )
    return task_to_response(created)


@router.get("/overdue", response_model=TaskListResponse)
async def get_overdue_tasks() -> TaskListResponse:
    """Get overdue tasks, soonest due first."""
    service = get_task_service()
    tasks = await service.list_overdue()

    return TaskListResponse(
        tasks=[task_to_response(t) for t in tasks],
        total=len(tasks),
    )


# Dynamic routes must come after static routes
@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str) -> TaskResponse:
    """Get task by ID."""
    service = get_task_service()
    task = await service.get_task(TaskId(task_id))

    if not task:
        raise HTTPException(404, f"Task not found: {task_id}")

    return task_to_response(task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: str, request: TaskUpdateRequest) -> TaskResponse:
    """Update an existing task.

    The first completion of a task sends an achievement notification.
    """
    container = get_container()
    service = container.task_service

    update = UpdateTaskRequest(
        title=request.title,
        description=request.description,
        priority=parse_priority(request.priority) if request.priority else None,
        status=parse_status(request.status) if request.status else None,
        category=request.category,
        estimated_time=request.estimated_time,
        actual_time=request.actual_time,
        due_date=request.due_date,
    )

    existing = await service.get_task(TaskId(task_id))
    if not existing:
        raise HTTPException(404, f"Task not found: {task_id}")

    try:
        result = await service.update_task(TaskId(task_id), update)
    except NotFoundError as e:
        raise HTTPException(404, str(e))

    if existing.completed_at is None and result.completed_at is not None:
        await container.notification_service.send_achievement(
            f"Completed '{result.title}'"
        )

    return task_to_response(result)


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: str) -> None:
    """Delete a task."""
    service = get_task_service()
    deleted = await service.delete_task(TaskId(task_id))

    if not deleted:
        raise HTTPException(404, f"Task not found: {task_id}")
