"""
Tasks API endpoints.

Endpoints:
- GET /api/v1/tasks - List tasks the caller owns or is assigned to
- POST /api/v1/tasks - Create task
- GET /api/v1/tasks/{id} - Get task
- PATCH /api/v1/tasks/{id}/status - Change status
- PATCH /api/v1/tasks/{id}/priority - Change priority
- DELETE /api/v1/tasks/{id} - Delete task

Status changes, creation and deletion refresh the project's progress. If that
refresh fails the write still stands and the response carries a warning.
"""
from typing import Optional
from math import ceil
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.base import get_db
from taskhub.core.deps import get_acting_user
from taskhub.core.identity import ActingUser
from taskhub.models.task import TaskPriority, TaskStatus
from taskhub.schemas.common import MessageResponse
from taskhub.schemas.task import (
    TaskCreate, TaskStatusUpdate, TaskPriorityUpdate, TaskResponse, TaskListResponse,
    AssigneeResponse, SubtaskResponse
)
from taskhub.services import tasks as task_service
from taskhub.services.filters import DueFilter
from taskhub.services.tasks import TaskContext

router = APIRouter()


def task_to_response(context: TaskContext) -> TaskResponse:
    """Convert a task and the caller's view of it to response schema."""
    task = context.task
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        projectId=task.project_id,
        projectName=context.project_name,
        status=task.status.value,
        priority=task.priority.value,
        dueDate=task.due_date,
        ownerId=task.owner_id,
        assignees=[
            AssigneeResponse(id=a.user_id, email=a.email, name=a.name)
            for a in task.assignees
        ],
        assigneeEmails=task.assignee_emails,
        subtasks=[
            SubtaskResponse(id=s.id, title=s.title, completed=s.completed)
            for s in task.subtasks
        ],
        canEdit=context.can_edit,
        canDelete=context.can_delete,
        createdAt=task.created,
        updatedAt=task.updated,
        warnings=context.warnings,
    )


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    search: Optional[str] = Query(None, description="Match title, project or assignee"),
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    priority: Optional[TaskPriority] = Query(None, description="Filter by priority"),
    projectId: Optional[str] = Query(None, description="Filter by project"),
    due: Optional[DueFilter] = Query(None, description="Filter by due date window"),
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """List tasks the caller owns or is assigned to."""
    contexts = await task_service.list_tasks(
        db, actor, search=search, status=status, priority=priority, project_id=projectId, due=due
    )
    total_items = len(contexts)
    window = contexts[(page - 1) * perPage: page * perPage]
    return TaskListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=[task_to_response(c) for c in window]
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Create a task, standalone or inside a project."""
    context = await task_service.create_task(db, task_data, actor)
    return task_to_response(context)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Get a task by ID."""
    context = await task_service.get_task(db, task_id, actor)
    return task_to_response(context)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: str,
    status_data: TaskStatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Change a task's status (Editor or higher)."""
    context = await task_service.update_task_status(db, task_id, status_data.status, actor)
    return task_to_response(context)


@router.patch("/{task_id}/priority", response_model=TaskResponse)
async def update_task_priority(
    task_id: str,
    priority_data: TaskPriorityUpdate,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Change a task's priority (Editor or higher)."""
    context = await task_service.update_task_priority(db, task_id, priority_data.priority, actor)
    return task_to_response(context)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Delete a task and its comments (Admin or higher)."""
    warnings = await task_service.delete_task(db, task_id, actor)
    return MessageResponse(message="Task deleted", warnings=warnings)
