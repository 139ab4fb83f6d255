"""
Subtask endpoints.

Endpoints:
- POST /api/v1/tasks/{id}/subtasks - Add subtask
- PATCH /api/v1/tasks/{id}/subtasks/{subtask_id}/toggle - Flip completion
- DELETE /api/v1/tasks/{id}/subtasks/{subtask_id} - Remove subtask

All return the updated task.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.base import get_db
from taskhub.core.deps import get_acting_user
from taskhub.core.identity import ActingUser
from taskhub.schemas.task import SubtaskCreate, TaskResponse
from taskhub.services import subtasks as subtask_service
from taskhub.api.v1.tasks.tasks import task_to_response

router = APIRouter()


@router.post("/{task_id}/subtasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def add_subtask(
    task_id: str,
    subtask_data: SubtaskCreate,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    context = await subtask_service.add_subtask(db, task_id, subtask_data.title, actor)
    return task_to_response(context)


@router.patch("/{task_id}/subtasks/{subtask_id}/toggle", response_model=TaskResponse)
async def toggle_subtask(
    task_id: str,
    subtask_id: str,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    context = await subtask_service.toggle_subtask(db, task_id, subtask_id, actor)
    return task_to_response(context)


@router.delete("/{task_id}/subtasks/{subtask_id}", response_model=TaskResponse)
async def delete_subtask(
    task_id: str,
    subtask_id: str,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    context = await subtask_service.delete_subtask(db, task_id, subtask_id, actor)
    return task_to_response(context)
