"""
Subtask operations.

Subtasks are child rows addressed by id, so adding, toggling or deleting one
never rewrites its siblings. They do not affect project progress.
Each change is committed before the task is returned.
"""
import logging
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import NotFoundError, PermissionDenied, ValidationError
from taskhub.core.identity import ActingUser
from taskhub.db.base import translate_store_errors
from taskhub.models.task import Subtask, Task
from taskhub.services.tasks import TaskContext, load_task_context

logger = logging.getLogger(__name__)


async def _editable(db: AsyncSession, task_id: str, actor: ActingUser) -> TaskContext:
    context = await load_task_context(db, task_id, actor)
    if not context.can_edit:
        logger.warning("Subtask change denied task=%s user=%s role=%s", task_id, actor.id, context.role)
        raise PermissionDenied("You cannot change this task's subtasks")
    return context


def _find_subtask(task: Task, subtask_id: str) -> Subtask:
    for subtask in task.subtasks:
        if subtask.id == subtask_id:
            return subtask
    raise NotFoundError("Subtask not found")


async def add_subtask(db: AsyncSession, task_id: str, title: str, actor: ActingUser) -> TaskContext:
    title = title.strip()
    if not title:
        raise ValidationError("Subtask title cannot be empty")

    context = await _editable(db, task_id, actor)
    task = context.task
    task.subtasks.append(
        Subtask(
            title=title,
            completed=False,
            position=max((s.position for s in task.subtasks), default=-1) + 1,
        )
    )
    task.touch()
    async with translate_store_errors(db, "add the subtask"):
        await db.commit()
    return context


async def toggle_subtask(db: AsyncSession, task_id: str, subtask_id: str, actor: ActingUser) -> TaskContext:
    context = await _editable(db, task_id, actor)
    subtask = _find_subtask(context.task, subtask_id)
    subtask.completed = not subtask.completed
    subtask.touch()
    context.task.touch()
    async with translate_store_errors(db, "update the subtask"):
        await db.commit()
    return context


async def delete_subtask(db: AsyncSession, task_id: str, subtask_id: str, actor: ActingUser) -> TaskContext:
    context = await _editable(db, task_id, actor)
    subtask = _find_subtask(context.task, subtask_id)
    context.task.subtasks.remove(subtask)
    context.task.touch()
    async with translate_store_errors(db, "delete the subtask"):
        await db.commit()
    return context
