"""
Task service: creation, status/priority changes, deletion and listing.

Mutations that can change a project's completion ratio (create, status
change, delete) commit the task write first and then refresh the project's
progress. A failed refresh is reported back as a warning on the result; it
never undoes the task write.

Every mutator in the services package commits its own write before
returning, so a result handed back to the caller is already durable.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_, func

from taskhub.core.errors import NotFoundError, PermissionDenied, RecalculationWarning, ValidationError
from taskhub.core.identity import ActingUser
from taskhub.core.permissions import (
    resolve_role,
    can_edit_task_details,
    can_delete_task,
    is_task_owner_and_unscoped,
)
from taskhub.db.base import translate_store_errors
from taskhub.models.comment import Comment
from taskhub.models.project import Project, ProjectRole
from taskhub.models.task import Task, TaskAssignee, TaskPriority, TaskStatus
from taskhub.schemas.task import AssigneeIn, TaskCreate
from taskhub.services.filters import DueFilter, matches_search, matches_due_filter
from taskhub.services.progress import refresh_project_progress
from taskhub.services.projects import find_project, load_project

logger = logging.getLogger(__name__)


@dataclass
class TaskContext:
    """A task together with the caller's view of it."""
    task: Task
    project: Optional[Project]
    role: Optional[ProjectRole]
    can_view: bool
    can_edit: bool
    can_delete: bool
    warnings: list[str] = field(default_factory=list)

    @property
    def project_name(self) -> Optional[str]:
        return self.project.name if self.project is not None else None


def build_context(task: Task, project: Optional[Project], actor: ActingUser) -> TaskContext:
    role = resolve_role(project, actor.id, actor.email)
    owner_unscoped = is_task_owner_and_unscoped(task, actor.id, project)
    can_view = (
        role is not None
        or task.owner_id == actor.id
        or actor.email.lower() in task.assignee_emails
    )
    return TaskContext(
        task=task,
        project=project,
        role=role,
        can_view=can_view,
        can_edit=can_edit_task_details(role, owner_unscoped),
        can_delete=can_delete_task(role, owner_unscoped),
    )


async def load_task(db: AsyncSession, task_id: str, fresh: bool = False) -> Task:
    query = select(Task).where(Task.id == task_id)
    if fresh:
        query = query.execution_options(populate_existing=True)
    async with translate_store_errors(db, "load the task"):
        result = await db.execute(query)
        task = result.scalar_one_or_none()
    if task is None:
        raise NotFoundError("Task not found")
    return task


async def load_task_context(
    db: AsyncSession,
    task_id: str,
    actor: ActingUser,
    fresh: bool = False,
) -> TaskContext:
    """Load a task the actor can view, along with its project (if it still exists)."""
    task = await load_task(db, task_id, fresh=fresh)
    project = await find_project(db, task.project_id, fresh=fresh) if task.project_id else None
    context = build_context(task, project, actor)
    if not context.can_view:
        raise PermissionDenied("You do not have access to this task")
    return context


async def _refresh_progress_after_write(
    db: AsyncSession,
    task_id: Optional[str],
    project_id: Optional[str],
    actor: ActingUser,
) -> tuple[Optional[TaskContext], list[str]]:
    """
    Second phase of a task mutation. Returns a reloaded context when the
    refresh failed (the session may have been rolled back) and any warnings.
    """
    if not project_id:
        return None, []
    try:
        await refresh_project_progress(db, project_id)
    except RecalculationWarning as warning:
        logger.warning("Progress refresh abandoned project=%s task=%s: %s", project_id, task_id, warning.message)
        context = await load_task_context(db, task_id, actor, fresh=True) if task_id else None
        return context, [warning.message]
    return None, []


def _normalise_assignees(assignees: Iterable[AssigneeIn], project: Optional[Project]) -> list[TaskAssignee]:
    rows: list[TaskAssignee] = []
    seen: set[str] = set()
    allowed = set(project.member_emails) if project is not None else None
    for assignee in assignees:
        email = assignee.email.lower()
        if email in seen:
            continue
        if allowed is not None and email not in allowed:
            raise ValidationError(f"{email} is not a member of this project")
        seen.add(email)
        rows.append(
            TaskAssignee(
                user_id=assignee.id,
                email=email,
                name=assignee.name.strip(),
                position=len(rows),
            )
        )
    return rows


async def create_task(db: AsyncSession, data: TaskCreate, actor: ActingUser) -> TaskContext:
    """
    Create a task. Inside a project the caller needs Owner, Admin or Editor;
    a task without a project can be created by anyone.
    """
    project = None
    if data.projectId:
        project = await load_project(db, data.projectId)
        role = resolve_role(project, actor.id, actor.email)
        if not can_edit_task_details(role):
            logger.warning("Task creation denied project=%s user=%s role=%s", project.id, actor.id, role)
            raise PermissionDenied("You need Editor access or higher to add tasks to this project")

    task = Task(
        title=data.title,
        description=data.description or "",
        project_id=project.id if project is not None else None,
        status=data.status,
        priority=data.priority,
        due_date=data.dueDate,
        owner_id=actor.id,
        assignees=_normalise_assignees(data.assignees, project),
        subtasks=[],
    )

    async with translate_store_errors(db, "create the task"):
        db.add(task)
        await db.commit()
    logger.info("Task created id=%s project=%s owner=%s", task.id, task.project_id, actor.id)

    reloaded, warnings = await _refresh_progress_after_write(db, task.id, task.project_id, actor)
    context = reloaded or build_context(task, project, actor)
    context.warnings = warnings
    return context


async def get_task(db: AsyncSession, task_id: str, actor: ActingUser) -> TaskContext:
    return await load_task_context(db, task_id, actor)


async def update_task_status(
    db: AsyncSession,
    task_id: str,
    new_status: TaskStatus,
    actor: ActingUser,
) -> TaskContext:
    """Any status may follow any other; project progress is refreshed afterwards."""
    context = await load_task_context(db, task_id, actor)
    if not context.can_edit:
        logger.warning("Status change denied task=%s user=%s role=%s", task_id, actor.id, context.role)
        raise PermissionDenied("You cannot update this task's status")

    task = context.task
    task.status = new_status
    task.touch()
    async with translate_store_errors(db, "update the task status"):
        await db.commit()

    reloaded, warnings = await _refresh_progress_after_write(db, task.id, task.project_id, actor)
    context = reloaded or context
    context.warnings = warnings
    return context


async def update_task_priority(
    db: AsyncSession,
    task_id: str,
    new_priority: TaskPriority,
    actor: ActingUser,
) -> TaskContext:
    context = await load_task_context(db, task_id, actor)
    if not context.can_edit:
        logger.warning("Priority change denied task=%s user=%s role=%s", task_id, actor.id, context.role)
        raise PermissionDenied("You cannot update this task's priority")

    context.task.priority = new_priority
    context.task.touch()
    async with translate_store_errors(db, "update the task priority"):
        await db.commit()
    return context


async def delete_task(db: AsyncSession, task_id: str, actor: ActingUser) -> list[str]:
    """Delete a task with its comments; returns non-blocking warnings."""
    context = await load_task_context(db, task_id, actor)
    if not context.can_delete:
        logger.warning("Task deletion denied task=%s user=%s role=%s", task_id, actor.id, context.role)
        raise PermissionDenied("You cannot delete this task")

    project_id = context.task.project_id
    async with translate_store_errors(db, "delete the task"):
        await db.execute(delete(Comment).where(Comment.task_id == task_id))
        await db.delete(context.task)
        await db.commit()
    logger.info("Task deleted id=%s project=%s by=%s", task_id, project_id, actor.id)

    _, warnings = await _refresh_progress_after_write(db, None, project_id, actor)
    return warnings


async def projects_by_id(db: AsyncSession, project_ids: Iterable[Optional[str]]) -> dict[str, Project]:
    ids = {pid for pid in project_ids if pid}
    if not ids:
        return {}
    async with translate_store_errors(db, "load projects"):
        result = await db.execute(select(Project).where(Project.id.in_(ids)))
        return {p.id: p for p in result.scalars().all()}


async def fetch_user_tasks(db: AsyncSession, actor: ActingUser, query=None) -> list[TaskContext]:
    """Tasks the actor owns or is assigned to, newest update first."""
    assigned = select(TaskAssignee.task_id).where(
        func.lower(TaskAssignee.email) == actor.email.lower()
    )
    if query is None:
        query = select(Task)
    query = query.where(
        or_(Task.owner_id == actor.id, Task.id.in_(assigned))
    ).order_by(Task.updated.desc())

    async with translate_store_errors(db, "list tasks"):
        result = await db.execute(query)
        tasks = list(result.scalars().all())

    projects = await projects_by_id(db, (t.project_id for t in tasks))
    return [build_context(t, projects.get(t.project_id), actor) for t in tasks]


async def list_tasks(
    db: AsyncSession,
    actor: ActingUser,
    search: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    project_id: Optional[str] = None,
    due: Optional[DueFilter] = None,
    today: Optional[date] = None,
) -> list[TaskContext]:
    today = today or date.today()
    query = select(Task)
    if status is not None:
        query = query.where(Task.status == status)
    if priority is not None:
        query = query.where(Task.priority == priority)
    if project_id:
        query = query.where(Task.project_id == project_id)

    contexts = await fetch_user_tasks(db, actor, query)
    return [
        c for c in contexts
        if matches_search(
            search,
            c.task.title,
            c.project_name,
            *(a.name for a in c.task.assignees),
            *(a.email for a in c.task.assignees),
        )
        and matches_due_filter(c.task.due_date, due, today, c.task.status == TaskStatus.COMPLETED)
    ]
