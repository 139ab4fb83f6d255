"""
Project service: creation, settings, deletion and listing.

Every function takes the acting user explicitly and checks the caller's
project role before touching the store.
"""
import logging
from datetime import date
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, func

from taskhub.core.errors import NotFoundError, PermissionDenied
from taskhub.core.identity import ActingUser
from taskhub.core.permissions import (
    resolve_role,
    can_view_project,
    can_edit_project_settings,
)
from taskhub.db.base import translate_store_errors
from taskhub.models.base import as_utc
from taskhub.models.project import Project, ProjectMember, ProjectRole, ProjectStatus
from taskhub.models.task import Task
from taskhub.schemas.project import ProjectCreate, ProjectUpdate
from taskhub.services.filters import (
    DueFilter,
    ProgressStage,
    ProjectSort,
    matches_search,
    matches_due_filter,
    progress_stage,
)

logger = logging.getLogger(__name__)


async def find_project(db: AsyncSession, project_id: str, fresh: bool = False) -> Optional[Project]:
    """``fresh`` re-reads rows already in the session (e.g. after a rollback)."""
    query = select(Project).where(Project.id == project_id)
    if fresh:
        query = query.execution_options(populate_existing=True)
    async with translate_store_errors(db, "load the project"):
        result = await db.execute(query)
        return result.scalar_one_or_none()


async def load_project(db: AsyncSession, project_id: str) -> Project:
    project = await find_project(db, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


async def load_project_for(
    db: AsyncSession,
    project_id: str,
    actor: ActingUser,
) -> tuple[Project, ProjectRole]:
    """Load a project the actor can at least view."""
    project = await load_project(db, project_id)
    role = resolve_role(project, actor.id, actor.email)
    if not can_view_project(role):
        raise PermissionDenied("You do not have access to this project")
    return project, role


async def create_project(db: AsyncSession, data: ProjectCreate, actor: ActingUser) -> Project:
    """Any authenticated user may create a project; they become its Owner."""
    project = Project(
        name=data.name,
        description=data.description or "",
        deadline=data.deadline,
        status=data.status,
        progress=0,
        owner_id=actor.id,
        owner_name=actor.label,
        owner_email=actor.email.lower(),
    )
    project.team.append(
        ProjectMember(
            user_id=actor.id,
            email=actor.email.lower(),
            name=actor.label,
            role=ProjectRole.OWNER.value,
            position=0,
        )
    )

    async with translate_store_errors(db, "create the project"):
        db.add(project)
        await db.commit()

    logger.info("Project created id=%s owner=%s", project.id, actor.id)
    return project


async def update_project_settings(
    db: AsyncSession,
    project_id: str,
    data: ProjectUpdate,
    actor: ActingUser,
) -> Project:
    """Owner-only edit of name, description, deadline and status."""
    project = await load_project(db, project_id)
    role = resolve_role(project, actor.id, actor.email)
    if not can_edit_project_settings(role):
        logger.warning("Settings update denied project=%s user=%s role=%s", project_id, actor.id, role)
        raise PermissionDenied("Only the project owner can change project settings")

    if data.name is not None:
        project.name = data.name
    if data.description is not None:
        project.description = data.description
    if "deadline" in data.model_fields_set:
        project.deadline = data.deadline
    if data.status is not None:
        project.status = data.status

    project.touch()
    async with translate_store_errors(db, "update the project"):
        await db.commit()
    return project


async def delete_project(db: AsyncSession, project_id: str, actor: ActingUser) -> None:
    """
    Owner-only. Deletes the project and its team; its tasks are left in place
    with ``project_id`` still set.
    """
    project = await load_project(db, project_id)
    role = resolve_role(project, actor.id, actor.email)
    if not can_edit_project_settings(role):
        logger.warning("Project deletion denied project=%s user=%s role=%s", project_id, actor.id, role)
        raise PermissionDenied("Only the project owner can delete this project")

    async with translate_store_errors(db, "delete the project"):
        await db.delete(project)
        await db.commit()

    logger.info("Project deleted id=%s by=%s", project_id, actor.id)


async def list_projects(
    db: AsyncSession,
    actor: ActingUser,
    search: Optional[str] = None,
    status: Optional[ProjectStatus] = None,
    stage: Optional[ProgressStage] = None,
    deadline: Optional[DueFilter] = None,
    sort: ProjectSort = ProjectSort.UPDATED_DESC,
    today: Optional[date] = None,
) -> list[Project]:
    """Projects the actor belongs to, filtered and sorted."""
    today = today or date.today()
    member_of = select(ProjectMember.project_id).where(
        func.lower(ProjectMember.email) == actor.email.lower()
    )
    query = select(Project).where(
        or_(Project.owner_id == actor.id, Project.id.in_(member_of))
    )
    if status is not None:
        query = query.where(Project.status == status)

    async with translate_store_errors(db, "list projects"):
        result = await db.execute(query)
        projects = list(result.scalars().all())

    projects = [
        p for p in projects
        if matches_search(search, p.name, p.description)
        and (stage is None or progress_stage(p.progress) == stage)
        and matches_due_filter(p.deadline, deadline, today, p.status == ProjectStatus.COMPLETED)
    ]

    if sort in (ProjectSort.NAME_ASC, ProjectSort.NAME_DESC):
        projects.sort(key=lambda p: p.name.lower(), reverse=sort == ProjectSort.NAME_DESC)
    else:
        projects.sort(key=lambda p: as_utc(p.updated or p.created), reverse=sort == ProjectSort.UPDATED_DESC)
    return projects


async def list_project_tasks(
    db: AsyncSession,
    project_id: str,
    actor: ActingUser,
    search: Optional[str] = None,
) -> tuple[Project, list[Task]]:
    """Tasks of a project the actor can view, most recently updated first."""
    project, _ = await load_project_for(db, project_id, actor)
    async with translate_store_errors(db, "list project tasks"):
        result = await db.execute(
            select(Task).where(Task.project_id == project_id).order_by(Task.updated.desc())
        )
        tasks = list(result.scalars().all())
    return project, [t for t in tasks if matches_search(search, t.title)]
