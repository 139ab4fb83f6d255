"""
Projects API endpoints.

Endpoints:
- GET /api/v1/projects - List the caller's projects
- POST /api/v1/projects - Create project
- GET /api/v1/projects/{id} - Get project
- PATCH /api/v1/projects/{id} - Update project settings
- DELETE /api/v1/projects/{id} - Delete project (tasks are kept)
- GET /api/v1/projects/{id}/tasks - List the project's tasks

Permissions:
- List/Get/Tasks: any role on the project
- Create: any authenticated user
- Update/Delete: Owner only
"""
from typing import Optional
from math import ceil
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.base import get_db
from taskhub.core.deps import get_acting_user
from taskhub.core.identity import ActingUser
from taskhub.core.permissions import resolve_role
from taskhub.models.project import Project, ProjectStatus
from taskhub.schemas.common import MessageResponse
from taskhub.schemas.project import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListResponse, TeamMemberResponse
)
from taskhub.schemas.task import TaskListResponse
from taskhub.services import projects as project_service
from taskhub.services.filters import DueFilter, ProgressStage, ProjectSort
from taskhub.services.tasks import build_context
from taskhub.api.v1.tasks.tasks import task_to_response

router = APIRouter()


def project_to_response(project: Project, actor: ActingUser) -> ProjectResponse:
    """Convert Project model to response schema."""
    role = resolve_role(project, actor.id, actor.email)
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        status=project.status.value,
        progress=project.progress,
        deadline=project.deadline,
        ownerId=project.owner_id,
        ownerName=project.owner_name,
        ownerEmail=project.owner_email,
        team=[
            TeamMemberResponse(id=m.user_id, email=m.email, name=m.name, role=m.role)
            for m in project.team
        ],
        memberEmails=project.member_emails,
        userRole=role.value if role else None,
        createdAt=project.created,
        updatedAt=project.updated,
    )


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    search: Optional[str] = Query(None, description="Match name or description"),
    status: Optional[ProjectStatus] = Query(None, description="Filter by status"),
    progress: Optional[ProgressStage] = Query(None, description="Filter by progress stage"),
    deadline: Optional[DueFilter] = Query(None, description="Filter by deadline window"),
    sort: ProjectSort = Query(ProjectSort.UPDATED_DESC),
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """List projects the caller is a member of."""
    projects = await project_service.list_projects(
        db, actor, search=search, status=status, stage=progress, deadline=deadline, sort=sort
    )
    total_items = len(projects)
    window = projects[(page - 1) * perPage: page * perPage]
    return ProjectListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=[project_to_response(p, actor) for p in window]
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Create a new project owned by the caller."""
    project = await project_service.create_project(db, project_data, actor)
    return project_to_response(project, actor)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Get a project by ID."""
    project, _ = await project_service.load_project_for(db, project_id, actor)
    return project_to_response(project, actor)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Update project settings (Owner only)."""
    project = await project_service.update_project_settings(db, project_id, project_data, actor)
    return project_to_response(project, actor)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Delete a project (Owner only). Its tasks are not deleted."""
    await project_service.delete_project(db, project_id, actor)
    return MessageResponse(message="Project deleted")


@router.get("/{project_id}/tasks", response_model=TaskListResponse)
async def list_project_tasks(
    project_id: str,
    search: Optional[str] = Query(None, description="Match task title"),
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """List a project's tasks, most recently updated first."""
    project, tasks = await project_service.list_project_tasks(db, project_id, actor, search=search)
    total_items = len(tasks)
    window = tasks[(page - 1) * perPage: page * perPage]
    return TaskListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=[task_to_response(build_context(t, project, actor)) for t in window]
    )
