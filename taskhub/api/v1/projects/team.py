"""
Project team API endpoints.

Endpoints:
- POST /api/v1/projects/{id}/team - Add a member by email
- PATCH /api/v1/projects/{id}/team/{email} - Change a member's role
- DELETE /api/v1/projects/{id}/team/{email} - Remove a member

Only the project Owner can manage the team.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.db.base import get_db
from taskhub.core.deps import get_acting_user
from taskhub.core.identity import ActingUser
from taskhub.schemas.project import ProjectResponse, TeamMemberAdd, TeamMemberRoleUpdate
from taskhub.services import team as team_service
from taskhub.api.v1.projects.projects import project_to_response

router = APIRouter()


@router.post("/{project_id}/team", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def add_team_member(
    project_id: str,
    member_data: TeamMemberAdd,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Add a member to the project team."""
    project = await team_service.add_team_member(db, project_id, member_data.email, member_data.role, actor)
    return project_to_response(project, actor)


@router.patch("/{project_id}/team/{email}", response_model=ProjectResponse)
async def update_team_member_role(
    project_id: str,
    email: str,
    role_data: TeamMemberRoleUpdate,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Change a team member's role."""
    project = await team_service.update_team_member_role(db, project_id, email, role_data.role, actor)
    return project_to_response(project, actor)


@router.delete("/{project_id}/team/{email}", response_model=ProjectResponse)
async def remove_team_member(
    project_id: str,
    email: str,
    db: AsyncSession = Depends(get_db),
    actor: ActingUser = Depends(get_acting_user)
):
    """Remove a member from the project team."""
    project = await team_service.remove_team_member(db, project_id, email, actor)
    return project_to_response(project, actor)
