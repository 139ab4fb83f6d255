"""
Team management for a project: add, remove and re-role members.

Only the project Owner may manage the team. The owner's own entry can never
be removed or re-roled here, and no other member can be made Owner.
"""
import logging
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import ConflictError, NotFoundError, PermissionDenied, ValidationError
from taskhub.core.identity import ActingUser
from taskhub.core.permissions import resolve_role, can_manage_team
from taskhub.db.base import translate_store_errors
from taskhub.models.project import Project, ProjectMember, ProjectRole
from taskhub.services.projects import load_project

logger = logging.getLogger(__name__)


async def _load_managed_project(db: AsyncSession, project_id: str, actor: ActingUser, action: str) -> Project:
    project = await load_project(db, project_id)
    role = resolve_role(project, actor.id, actor.email)
    if not can_manage_team(role):
        logger.warning("Team %s denied project=%s user=%s role=%s", action, project_id, actor.id, role)
        raise PermissionDenied("Only the project owner can manage the team")
    return project


def _find_member(project: Project, email: str) -> ProjectMember:
    for member in project.team:
        if member.email.lower() == email:
            return member
    raise NotFoundError(f"{email} is not a member of this project")


def _is_owner_entry(project: Project, member: ProjectMember) -> bool:
    return (
        member.role == ProjectRole.OWNER.value
        or member.user_id == project.owner_id
        or member.email.lower() == project.owner_email.lower()
    )


def _assignable(role: ProjectRole) -> ProjectRole:
    if role == ProjectRole.OWNER:
        raise ValidationError("The Owner role cannot be assigned to team members")
    return role


async def add_team_member(
    db: AsyncSession,
    project_id: str,
    email: str,
    role: ProjectRole,
    actor: ActingUser,
) -> Project:
    project = await _load_managed_project(db, project_id, actor, "add")
    role = _assignable(role)
    email = email.strip().lower()

    if email == project.owner_email.lower() or email in project.member_emails:
        raise ConflictError(f"{email} is already a member of this project")

    # Invited members are keyed by email until they sign in
    project.team.append(
        ProjectMember(
            user_id=email,
            email=email,
            name=email.split("@")[0],
            role=role.value,
            position=max((m.position for m in project.team), default=-1) + 1,
        )
    )
    project.touch()
    async with translate_store_errors(db, "add the team member"):
        await db.commit()

    logger.info("Team member added project=%s email=%s role=%s", project_id, email, role.value)
    return project


async def remove_team_member(
    db: AsyncSession,
    project_id: str,
    email: str,
    actor: ActingUser,
) -> Project:
    project = await _load_managed_project(db, project_id, actor, "removal")
    member = _find_member(project, email.strip().lower())
    if _is_owner_entry(project, member):
        raise ValidationError("The project owner cannot be removed")

    project.team.remove(member)
    project.touch()
    async with translate_store_errors(db, "remove the team member"):
        await db.commit()

    logger.info("Team member removed project=%s email=%s", project_id, member.email)
    return project


async def update_team_member_role(
    db: AsyncSession,
    project_id: str,
    email: str,
    new_role: ProjectRole,
    actor: ActingUser,
) -> Project:
    project = await _load_managed_project(db, project_id, actor, "role change")
    member = _find_member(project, email.strip().lower())
    if _is_owner_entry(project, member):
        raise ValidationError("The project owner's role cannot be changed")
    new_role = _assignable(new_role)

    member.role = new_role.value
    member.touch()
    project.touch()
    async with translate_store_errors(db, "update the member's role"):
        await db.commit()

    logger.info("Team role updated project=%s email=%s role=%s", project_id, member.email, new_role.value)
    return project
