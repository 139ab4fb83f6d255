"""Role resolution & permission predicates for project-scoped resources.

Everything here is pure: no database access, no exceptions. Callers decide
how to surface a denial.
"""
from typing import Optional

from taskhub.models.project import Project, ProjectRole
from taskhub.models.task import Task

_TASK_EDITORS = frozenset({ProjectRole.OWNER, ProjectRole.ADMIN, ProjectRole.EDITOR})
_TASK_DELETERS = frozenset({ProjectRole.OWNER, ProjectRole.ADMIN})


def _coerce_role(value) -> Optional[ProjectRole]:
    """Unknown or missing roles mean no access, never Viewer."""
    if isinstance(value, ProjectRole):
        return value
    try:
        return ProjectRole(value)
    except ValueError:
        return None


def resolve_role(
    project: Optional[Project],
    user_id: Optional[str],
    user_email: Optional[str],
) -> Optional[ProjectRole]:
    """Return the user's role on ``project``, or None for no access.

    The designated owner is always Owner. Otherwise a team entry matching the
    user id wins over one matching only the email, so a stale email on the
    team list cannot shadow the user's real entry.
    """
    if project is None:
        return None
    if user_id and user_id == project.owner_id:
        return ProjectRole.OWNER

    team = project.team or []
    if user_id:
        for member in team:
            if member.user_id == user_id:
                return _coerce_role(member.role)
    if user_email:
        email = user_email.lower()
        for member in team:
            if member.email and member.email.lower() == email:
                return _coerce_role(member.role)
    return None


def can_view_project(role: Optional[ProjectRole]) -> bool:
    return role is not None


def can_manage_team(role: Optional[ProjectRole]) -> bool:
    return role == ProjectRole.OWNER


def can_edit_project_settings(role: Optional[ProjectRole]) -> bool:
    """Name/description/deadline/status edits and deletion are Owner-only."""
    return role == ProjectRole.OWNER


def can_edit_task_details(role: Optional[ProjectRole], is_task_owner_and_unscoped: bool = False) -> bool:
    if is_task_owner_and_unscoped:
        return True
    return role in _TASK_EDITORS


def can_delete_task(role: Optional[ProjectRole], is_task_owner_and_unscoped: bool = False) -> bool:
    if is_task_owner_and_unscoped:
        return True
    return role in _TASK_DELETERS


def is_task_owner_and_unscoped(task: Task, user_id: str, project: Optional[Project]) -> bool:
    """True when the user created the task and no project governs it.

    A task whose project was deleted counts as unscoped: there is no team left
    to resolve a role from, so its creator keeps control of it.
    """
    return task.owner_id == user_id and (task.project_id is None or project is None)
