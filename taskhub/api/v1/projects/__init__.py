"""
Project API routers.

Provides endpoints for:
- Projects (list, create, get, update settings, delete, project tasks)
- Project team (add, re-role, remove members)
"""
from fastapi import APIRouter

from taskhub.api.v1.projects.projects import router as projects_crud_router
from taskhub.api.v1.projects.team import router as team_router

# Combined projects router
projects_router = APIRouter(tags=["projects"])

projects_router.include_router(
    projects_crud_router,
    prefix="/projects",
)

projects_router.include_router(
    team_router,
    prefix="/projects",
    tags=["project-team"]
)

__all__ = ["projects_router"]
