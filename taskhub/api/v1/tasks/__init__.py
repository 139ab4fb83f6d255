"""
Task API routers.

Provides endpoints for:
- Tasks (list, create, get, status, priority, delete)
- Subtasks (add, toggle, delete)
- Comments (list, post)
"""
from fastapi import APIRouter

from taskhub.api.v1.tasks.tasks import router as tasks_crud_router
from taskhub.api.v1.tasks.subtasks import router as subtasks_router
from taskhub.api.v1.tasks.comments import router as comments_router

# Combined tasks router
tasks_router = APIRouter(tags=["tasks"])

tasks_router.include_router(
    tasks_crud_router,
    prefix="/tasks",
)

tasks_router.include_router(
    subtasks_router,
    prefix="/tasks",
    tags=["subtasks"]
)

tasks_router.include_router(
    comments_router,
    prefix="/tasks",
    tags=["comments"]
)

__all__ = ["tasks_router"]
