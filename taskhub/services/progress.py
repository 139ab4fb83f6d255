"""
Project progress recalculation.

``Project.progress`` is derived data: the share of the project's tasks whose
status is Completed, as a whole percentage. It is recomputed from scratch
after every task mutation that can change it, so calling the recalculator
again without intervening task changes always yields the same value.

The task write and the progress write are separate units of work. Callers
commit the task change first and treat a failure here as a warning.
"""
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case

from taskhub.core.errors import NotFoundError, RecalculationWarning, StoreError
from taskhub.db.base import translate_store_errors
from taskhub.models.project import Project
from taskhub.models.task import Task, TaskStatus

logger = logging.getLogger(__name__)


def compute_progress(completed: int, total: int) -> int:
    """
    Percentage of completed tasks, rounded half up.

    Integer arithmetic keeps 12.5 -> 13 (Python's ``round`` would give 12).
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


async def count_project_tasks(db: AsyncSession, project_id: str) -> tuple[int, int]:
    """Return ``(completed, total)`` for tasks referencing ``project_id``."""
    result = await db.execute(
        select(
            func.count(Task.id),
            func.coalesce(
                func.sum(case((Task.status == TaskStatus.COMPLETED, 1), else_=0)),
                0,
            ),
        ).where(Task.project_id == project_id)
    )
    total, completed = result.one()
    return int(completed or 0), int(total or 0)


async def recalculate_progress(db: AsyncSession, project_id: str) -> int:
    """
    Recompute and persist the progress of ``project_id``.

    Raises:
        NotFoundError: the project no longer exists.
        StoreError: the read or the write failed.

    Returns:
        The stored progress value.
    """
    async with translate_store_errors(db, "recalculate project progress"):
        result = await db.execute(select(Project).where(Project.id == project_id))
        project = result.scalar_one_or_none()
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")

        completed, total = await count_project_tasks(db, project_id)
        progress = compute_progress(completed, total)

        project.progress = progress
        project.touch()
        await db.flush()

    logger.info(
        "Recalculated progress project=%s progress=%d completed=%d/%d",
        project_id, progress, completed, total,
    )
    return progress


async def refresh_project_progress(db: AsyncSession, project_id: str) -> int:
    """
    Recalculate and commit progress as a unit of work of its own.

    Run this after the triggering task change has been committed. Any failure
    is re-raised as ``RecalculationWarning``; the task change stays in place.
    """
    try:
        progress = await recalculate_progress(db, project_id)
        async with translate_store_errors(db, "save project progress"):
            await db.commit()
    except (NotFoundError, StoreError) as exc:
        raise RecalculationWarning(
            f"The task was saved, but project progress could not be updated: {exc.message}"
        ) from exc
    return progress
