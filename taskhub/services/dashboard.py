"""
Dashboard aggregates and the monthly task calendar.

Both are computed from the caller's projects (membership) and tasks (owned or
assigned), the same sets the list endpoints return.
"""
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from taskhub.core.config import settings
from taskhub.core.identity import ActingUser
from taskhub.models.base import as_utc
from taskhub.models.project import ProjectStatus
from taskhub.models.task import PRIORITY_ORDER, Task, TaskPriority, TaskStatus
from taskhub.schemas.dashboard import CalendarResponse, CalendarTask, DashboardSummaryResponse
from taskhub.services.filters import CompletedWindow, completed_window_start, month_bounds
from taskhub.services.progress import compute_progress
from taskhub.services.projects import list_projects
from taskhub.services.tasks import fetch_user_tasks


async def dashboard_summary(
    db: AsyncSession,
    actor: ActingUser,
    window: CompletedWindow = CompletedWindow.TODAY,
    today: Optional[date] = None,
) -> DashboardSummaryResponse:
    today = today or date.today()

    projects = await list_projects(db, actor, today=today)
    status_counts = Counter(p.status.value for p in projects)
    open_projects = [p for p in projects if p.status != ProjectStatus.COMPLETED]
    # Mean of percentages, half-up like the per-project value
    average_progress = compute_progress(sum(p.progress for p in open_projects), 100 * len(open_projects))

    contexts = await fetch_user_tasks(db, actor)
    window_start = datetime.combine(completed_window_start(window, today), time.min, tzinfo=timezone.utc)
    window_end = datetime.combine(today, time.max, tzinfo=timezone.utc)
    upcoming_end = today + timedelta(days=settings.UPCOMING_WINDOW_DAYS)

    active = critical = todo = completed = upcoming = overdue = 0
    priority_counts: Counter = Counter()
    for context in contexts:
        task = context.task
        if task.status == TaskStatus.TODO:
            todo += 1
        if task.status == TaskStatus.COMPLETED:
            if window_start <= as_utc(task.updated) <= window_end:
                completed += 1
            continue

        active += 1
        priority_counts[task.priority.value] += 1
        if task.priority == TaskPriority.CRITICAL:
            critical += 1
        if task.due_date is not None:
            if today <= task.due_date <= upcoming_end:
                upcoming += 1
            if task.due_date < today:
                overdue += 1

    return DashboardSummaryResponse(
        totalProjects=len(projects),
        averageProjectProgress=average_progress,
        projectStatusCounts=dict(status_counts),
        activeTasks=active,
        criticalTasks=critical,
        toDoTasks=todo,
        tasksCompleted=completed,
        upcomingDeadlines=upcoming,
        overdueTasks=overdue,
        taskPriorityCounts=dict(priority_counts),
        completedWindow=window.value,
    )


async def calendar_month(db: AsyncSession, actor: ActingUser, year: int, month: int) -> CalendarResponse:
    """The caller's tasks due in the given month, grouped by day."""
    first, last = month_bounds(year, month)
    query = select(Task).where(Task.due_date >= first, Task.due_date <= last)
    contexts = await fetch_user_tasks(db, actor, query)
    contexts.sort(key=lambda c: (c.task.due_date, PRIORITY_ORDER[c.task.priority], c.task.title.lower()))

    days: dict[str, list[CalendarTask]] = {}
    for context in contexts:
        task = context.task
        days.setdefault(task.due_date.isoformat(), []).append(
            CalendarTask(
                id=task.id,
                title=task.title,
                status=task.status.value,
                priority=task.priority.value,
                dueDate=task.due_date,
                projectId=task.project_id,
                projectName=context.project_name,
            )
        )
    return CalendarResponse(year=year, month=month, days=days)
