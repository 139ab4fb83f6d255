"""
Dashboard and calendar schemas.
"""
from typing import Optional
from datetime import date
from pydantic import BaseModel


class DashboardSummaryResponse(BaseModel):
    """Aggregates over the caller's projects and tasks."""
    totalProjects: int
    averageProjectProgress: int
    projectStatusCounts: dict[str, int]

    activeTasks: int
    criticalTasks: int
    toDoTasks: int
    tasksCompleted: int
    upcomingDeadlines: int
    overdueTasks: int
    taskPriorityCounts: dict[str, int]

    completedWindow: str


class CalendarTask(BaseModel):
    """Brief task info for a calendar cell."""
    id: str
    title: str
    status: str
    priority: str
    dueDate: date
    projectId: Optional[str] = None
    projectName: Optional[str] = None


class CalendarResponse(BaseModel):
    year: int
    month: int
    # ISO date -> tasks due that day
    days: dict[str, list[CalendarTask]]
