"""
Tests for the dashboard summary, the calendar and the shared date filters.
"""
import pytest
from datetime import date, datetime, timedelta, timezone
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.models.project import Project, ProjectStatus
from taskhub.models.task import Task, TaskPriority, TaskStatus
from taskhub.models.user import User
from taskhub.services.dashboard import dashboard_summary
from taskhub.services.filters import (
    CompletedWindow,
    DueFilter,
    ProgressStage,
    matches_due_filter,
    month_bounds,
    progress_stage,
    week_bounds,
)


class TestFilters:
    def test_week_starts_on_monday(self):
        # 2026-10-14 is a Wednesday
        assert week_bounds(date(2026, 10, 14)) == (date(2026, 10, 12), date(2026, 10, 18))
        assert week_bounds(date(2026, 10, 12)) == (date(2026, 10, 12), date(2026, 10, 18))
        assert week_bounds(date(2026, 10, 18)) == (date(2026, 10, 12), date(2026, 10, 18))

    def test_month_bounds(self):
        assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))
        assert month_bounds(2026, 12) == (date(2026, 12, 1), date(2026, 12, 31))

    def test_due_windows(self):
        today = date(2026, 10, 14)
        assert matches_due_filter(date(2026, 10, 18), DueFilter.DUE_THIS_WEEK, today)
        assert not matches_due_filter(date(2026, 10, 19), DueFilter.DUE_THIS_WEEK, today)
        assert matches_due_filter(date(2026, 10, 19), DueFilter.DUE_NEXT_WEEK, today)
        assert matches_due_filter(date(2026, 10, 25), DueFilter.DUE_NEXT_WEEK, today)
        assert not matches_due_filter(date(2026, 10, 26), DueFilter.DUE_NEXT_WEEK, today)
        assert matches_due_filter(date(2026, 10, 13), DueFilter.PAST_DUE, today)
        assert not matches_due_filter(date(2026, 10, 13), DueFilter.OVERDUE, today, completed=True)
        assert not matches_due_filter(None, DueFilter.DUE_TODAY, today)
        assert matches_due_filter(None, None, today)

    def test_progress_stages(self):
        assert progress_stage(0) == ProgressStage.NOT_STARTED
        assert progress_stage(25) == ProgressStage.EARLY_STAGE
        assert progress_stage(26) == ProgressStage.MID_STAGE
        assert progress_stage(75) == ProgressStage.MID_STAGE
        assert progress_stage(99) == ProgressStage.LATE_STAGE
        assert progress_stage(100) == ProgressStage.COMPLETED


class TestDashboardSummary:
    @pytest.mark.asyncio
    async def test_aggregates(
        self, db_session: AsyncSession, test_user: User, test_project: Project, as_actor
    ):
        today = date(2026, 10, 14)
        now = datetime.now(timezone.utc)
        test_project.progress = 50
        db_session.add(Project(
            name="Done project", status=ProjectStatus.COMPLETED, progress=100,
            owner_id=test_user.id, owner_name="Tester", owner_email=test_user.email,
        ))
        db_session.add_all([
            Task(title="Critical soon", owner_id=test_user.id, priority=TaskPriority.CRITICAL,
                 status=TaskStatus.IN_PROGRESS, due_date=today + timedelta(days=3)),
            Task(title="Late", owner_id=test_user.id, priority=TaskPriority.HIGH,
                 status=TaskStatus.TODO, due_date=today - timedelta(days=1)),
            Task(title="Just finished", owner_id=test_user.id, status=TaskStatus.COMPLETED,
                 due_date=today - timedelta(days=5), updated=datetime.combine(today, datetime.min.time(), timezone.utc)),
            Task(title="Finished last week", owner_id=test_user.id, status=TaskStatus.COMPLETED,
                 updated=datetime.combine(today - timedelta(days=4), datetime.min.time(), timezone.utc)),
            Task(title="Far away", owner_id=test_user.id, status=TaskStatus.PLANNING,
                 due_date=today + timedelta(days=30), updated=now),
        ])
        await db_session.flush()

        summary = await dashboard_summary(db_session, as_actor(test_user), today=today)
        assert summary.totalProjects == 2
        # Completed projects are left out of the average
        assert summary.averageProjectProgress == 50
        assert summary.projectStatusCounts == {"To Do": 1, "Completed": 1}
        assert summary.activeTasks == 3
        assert summary.criticalTasks == 1
        assert summary.toDoTasks == 1
        assert summary.upcomingDeadlines == 1
        assert summary.overdueTasks == 1
        assert summary.taskPriorityCounts == {"Critical": 1, "High": 1, "Medium": 1}
        assert summary.tasksCompleted == 1
        assert summary.completedWindow == "today"

        weekly = await dashboard_summary(
            db_session, as_actor(test_user), window=CompletedWindow.LAST_7_DAYS, today=today
        )
        assert weekly.tasksCompleted == 2

    @pytest.mark.asyncio
    async def test_endpoint(self, client: AsyncClient, auth_headers: dict, test_project: Project):
        response = await client.get("/api/v1/dashboard/summary", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["totalProjects"] == 1
        assert data["activeTasks"] == 0
        assert data["averageProjectProgress"] == 0

    @pytest.mark.asyncio
    async def test_empty_dashboard(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(
            "/api/v1/dashboard/summary", params={"completedWindow": "last30days"}, headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["totalProjects"] == 0
        assert data["averageProjectProgress"] == 0
        assert data["completedWindow"] == "last30days"


class TestCalendar:
    @pytest.mark.asyncio
    async def test_month_grouping(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers: dict, test_user: User,
        test_project: Project
    ):
        db_session.add_all([
            Task(title="Zeta", owner_id=test_user.id, due_date=date(2027, 3, 5), priority=TaskPriority.LOW),
            Task(title="Alpha", owner_id=test_user.id, due_date=date(2027, 3, 5), priority=TaskPriority.LOW),
            Task(title="Urgent", owner_id=test_user.id, due_date=date(2027, 3, 5),
                 priority=TaskPriority.CRITICAL, project_id=test_project.id),
            Task(title="Month end", owner_id=test_user.id, due_date=date(2027, 3, 31)),
            Task(title="Next month", owner_id=test_user.id, due_date=date(2027, 4, 1)),
            Task(title="No date", owner_id=test_user.id),
        ])
        await db_session.flush()

        response = await client.get(
            "/api/v1/dashboard/calendar", params={"year": 2027, "month": 3}, headers=auth_headers
        )
        assert response.status_code == 200
        days = response.json()["days"]
        assert sorted(days) == ["2027-03-05", "2027-03-31"]
        assert [t["title"] for t in days["2027-03-05"]] == ["Urgent", "Alpha", "Zeta"]
        assert days["2027-03-05"][0]["projectName"] == "Test Project"
        assert [t["title"] for t in days["2027-03-31"]] == ["Month end"]

    @pytest.mark.asyncio
    async def test_invalid_month(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(
            "/api/v1/dashboard/calendar", params={"year": 2027, "month": 13}, headers=auth_headers
        )
        assert response.status_code == 422
