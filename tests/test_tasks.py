"""
Tests for tasks, subtasks and comments.

Tests cover:
- Creation rules (project role, assignee membership)
- Status changes driving project progress
- Role enforcement (viewer vs editor vs admin)
- Progress refresh failures surfacing as warnings
- Subtask and comment flows
- Task listing filters
"""
import pytest
import pytest_asyncio
from datetime import date, timedelta
from httpx import AsyncClient
from sqlalchemy import inspect, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.errors import StoreError
from taskhub.models.project import Project
from taskhub.models.task import Subtask, TaskPriority
from taskhub.models.user import User
from taskhub.schemas.task import TaskCreate
from taskhub.services import tasks as task_service
from taskhub.services.subtasks import add_subtask


async def create_task(client: AsyncClient, headers: dict, **fields) -> dict:
    payload = {"title": "Sample task"}
    payload.update(fields)
    response = await client.post("/api/v1/tasks", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def project_progress(client: AsyncClient, headers: dict, project_id: str) -> int:
    response = await client.get(f"/api/v1/projects/{project_id}", headers=headers)
    return response.json()["progress"]


@pytest_asyncio.fixture
async def member_headers(client: AsyncClient, auth_headers: dict, test_project: Project, make_user, make_headers):
    """Headers for a user per role on the test project: {"Viewer": {...}, "Editor": {...}, "Admin": {...}}."""
    headers = {}
    for role in ("Viewer", "Editor", "Admin"):
        email = f"{role.lower()}@example.com"
        response = await client.post(
            f"/api/v1/projects/{test_project.id}/team", json={"email": email, "role": role}, headers=auth_headers
        )
        assert response.status_code == 201
        user = await make_user(email)
        headers[role] = make_headers(user)
    return headers


class TestTaskCreation:
    @pytest.mark.asyncio
    async def test_standalone_task(self, client: AsyncClient, auth_headers: dict, test_user: User):
        data = await create_task(client, auth_headers, title="Buy milk", priority="Low", dueDate="2030-03-01")
        assert data["projectId"] is None
        assert data["ownerId"] == test_user.id
        assert data["status"] == "To Do"
        assert data["priority"] == "Low"
        assert data["dueDate"] == "2030-03-01"
        assert data["subtasks"] == []
        assert data["canEdit"] is True
        assert data["canDelete"] is True
        assert data["warnings"] == []

    @pytest.mark.asyncio
    async def test_title_length_validated(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/v1/tasks", json={"title": "ab"}, headers=auth_headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_priority_rejected(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/tasks", json={"title": "Valid title", "priority": "Urgent"}, headers=auth_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_project_task_carries_project_name(
        self, client: AsyncClient, auth_headers: dict, test_project: Project
    ):
        data = await create_task(client, auth_headers, projectId=test_project.id)
        assert data["projectName"] == "Test Project"

    @pytest.mark.asyncio
    async def test_viewer_cannot_create_in_project(
        self, client: AsyncClient, member_headers: dict, test_project: Project
    ):
        response = await client.post(
            "/api/v1/tasks", json={"title": "Sneaky", "projectId": test_project.id}, headers=member_headers["Viewer"]
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_editor_can_create_in_project(
        self, client: AsyncClient, member_headers: dict, test_project: Project
    ):
        data = await create_task(client, member_headers["Editor"], projectId=test_project.id)
        assert data["canEdit"] is True
        assert data["canDelete"] is False

    @pytest.mark.asyncio
    async def test_unknown_project(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/tasks", json={"title": "Lost", "projectId": "nope"}, headers=auth_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_assignees_must_be_members(
        self, client: AsyncClient, auth_headers: dict, test_project: Project
    ):
        response = await client.post(
            "/api/v1/tasks",
            json={
                "title": "Assigned",
                "projectId": test_project.id,
                "assignees": [{"email": "outsider@example.com", "name": "Outsider"}],
            },
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "not a member" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_assignees_deduplicated(self, client: AsyncClient, auth_headers: dict, member_headers: dict,
                                          test_project: Project):
        data = await create_task(
            client, auth_headers,
            projectId=test_project.id,
            assignees=[
                {"email": "Editor@example.com", "name": "Ed"},
                {"email": "editor@example.com", "name": "Ed again"},
            ],
        )
        assert data["assigneeEmails"] == ["editor@example.com"]
        assert data["assignees"][0]["name"] == "Ed"

    @pytest.mark.asyncio
    async def test_created_task_is_fully_loaded(self, db_session: AsyncSession, test_user: User, as_actor):
        context = await task_service.create_task(db_session, TaskCreate(title="Loaded"), as_actor(test_user))
        assert not inspect(context.task).unloaded
        assert context.task.assignees == []
        assert context.task.subtasks == []

    @pytest.mark.asyncio
    async def test_title_is_trimmed_before_validation(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/v1/tasks", json={"title": "  a  "}, headers=auth_headers)
        assert response.status_code == 422
        response = await client.post("/api/v1/tasks", json={"title": "     "}, headers=auth_headers)
        assert response.status_code == 422

        data = await create_task(client, auth_headers, title="  Padded title  ")
        assert data["title"] == "Padded title"


class TestProgressScenario:
    @pytest.mark.asyncio
    async def test_completion_drives_progress(self, client: AsyncClient, auth_headers: dict, test_project: Project):
        first = await create_task(client, auth_headers, title="First task", projectId=test_project.id)
        second = await create_task(client, auth_headers, title="Second task", projectId=test_project.id)
        assert await project_progress(client, auth_headers, test_project.id) == 0

        await client.patch(f"/api/v1/tasks/{first['id']}/status", json={"status": "Completed"}, headers=auth_headers)
        assert await project_progress(client, auth_headers, test_project.id) == 50

        await client.patch(f"/api/v1/tasks/{second['id']}/status", json={"status": "Completed"}, headers=auth_headers)
        assert await project_progress(client, auth_headers, test_project.id) == 100

        response = await client.delete(f"/api/v1/tasks/{first['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["warnings"] == []
        assert await project_progress(client, auth_headers, test_project.id) == 100

    @pytest.mark.asyncio
    async def test_any_status_may_follow_any_other(
        self, client: AsyncClient, auth_headers: dict, test_project: Project
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id, status="Completed")
        assert await project_progress(client, auth_headers, test_project.id) == 100

        for status in ("On Hold", "Planning", "To Do", "In Progress"):
            response = await client.patch(
                f"/api/v1/tasks/{task['id']}/status", json={"status": status}, headers=auth_headers
            )
            assert response.status_code == 200
            assert response.json()["status"] == status
        assert await project_progress(client, auth_headers, test_project.id) == 0

    @pytest.mark.asyncio
    async def test_priority_change_leaves_progress_alone(
        self, client: AsyncClient, auth_headers: dict, test_project: Project
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id, status="Completed")
        response = await client.patch(
            f"/api/v1/tasks/{task['id']}/priority", json={"priority": "Critical"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["priority"] == "Critical"
        assert await project_progress(client, auth_headers, test_project.id) == 100


class TestTaskPermissions:
    @pytest.mark.asyncio
    async def test_viewer_cannot_change_status(
        self, client: AsyncClient, auth_headers: dict, member_headers: dict, test_project: Project
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}/status", json={"status": "Completed"}, headers=member_headers["Viewer"]
        )
        assert response.status_code == 403

        response = await client.get(f"/api/v1/tasks/{task['id']}", headers=member_headers["Viewer"])
        assert response.status_code == 200
        assert response.json()["status"] == "To Do"
        assert response.json()["canEdit"] is False
        assert await project_progress(client, auth_headers, test_project.id) == 0

    @pytest.mark.asyncio
    async def test_editor_changes_status_but_cannot_delete(
        self, client: AsyncClient, auth_headers: dict, member_headers: dict, test_project: Project
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}/status", json={"status": "In Progress"}, headers=member_headers["Editor"]
        )
        assert response.status_code == 200

        response = await client.delete(f"/api/v1/tasks/{task['id']}", headers=member_headers["Editor"])
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_deletes(
        self, client: AsyncClient, auth_headers: dict, member_headers: dict, test_project: Project
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)
        response = await client.delete(f"/api/v1/tasks/{task['id']}", headers=member_headers["Admin"])
        assert response.status_code == 200

        response = await client.get(f"/api/v1/tasks/{task['id']}", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_stranger_cannot_see_task(
        self, client: AsyncClient, auth_headers: dict, test_project: Project, make_user, make_headers
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)
        stranger = await make_user("stranger@example.com")
        response = await client.get(f"/api/v1/tasks/{task['id']}", headers=make_headers(stranger))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_assignee_of_standalone_task_can_view_only(
        self, client: AsyncClient, auth_headers: dict, make_user, make_headers
    ):
        task = await create_task(
            client, auth_headers, assignees=[{"email": "helper@example.com", "name": "Helper"}]
        )
        helper = await make_user("helper@example.com")

        response = await client.get(f"/api/v1/tasks/{task['id']}", headers=make_headers(helper))
        assert response.status_code == 200
        assert response.json()["canEdit"] is False

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}/status", json={"status": "Completed"}, headers=make_headers(helper)
        )
        assert response.status_code == 403


class TestRecalculationWarnings:
    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_the_status_change(
        self, client: AsyncClient, auth_headers: dict, test_project: Project, monkeypatch
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)

        async def broken_recalculation(db, project_id):
            raise StoreError("Could not recalculate project progress; please try again")

        monkeypatch.setattr("taskhub.services.progress.recalculate_progress", broken_recalculation)

        response = await client.patch(
            f"/api/v1/tasks/{task['id']}/status", json={"status": "Completed"}, headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Completed"
        assert len(data["warnings"]) == 1
        assert data["warnings"][0].startswith("The task was saved")

        monkeypatch.undo()
        response = await client.get(f"/api/v1/tasks/{task['id']}", headers=auth_headers)
        assert response.json()["status"] == "Completed"
        assert await project_progress(client, auth_headers, test_project.id) == 0

    @pytest.mark.asyncio
    async def test_failed_refresh_on_delete(
        self, client: AsyncClient, auth_headers: dict, test_project: Project, monkeypatch
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)

        async def broken_recalculation(db, project_id):
            raise StoreError("boom")

        monkeypatch.setattr("taskhub.services.progress.recalculate_progress", broken_recalculation)

        response = await client.delete(f"/api/v1/tasks/{task['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert len(response.json()["warnings"]) == 1

        response = await client.get(f"/api/v1/tasks/{task['id']}", headers=auth_headers)
        assert response.status_code == 404


class TestSubtasks:
    @pytest.mark.asyncio
    async def test_add_toggle_delete(self, client: AsyncClient, auth_headers: dict):
        task = await create_task(client, auth_headers)
        base = f"/api/v1/tasks/{task['id']}/subtasks"

        response = await client.post(base, json={"title": "  Draft outline "}, headers=auth_headers)
        assert response.status_code == 201
        response = await client.post(base, json={"title": "Review"}, headers=auth_headers)
        subtasks = response.json()["subtasks"]
        assert [s["title"] for s in subtasks] == ["Draft outline", "Review"]
        assert all(s["completed"] is False for s in subtasks)

        first_id = subtasks[0]["id"]
        response = await client.patch(f"{base}/{first_id}/toggle", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["subtasks"][0]["completed"] is True

        response = await client.patch(f"{base}/{first_id}/toggle", headers=auth_headers)
        assert response.json()["subtasks"][0]["completed"] is False

        response = await client.delete(f"{base}/{first_id}", headers=auth_headers)
        assert response.status_code == 200
        assert [s["title"] for s in response.json()["subtasks"]] == ["Review"]

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, client: AsyncClient, auth_headers: dict):
        task = await create_task(client, auth_headers)
        response = await client.post(
            f"/api/v1/tasks/{task['id']}/subtasks", json={"title": "   "}, headers=auth_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_subtask(self, client: AsyncClient, auth_headers: dict):
        task = await create_task(client, auth_headers)
        response = await client.patch(
            f"/api/v1/tasks/{task['id']}/subtasks/missing/toggle", headers=auth_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_subtasks_do_not_affect_progress(
        self, client: AsyncClient, auth_headers: dict, test_project: Project
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)
        response = await client.post(
            f"/api/v1/tasks/{task['id']}/subtasks", json={"title": "Step"}, headers=auth_headers
        )
        subtask_id = response.json()["subtasks"][0]["id"]
        await client.patch(f"/api/v1/tasks/{task['id']}/subtasks/{subtask_id}/toggle", headers=auth_headers)
        assert await project_progress(client, auth_headers, test_project.id) == 0

    @pytest.mark.asyncio
    async def test_viewer_cannot_add(
        self, client: AsyncClient, auth_headers: dict, member_headers: dict, test_project: Project
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)
        response = await client.post(
            f"/api/v1/tasks/{task['id']}/subtasks", json={"title": "Step"}, headers=member_headers["Viewer"]
        )
        assert response.status_code == 403


class TestComments:
    @pytest.mark.asyncio
    async def test_post_and_list(
        self, client: AsyncClient, auth_headers: dict, member_headers: dict, test_project: Project, test_user: User
    ):
        task = await create_task(client, auth_headers, projectId=test_project.id)
        url = f"/api/v1/tasks/{task['id']}/comments"

        response = await client.post(url, json={"text": "First!"}, headers=auth_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["userId"] == test_user.id
        assert data["userDisplayName"] == "Tester"
        assert data["taskId"] == task["id"]

        # Viewers can comment
        response = await client.post(url, json={"text": "Looks good"}, headers=member_headers["Viewer"])
        assert response.status_code == 201

        response = await client.get(url, headers=auth_headers)
        assert response.status_code == 200
        assert [c["text"] for c in response.json()] == ["First!", "Looks good"]

    @pytest.mark.asyncio
    async def test_blank_comment_rejected(self, client: AsyncClient, auth_headers: dict):
        task = await create_task(client, auth_headers)
        response = await client.post(
            f"/api/v1/tasks/{task['id']}/comments", json={"text": "  "}, headers=auth_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_comment_too_long(self, client: AsyncClient, auth_headers: dict):
        task = await create_task(client, auth_headers)
        response = await client.post(
            f"/api/v1/tasks/{task['id']}/comments", json={"text": "x" * 2001}, headers=auth_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stranger_cannot_comment(self, client: AsyncClient, auth_headers: dict, make_user, make_headers):
        task = await create_task(client, auth_headers)
        stranger = await make_user("stranger@example.com")
        response = await client.post(
            f"/api/v1/tasks/{task['id']}/comments", json={"text": "hi"}, headers=make_headers(stranger)
        )
        assert response.status_code == 403


class TestTaskListing:
    @pytest.mark.asyncio
    async def test_filters(self, client: AsyncClient, auth_headers: dict, test_project: Project):
        today = date.today()
        await create_task(client, auth_headers, title="Overdue report", priority="High",
                          dueDate=(today - timedelta(days=2)).isoformat())
        await create_task(client, auth_headers, title="Due today", dueDate=today.isoformat(),
                          projectId=test_project.id)
        await create_task(client, auth_headers, title="Finished long ago", status="Completed",
                          dueDate=(today - timedelta(days=10)).isoformat())
        await create_task(client, auth_headers, title="Someday")

        async def titles(**params):
            response = await client.get("/api/v1/tasks", params=params, headers=auth_headers)
            assert response.status_code == 200
            return {t["title"] for t in response.json()["items"]}

        assert len(await titles()) == 4
        assert await titles(due="overdue") == {"Overdue report"}
        assert await titles(due="dueToday") == {"Due today"}
        assert await titles(due="noDeadline") == {"Someday"}
        assert await titles(priority="High") == {"Overdue report"}
        assert await titles(status="Completed") == {"Finished long ago"}
        assert await titles(projectId=test_project.id) == {"Due today"}
        assert await titles(search="test project") == {"Due today"}
        assert await titles(search="REPORT") == {"Overdue report"}

    @pytest.mark.asyncio
    async def test_assigned_tasks_are_listed(
        self, client: AsyncClient, auth_headers: dict, member_headers: dict, test_project: Project
    ):
        await create_task(
            client, auth_headers,
            title="For the editor",
            projectId=test_project.id,
            assignees=[{"email": "editor@example.com", "name": "Ed"}],
        )
        await create_task(client, auth_headers, title="Not for the editor", projectId=test_project.id)

        response = await client.get("/api/v1/tasks", headers=member_headers["Editor"])
        assert [t["title"] for t in response.json()["items"]] == ["For the editor"]


class TestWritesAreCommitted:
    @pytest.mark.asyncio
    async def test_priority_change_survives_rollback(self, db_session: AsyncSession, test_user: User, as_actor):
        actor = as_actor(test_user)
        context = await task_service.create_task(db_session, TaskCreate(title="Durable"), actor)
        task_id = context.task.id

        await task_service.update_task_priority(db_session, task_id, TaskPriority.CRITICAL, actor)
        await db_session.rollback()

        task = await task_service.load_task(db_session, task_id, fresh=True)
        assert task.priority == TaskPriority.CRITICAL

    @pytest.mark.asyncio
    async def test_subtask_survives_rollback(self, db_session: AsyncSession, test_user: User, as_actor):
        actor = as_actor(test_user)
        context = await task_service.create_task(db_session, TaskCreate(title="Durable"), actor)
        task_id = context.task.id

        await add_subtask(db_session, task_id, "Write it down", actor)
        await db_session.rollback()

        count = await db_session.scalar(
            select(func.count()).select_from(Subtask).where(Subtask.task_id == task_id)
        )
        assert count == 1
