"""
SQLAlchemy models for TaskHub.

- Identity: users
- Projects: projects and their team members
- Tasks: tasks, assignees, subtasks and comments
"""
from taskhub.models.user import User
from taskhub.models.project import Project, ProjectMember, ProjectRole, ProjectStatus
from taskhub.models.task import (
    Task,
    TaskAssignee,
    Subtask,
    TaskStatus,
    TaskPriority,
    PRIORITY_ORDER,
)
from taskhub.models.comment import Comment

__all__ = [
    "User",
    "Project",
    "ProjectMember",
    "ProjectRole",
    "ProjectStatus",
    "Task",
    "TaskAssignee",
    "Subtask",
    "TaskStatus",
    "TaskPriority",
    "PRIORITY_ORDER",
    "Comment",
]
