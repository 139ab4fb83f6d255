"""
Pydantic schemas for Task, subtask and comment endpoints.
"""
from typing import Optional
from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from taskhub.models.task import TaskPriority, TaskStatus


class AssigneeIn(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    id: Optional[str] = None


class TaskCreate(BaseModel):
    """Create a new task, optionally inside a project."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    projectId: Optional[str] = None
    dueDate: Optional[date] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    assignees: list[AssigneeIn] = Field(default_factory=list)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskPriorityUpdate(BaseModel):
    priority: TaskPriority


class AssigneeResponse(BaseModel):
    id: Optional[str] = None
    email: str
    name: str


class SubtaskCreate(BaseModel):
    title: str = Field(..., max_length=200)


class SubtaskResponse(BaseModel):
    id: str
    title: str
    completed: bool


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    projectId: Optional[str] = None
    projectName: Optional[str] = None
    status: str
    priority: str
    dueDate: Optional[date] = None
    ownerId: str
    assignees: list[AssigneeResponse]
    assigneeEmails: list[str]
    subtasks: list[SubtaskResponse]
    canEdit: bool = False
    canDelete: bool = False
    createdAt: datetime
    updatedAt: datetime
    # Non-blocking notices, e.g. project progress could not be refreshed
    warnings: list[str] = Field(default_factory=list)


class TaskListResponse(BaseModel):
    """Paginated list of tasks."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[TaskResponse]


class CommentCreate(BaseModel):
    text: str = Field(..., max_length=2000)


class CommentResponse(BaseModel):
    id: str
    taskId: str
    userId: str
    userDisplayName: str
    userEmail: Optional[str] = None
    text: str
    createdAt: datetime
