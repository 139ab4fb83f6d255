"""
Task, assignee and subtask models.
"""
from enum import Enum
from datetime import date
from typing import Optional
from sqlalchemy import String, Text, Integer, Boolean, Date, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskhub.models.base import BaseModel


class TaskStatus(str, Enum):
    """Task status. Any status may follow any other."""
    TODO = "To Do"
    PLANNING = "Planning"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


# Critical first
PRIORITY_ORDER = {
    TaskPriority.CRITICAL: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


class Task(BaseModel):
    """A unit of work, optionally scoped to a project."""
    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Plain reference, no foreign key: deleting a project leaves its tasks in place
    project_id: Mapped[Optional[str]] = mapped_column(String(15), nullable=True, index=True)

    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(TaskStatus, values_callable=_enum_values),
        default=TaskStatus.TODO,
        nullable=False,
        index=True
    )
    priority: Mapped[TaskPriority] = mapped_column(
        SQLEnum(TaskPriority, values_callable=_enum_values),
        default=TaskPriority.MEDIUM,
        nullable=False
    )
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    owner_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    assignees: Mapped[list["TaskAssignee"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskAssignee.position",
        lazy="selectin",
    )
    subtasks: Mapped[list["Subtask"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Subtask.position",
        lazy="selectin",
    )

    @property
    def assignee_emails(self) -> list[str]:
        return [assignee.email for assignee in self.assignees]

    def __repr__(self) -> str:
        return f"<Task {self.title} ({self.status.value})>"


class TaskAssignee(BaseModel):
    """A person a task is assigned to."""
    __tablename__ = "task_assignees"
    __table_args__ = (
        UniqueConstraint("task_id", "email", name="uq_task_assignees_task_email"),
    )

    task_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    task: Mapped["Task"] = relationship(back_populates="assignees")


class Subtask(BaseModel):
    """Checklist item of a task; completion does not affect project progress."""
    __tablename__ = "subtasks"

    task_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    task: Mapped["Task"] = relationship(back_populates="subtasks")
