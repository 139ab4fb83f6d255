"""
Project and project team models.

A project owns an ordered team. The owner is always the first team row with
role ``Owner``; ``member_emails`` is derived from the team rows so the two can
never disagree.
"""
from enum import Enum
from datetime import date
from typing import Optional
from sqlalchemy import String, Text, Integer, Date, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskhub.models.base import BaseModel


class ProjectStatus(str, Enum):
    """Project lifecycle status."""
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


class ProjectRole(str, Enum):
    """Per-project team roles."""
    OWNER = "Owner"
    ADMIN = "Admin"
    EDITOR = "Editor"
    VIEWER = "Viewer"


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


class Project(BaseModel):
    """A container of tasks with a team, a status and a derived progress."""
    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        SQLEnum(ProjectStatus, values_callable=_enum_values),
        default=ProjectStatus.TODO,
        nullable=False
    )
    # Written only by the progress recalculator
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    owner_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    owner_name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_email: Mapped[str] = mapped_column(String(255), nullable=False)

    team: Mapped[list["ProjectMember"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMember.position",
        lazy="selectin",
    )

    @property
    def member_emails(self) -> list[str]:
        return [member.email for member in self.team]

    def __repr__(self) -> str:
        return f"<Project {self.name} ({self.status.value})>"


class ProjectMember(BaseModel):
    """One entry of a project's team."""
    __tablename__ = "project_members"
    __table_args__ = (
        UniqueConstraint("project_id", "email", name="uq_project_members_project_email"),
    )

    project_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Identity-provider user id when known; the email for invited members
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Stored as plain text so an unexpected value loads and resolves to no access
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    project: Mapped["Project"] = relationship(back_populates="team")

    def __repr__(self) -> str:
        return f"<ProjectMember {self.email} in {self.project_id} as {self.role}>"
