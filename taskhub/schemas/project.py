"""
Pydantic schemas for Project and team endpoints.
"""
from typing import Optional
from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from taskhub.models.project import ProjectRole, ProjectStatus


class ProjectCreate(BaseModel):
    """Create a new project."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    deadline: Optional[date] = None
    status: ProjectStatus = ProjectStatus.TODO


class ProjectUpdate(BaseModel):
    """Update project settings. Progress is not settable."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    deadline: Optional[date] = None
    status: Optional[ProjectStatus] = None


class TeamMemberResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str


class TeamMemberAdd(BaseModel):
    """Invite a member by email."""
    email: EmailStr
    role: ProjectRole = ProjectRole.VIEWER


class TeamMemberRoleUpdate(BaseModel):
    role: ProjectRole


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: str
    progress: int
    deadline: Optional[date] = None
    ownerId: str
    ownerName: str
    ownerEmail: str
    team: list[TeamMemberResponse]
    memberEmails: list[str]
    userRole: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime


class ProjectListResponse(BaseModel):
    """Paginated list of projects."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[ProjectResponse]
