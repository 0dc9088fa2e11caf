"""
Project domain model.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectRole(str, Enum):
    PROJECT_ADMIN = "project-admin"
    DEVELOPER = "developer"
    REPORTER = "reporter"
    VIEWER = "viewer"
    CUSTOM = "custom"


class ProjectField(BaseModel):
    """A custom field attached to a project."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = "Unknown"
    field_type: Optional[str] = None
    can_be_empty: bool = True

    @property
    def is_required(self) -> bool:
        return not self.can_be_empty


class ProjectMember(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    user_name: str
    role: ProjectRole = ProjectRole.CUSTOM


class Project(BaseModel):
    """Read-only snapshot of a YouTrack project."""

    model_config = ConfigDict(frozen=True)

    id: str
    short_name: str = Field(..., description="Short name used as issue id prefix, e.g. DEMO")
    name: str
    description: Optional[str] = None
    leader: Optional[str] = None
    created: Optional[datetime] = None
    archived: bool = False
    workflows: list[str] = Field(default_factory=list)
    fields: list[ProjectField] = Field(default_factory=list)
    issue_types: list[str] = Field(default_factory=list)
    members: list[ProjectMember] = Field(default_factory=list)

    def has_workflow(self, workflow_id: str) -> bool:
        return workflow_id in self.workflows

    def get_field_by_name(self, name: str) -> Optional[ProjectField]:
        return next((field for field in self.fields if field.name == name), None)

    def get_required_fields(self) -> list[ProjectField]:
        return [field for field in self.fields if field.is_required]

    def is_member(self, user_id: str) -> bool:
        return any(member.user_id == user_id for member in self.members)

    def get_member_role(self, user_id: str) -> Optional[ProjectRole]:
        return next((member.role for member in self.members if member.user_id == user_id), None)
