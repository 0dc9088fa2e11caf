"""
Issue domain model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Issue(BaseModel):
    """Read-only snapshot of a YouTrack issue."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Readable issue id, e.g. DEMO-42")
    project_id: str = Field(..., description="Owning project id")
    summary: str
    state: str = Field(default="Unknown")
    description: Optional[str] = None
    assignee: Optional[str] = None
    reporter: Optional[str] = None
    priority: Optional[str] = None
    type: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    resolved: Optional[datetime] = None

    def is_resolved(self) -> bool:
        return self.resolved is not None

    def is_assigned(self) -> bool:
        return self.assignee is not None
