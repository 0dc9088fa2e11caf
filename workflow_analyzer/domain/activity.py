"""
Issue activity (history) models.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ActivityType(str, Enum):
    ISSUE_CREATED = "issue-created"
    COMMENT_ADDED = "comment-added"
    ATTACHMENT_ADDED = "attachment-added"
    FIELD_UPDATE = "field-update"
    STATE_CHANGE = "state-change"
    ASSIGNEE_CHANGE = "assignee-change"
    TAG_ADDED = "tag-added"
    TAG_REMOVED = "tag-removed"
    LINK_ADDED = "link-added"
    LINK_REMOVED = "link-removed"
    VOTE_ADDED = "vote-added"
    VOTE_REMOVED = "vote-removed"
    STAR_ADDED = "star-added"
    STAR_REMOVED = "star-removed"
    VISIBILITY_CHANGE = "visibility-change"
    WORK_ITEM_ADDED = "work-item-added"
    CUSTOM = "custom"


class Activity(BaseModel):
    """One entry of an issue's history."""

    model_config = ConfigDict(frozen=True)

    id: str
    issue_id: str = Field(default="", description="Internal id of the issue the activity targets")
    timestamp: datetime
    author: str = Field(default="System")
    type: ActivityType = Field(default=ActivityType.CUSTOM)
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    target: Optional[str] = Field(default=None, description="Readable id of the target, e.g. DEMO-42")
    target_member: Optional[str] = None
    description: Optional[str] = None

    def is_state_change(self) -> bool:
        return self.field == "State" or self.type is ActivityType.STATE_CHANGE

    def is_assignment_change(self) -> bool:
        return self.field == "Assignee" or self.type is ActivityType.ASSIGNEE_CHANGE

    def is_field_update(self) -> bool:
        return self.type is ActivityType.FIELD_UPDATE and self.field is not None

    def to_human_readable(self) -> str:
        """One-line description of what happened and who did it."""
        by = f"by {self.author}"
        first_added = self.added[0] if self.added else None
        first_removed = self.removed[0] if self.removed else None

        if self.type is ActivityType.FIELD_UPDATE:
            if self.field is None:
                return f"Field updated {by}"
            return f"{self.field} changed from {self.old_value} to {self.new_value} {by}"
        if self.type is ActivityType.STATE_CHANGE:
            return f"State changed from {self.old_value} to {self.new_value} {by}"
        if self.type is ActivityType.ASSIGNEE_CHANGE:
            return f"Assigned to {self.new_value} {by}"
        if self.type is ActivityType.TAG_ADDED:
            return f"Tag {first_added} added {by}"
        if self.type is ActivityType.TAG_REMOVED:
            return f"Tag {first_removed} removed {by}"
        if self.type is ActivityType.LINK_ADDED:
            return f"Link added to {self.target} {by}"
        if self.type is ActivityType.LINK_REMOVED:
            return f"Link removed to {self.target} {by}"
        if self.type is ActivityType.CUSTOM:
            return self.description or f"Activity performed {by}"

        labels = {
            ActivityType.ISSUE_CREATED: "Issue created",
            ActivityType.COMMENT_ADDED: "Comment added",
            ActivityType.ATTACHMENT_ADDED: "Attachment added",
            ActivityType.VOTE_ADDED: "Vote added",
            ActivityType.VOTE_REMOVED: "Vote removed",
            ActivityType.STAR_ADDED: "Star added",
            ActivityType.STAR_REMOVED: "Star removed",
            ActivityType.VISIBILITY_CHANGE: "Visibility changed",
            ActivityType.WORK_ITEM_ADDED: "Work item added",
        }
        return f"{labels[self.type]} {by}"


class ActivityPage(BaseModel):
    """A cursor-paged slice of an issue's activities."""

    model_config = ConfigDict(frozen=True)

    activities: list[Activity] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[str] = None
