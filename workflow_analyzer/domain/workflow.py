"""
Workflow and workflow rule domain models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from workflow_analyzer.core.constants import RuleType


class WorkflowRule(BaseModel):
    """
    A named, typed guard/action pair attached to a workflow.

    ``name`` is the only reliable key for matching rules mentioned by the
    language model; guard and action are opaque script text.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: RuleType = RuleType.CUSTOM_SCRIPT
    guard: Optional[str] = None
    action: Optional[str] = None
    message: Optional[str] = None
    requirements: dict[str, Any] = Field(default_factory=dict)
    is_enabled: bool = True

    def has_guard(self) -> bool:
        return bool(self.guard and self.guard.strip())

    def requires_field(self, field_name: str) -> bool:
        return (
            field_name in self.requirements
            or (self.guard is not None and field_name in self.guard)
            or (self.action is not None and field_name in self.action)
        )


class Workflow(BaseModel):
    """A workflow attached to one or more projects."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: Optional[str] = None
    rules: list[WorkflowRule] = Field(default_factory=list)
    is_enabled: bool = True
    is_auto_attached: bool = False
    projects: list[str] = Field(default_factory=list)
    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    def rules_of_type(self, rule_type: RuleType) -> list[WorkflowRule]:
        return [rule for rule in self.rules if rule.type == rule_type]
