"""
Analysis result models returned to API callers.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WorkflowRuleInfo(BaseModel):
    """A workflow rule the model blamed, resolved against the fetched rules."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    description: str = ""
    rule_url: Optional[str] = Field(default=None, description="Link to the rule in YouTrack admin")


class AnalysisResponse(BaseModel):
    """Explanation of a failed workflow action."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    explanation: str
    workflow_rules: list[WorkflowRuleInfo] = Field(default_factory=list)
    suggested_actions: list[str] = Field(default_factory=list)
