"""
Prompt construction for workflow failure analysis.

Both builders are pure: the same inputs always give the same prompt.
"""

from __future__ import annotations

from typing import Optional, Sequence

from workflow_analyzer.core.constants import MAX_PROMPT_RULES
from workflow_analyzer.domain.issue import Issue
from workflow_analyzer.domain.workflow import WorkflowRule

JSON_RESPONSE_INSTRUCTIONS = """Which rule(s) blocked this action? Respond with:
{
  "explanation": "brief analysis of what happened",
  "suggestion": "how to fix it",
  "blockedByRules": ["rule name 1", "rule name 2"]
}
"""

BASIC_INSTRUCTIONS = """Analyze this workflow error and provide:
1. What likely went wrong
2. Which workflow rule might have caused it
3. How to fix it"""


def _format_rule(index: int, rule: WorkflowRule) -> list[str]:
    lines = [f"{index}. {rule.name} ({rule.type.value})"]
    if rule.guard is not None:
        lines.append(f"   - Guard: {rule.guard}")
    if rule.action is not None:
        lines.append(f"   - Action: {rule.action}")
    if rule.message is not None:
        lines.append(f"   - Message: {rule.message}")
    if rule.requirements:
        lines.append(f"   - Requirements: {', '.join(rule.requirements)}")
    return lines


def build_enriched_prompt(issue: Issue, rules: Sequence[WorkflowRule], description: str) -> str:
    """
    Prompt with issue details and the project's rules, asking for a JSON answer.

    Only the first ``MAX_PROMPT_RULES`` rules, in fetch order, are included.
    """
    lines = [
        f'Issue: {issue.id} - "{issue.summary}"',
        f"Current State: {issue.state}",
        f"Assignee: {issue.assignee or '(not set)'}",
    ]
    if issue.priority is not None:
        lines.append(f"Priority: {issue.priority}")
    if issue.type is not None:
        lines.append(f"Type: {issue.type}")
    lines.append("")

    lines.append(f"User Action: {description}")
    lines.append("")

    lines.append("Project Workflow Rules:")
    for index, rule in enumerate(rules[:MAX_PROMPT_RULES], start=1):
        lines.extend(_format_rule(index, rule))
    lines.append("")

    return "\n".join(lines) + "\n" + JSON_RESPONSE_INSTRUCTIONS


def build_basic_prompt(description: str, issue_id: Optional[str] = None) -> str:
    """Prompt used when the issue or its project's rules are unknown."""
    lines = [f"User reported: {description}"]
    if issue_id:
        lines.append(f"Issue ID: {issue_id}")
    lines.append("")
    lines.append(BASIC_INSTRUCTIONS)
    return "\n".join(lines)


def build_prompt(
    description: str,
    issue: Optional[Issue],
    rules: Sequence[WorkflowRule],
    issue_id: Optional[str] = None,
) -> str:
    """Enriched prompt when both the issue and at least one rule are known, basic otherwise."""
    if issue is not None and rules:
        return build_enriched_prompt(issue, rules, description)
    return build_basic_prompt(description, issue_id)
