"""
Turns a completion response into an ``AnalysisResponse``.

The model is asked for JSON naming the rules that blocked the action. Names
are matched back to the rules fetched from YouTrack; anything that cannot be
parsed or matched degrades quietly instead of failing the request.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from workflow_analyzer.core.constants import FALLBACK_SUGGESTED_ACTION
from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.domain.analysis import AnalysisResponse, WorkflowRuleInfo
from workflow_analyzer.domain.workflow import WorkflowRule

logger = get_logger(__name__)

EXPLANATION_KEYS = ("explanation", "analysis")
SUGGESTION_KEYS = ("suggestion", "suggestedAction")
BLOCKED_RULES_KEY = "blockedByRules"


def build_rule_url(base_url: str, rule: WorkflowRule) -> str:
    """Admin page of a rule; derived on demand, never stored."""
    return f"{base_url.rstrip('/')}/admin/workflows/rules/{rule.id}"


def _first_text(payload: dict[str, Any], keys: Sequence[str]) -> str:
    for key in keys:
        value = payload.get(key)
        if value is None or isinstance(value, (dict, list)):
            continue
        return value if isinstance(value, str) else str(value)
    return ""


def _rule_names(payload: dict[str, Any]) -> list[str]:
    raw = payload.get(BLOCKED_RULES_KEY)
    if not isinstance(raw, list):
        if raw is not None:
            logger.debug("Ignoring non-list blockedByRules", value_type=type(raw).__name__)
        return []
    return [name for name in raw if isinstance(name, str)]


def find_rule(llm_name: str, rules: Sequence[WorkflowRule]) -> Optional[WorkflowRule]:
    """
    First rule whose name contains ``llm_name`` or is contained in it, ignoring case.
    """
    needle = llm_name.strip().casefold()
    if not needle:
        return None
    for rule in rules:
        name = rule.name.casefold()
        if needle in name or name in needle:
            return rule
    return None


def describe_rule(rule: WorkflowRule) -> str:
    return rule.guard or rule.message or rule.action or ""


def match_rules(
    llm_names: Sequence[str],
    rules: Sequence[WorkflowRule],
    base_url: str,
) -> list[WorkflowRuleInfo]:
    """Resolve model-produced rule names; unmatched names are logged and dropped."""
    matched: list[WorkflowRuleInfo] = []
    for llm_name in llm_names:
        rule = find_rule(llm_name, rules)
        if rule is None:
            logger.warning("Could not match rule name to any available rule", rule_name=llm_name)
            continue
        matched.append(
            WorkflowRuleInfo(
                name=rule.name,
                description=describe_rule(rule),
                rule_url=build_rule_url(base_url, rule),
            )
        )
    return matched


def fallback_response(raw_response: str) -> AnalysisResponse:
    return AnalysisResponse(
        explanation=raw_response,
        workflow_rules=[],
        suggested_actions=[FALLBACK_SUGGESTED_ACTION],
    )


def reconcile_response(
    raw_response: str,
    rules: Sequence[WorkflowRule],
    base_url: str,
) -> AnalysisResponse:
    """
    Build the final answer from the raw completion text.

    Never raises: a response that is not a JSON object becomes the
    explanation itself, with no rules and a generic suggested action.
    """
    try:
        payload = json.loads(raw_response)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to parse JSON response, using raw text", error=str(e))
        return fallback_response(raw_response)

    if not isinstance(payload, dict):
        logger.warning("Completion JSON is not an object, using raw text")
        return fallback_response(raw_response)

    explanation = _first_text(payload, EXPLANATION_KEYS)
    suggestion = _first_text(payload, SUGGESTION_KEYS)
    workflow_rules = match_rules(_rule_names(payload), rules, base_url)

    logger.debug("Parsed JSON response", matched_rules=len(workflow_rules))
    return AnalysisResponse(
        explanation=explanation,
        workflow_rules=workflow_rules,
        suggested_actions=[suggestion] if suggestion else [],
    )
