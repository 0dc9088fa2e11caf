"""
Mapping from YouTrack REST JSON to domain models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from workflow_analyzer.core.constants import RuleType
from workflow_analyzer.domain.activity import Activity, ActivityPage, ActivityType
from workflow_analyzer.domain.issue import Issue
from workflow_analyzer.domain.project import Project, ProjectField, ProjectMember, ProjectRole
from workflow_analyzer.domain.workflow import Workflow, WorkflowRule

_RULE_TYPES = {
    "STATEMACHINE": RuleType.STATE_MACHINE,
    "STATE_MACHINE": RuleType.STATE_MACHINE,
    "ONCHANGE": RuleType.ON_CHANGE,
    "ON_CHANGE": RuleType.ON_CHANGE,
    "ONSCHEDULE": RuleType.ON_SCHEDULE,
    "ON_SCHEDULE": RuleType.ON_SCHEDULE,
    "ACTION": RuleType.ACTION,
}

_REQUIREMENT_KEYS = (
    "incompatibleActions",
    "requiredFields",
    "requiredProjects",
    "requiredIssueTypes",
)

# Categories that map to an activity type regardless of added/removed items
_ACTIVITY_CATEGORIES = {
    "IssueCreatedCategory": ActivityType.ISSUE_CREATED,
    "CommentCategory": ActivityType.COMMENT_ADDED,
    "AttachmentCategory": ActivityType.ATTACHMENT_ADDED,
    "VisibilityCategory": ActivityType.VISIBILITY_CHANGE,
    "WorkItemCategory": ActivityType.WORK_ITEM_ADDED,
}

# (added, removed) activity types for toggle-like categories
_TOGGLE_CATEGORIES = {
    "TagCategory": (ActivityType.TAG_ADDED, ActivityType.TAG_REMOVED),
    "LinkCategory": (ActivityType.LINK_ADDED, ActivityType.LINK_REMOVED),
    "VoteCategory": (ActivityType.VOTE_ADDED, ActivityType.VOTE_REMOVED),
    "StarCategory": (ActivityType.STAR_ADDED, ActivityType.STAR_REMOVED),
}

_ROLE_KEYWORDS = (
    (("ADMIN",), ProjectRole.PROJECT_ADMIN),
    (("DEVELOPER",), ProjectRole.DEVELOPER),
    (("REPORTER",), ProjectRole.REPORTER),
    (("VIEWER", "OBSERVER"), ProjectRole.VIEWER),
)


def _timestamp(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _field_value(fields: list[dict[str, Any]], name: str) -> Optional[str]:
    """Presentable value of the named issue field, matched case-insensitively."""
    for field in fields:
        if str(field.get("name", "")).lower() != name.lower():
            continue
        value = field.get("value")
        if isinstance(value, dict):
            return (
                value.get("name")
                or value.get("login")
                or value.get("presentation")
                or value.get("id")
            )
        if isinstance(value, str):
            return value
        return None
    return None


def map_rule_type(raw: Optional[str]) -> RuleType:
    """Map a YouTrack ``ruleType`` string; unknown kinds are custom scripts."""
    if not raw:
        return RuleType.CUSTOM_SCRIPT
    return _RULE_TYPES.get(raw.upper(), RuleType.CUSTOM_SCRIPT)


def to_issue(data: dict[str, Any]) -> Issue:
    """Convert an issue JSON object to an ``Issue``."""
    fields = data.get("fields") or []
    readable_id = data.get("idReadable") or data["id"]
    project = data.get("project") or {}
    project_id = project.get("shortName") or project.get("id")
    if not project_id:
        project_id = readable_id.split("-", 1)[0] if "-" in readable_id else "UNKNOWN"

    reporter = data.get("reporter") or {}

    return Issue(
        id=readable_id,
        project_id=project_id,
        summary=data.get("summary") or "",
        description=data.get("description"),
        state=_field_value(fields, "State") or "Unknown",
        assignee=_field_value(fields, "Assignee"),
        reporter=reporter.get("login"),
        priority=_field_value(fields, "Priority"),
        type=_field_value(fields, "Type"),
        tags=[tag["name"] for tag in data.get("tags") or [] if tag.get("name")],
        created=_timestamp(data.get("created")),
        updated=_timestamp(data.get("updated")),
        resolved=_timestamp(data.get("resolved")),
    )


def to_rule(data: dict[str, Any]) -> WorkflowRule:
    """Convert a workflow rule JSON object to a ``WorkflowRule``."""
    raw_requirements = data.get("requirements") or {}
    requirements = {
        key: raw_requirements[key]
        for key in _REQUIREMENT_KEYS
        if raw_requirements.get(key)
    }

    return WorkflowRule(
        id=data["id"],
        name=data.get("name") or data["id"],
        type=map_rule_type(data.get("ruleType")),
        guard=data.get("guard"),
        action=data.get("body") or data.get("script"),
        message=data.get("title"),
        requirements=requirements,
        is_enabled=data.get("isEnabled", True),
    )


def to_workflow(data: dict[str, Any]) -> Workflow:
    """Convert a workflow JSON object to a ``Workflow``."""
    return Workflow(
        id=data["id"],
        name=data.get("name") or data["id"],
        description=data.get("description"),
        rules=[to_rule(rule) for rule in data.get("rules") or []],
        is_enabled=data.get("isEnabled", True),
        is_auto_attached=data.get("isAutoAttached", False),
        projects=[p["id"] for p in data.get("projects") or [] if p.get("id")],
        created=_timestamp(data.get("created")),
        updated=_timestamp(data.get("updated")),
    )


def _item_value(item: dict[str, Any]) -> str:
    return item.get("presentation") or item.get("name") or item.get("text") or item.get("id") or "Unknown"


def _activity_type(data: dict[str, Any], field_name: Optional[str]) -> ActivityType:
    category = data.get("category")
    if category in _ACTIVITY_CATEGORIES:
        return _ACTIVITY_CATEGORIES[category]
    if field_name == "State":
        return ActivityType.STATE_CHANGE
    if field_name == "Assignee":
        return ActivityType.ASSIGNEE_CHANGE
    if category in _TOGGLE_CATEGORIES:
        added_type, removed_type = _TOGGLE_CATEGORIES[category]
        if data.get("added"):
            return added_type
        if data.get("removed"):
            return removed_type
    if data.get("field") is not None:
        return ActivityType.FIELD_UPDATE
    return ActivityType.CUSTOM


def _activity_description(data: dict[str, Any]) -> Optional[str]:
    category = data.get("category")
    added = data.get("added") or []
    first = added[0] if added else {}
    if category == "CommentCategory":
        return first.get("text")
    if category == "AttachmentCategory":
        return f"Attachment: {first.get('name')}"
    if category == "LinkCategory":
        action = "added" if added else "removed"
        return f"Link {action}: {(data.get('target') or {}).get('idReadable')}"
    if category == "WorkItemCategory":
        return f"Work logged: {first.get('presentation')}"
    return None


def to_activity(data: dict[str, Any]) -> Activity:
    """Convert an activity JSON object to an ``Activity``."""
    field = data.get("field")
    field_name = None
    if field:
        field_name = field.get("presentation") or (field.get("customField") or {}).get("name")

    added = [_item_value(item) for item in data.get("added") or []]
    removed = [_item_value(item) for item in data.get("removed") or []]
    target = data.get("target") or {}

    return Activity(
        id=data["id"],
        issue_id=target.get("id") or "",
        timestamp=_timestamp(data["timestamp"]),
        author=(data.get("author") or {}).get("login") or "System",
        type=_activity_type(data, field_name),
        field=field_name,
        old_value=removed[0] if removed else None,
        new_value=added[0] if added else None,
        added=added,
        removed=removed,
        target=target.get("idReadable"),
        target_member=data.get("targetMember"),
        description=_activity_description(data),
    )


def to_activity_page(data: Any) -> ActivityPage:
    """Convert an activities page, or a bare activity list, to an ``ActivityPage``."""
    if isinstance(data, list):
        return ActivityPage(activities=[to_activity(item) for item in data])
    data = data or {}
    return ActivityPage(
        activities=[to_activity(item) for item in data.get("activities") or []],
        has_more=data.get("hasAfter", False),
        next_cursor=data.get("afterCursor"),
    )


def _member_role(roles: list[dict[str, Any]]) -> ProjectRole:
    names = [str(role.get("name") or "").upper() for role in roles]
    for keywords, role in _ROLE_KEYWORDS:
        if any(keyword in name for name in names for keyword in keywords):
            return role
    return ProjectRole.CUSTOM


def to_project(data: dict[str, Any]) -> Project:
    """Convert a project JSON object to a ``Project``."""
    fields = []
    for item in data.get("fields") or []:
        field = item.get("field") or {}
        field_type = field.get("fieldType") or {}
        fields.append(
            ProjectField(
                id=item["id"],
                name=field.get("name") or "Unknown",
                field_type=field_type.get("id"),
                can_be_empty=item.get("canBeEmpty", True),
            )
        )

    members = []
    for member in (data.get("team") or {}).get("members") or []:
        user = member.get("user") or {}
        members.append(
            ProjectMember(
                user_id=user.get("id") or "",
                user_name=user.get("login") or user.get("fullName") or "Unknown",
                role=_member_role(member.get("roles") or []),
            )
        )

    return Project(
        id=data["id"],
        short_name=data.get("shortName") or data["id"],
        name=data.get("name") or data.get("shortName") or data["id"],
        description=data.get("description"),
        leader=(data.get("leader") or {}).get("login"),
        created=_timestamp(data.get("created")),
        archived=data.get("archived", False),
        workflows=[w["id"] for w in data.get("workflows") or [] if w.get("id")],
        fields=fields,
        issue_types=[t["name"] for t in data.get("issueTypes") or [] if t.get("name")],
        members=members,
    )
