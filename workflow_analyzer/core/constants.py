"""
System-wide constants for the workflow analyzer.
"""

from datetime import timedelta
from enum import Enum


# =============================================================================
# Enums
# =============================================================================


class RuleType(str, Enum):
    """Kinds of YouTrack workflow rules."""

    STATE_MACHINE = "state-machine"
    ON_CHANGE = "on-change"
    ON_SCHEDULE = "on-schedule"
    ACTION = "action"
    CUSTOM_SCRIPT = "custom-script"


# =============================================================================
# API Constants
# =============================================================================

API_VERSION = "v1"
API_PREFIX = f"/api/{API_VERSION}"

# =============================================================================
# Analysis Constants
# =============================================================================

MAX_DESCRIPTION_LENGTH = 1000

# Rules beyond this index are left out of the enriched prompt
MAX_PROMPT_RULES = 15

FALLBACK_SUGGESTED_ACTION = "Check the workflow rules for your project"

# =============================================================================
# YouTrack REST Constants
# =============================================================================

YOUTRACK_API_PREFIX = "/api"
YOUTRACK_ADMIN_API_PREFIX = "/api/admin"

ISSUE_FIELDS = (
    "$type,id,idReadable,summary,description,created,updated,resolved,"
    "reporter(id,login,fullName),project(id,name,shortName),"
    "fields(name,value(name,id,login,presentation)),tags(id,name)"
)
RULE_FIELDS = "id,name,ruleType,guard,title,body,script,requirements,isEnabled"
WORKFLOW_FIELDS = (
    f"$type,id,name,description,isEnabled,isAutoAttached,rules({RULE_FIELDS}),"
    "projects(id,name,shortName)"
)
ACTIVITY_FIELDS = (
    "$type,id,timestamp,target(id,idReadable),author(id,login),"
    "field(presentation,customField(name)),added(id,name,presentation,text),"
    "removed(id,name,presentation,text),category,targetMember"
)
PROJECT_FIELDS = (
    "$type,id,name,shortName,description,created,archived,leader(id,login,fullName),"
    "workflows(id,name),fields(id,field(id,name,fieldType(id)),canBeEmpty),"
    "issueTypes(id,name),team(members(user(id,login,fullName),roles(id,name)))"
)

DEFAULT_RATE_LIMIT_RETRY_AFTER = 60  # seconds

# =============================================================================
# Cache TTLs
# =============================================================================

# Issues change often, workflow definitions rarely
ISSUE_TTL = timedelta(minutes=5)
ISSUE_SEARCH_TTL = timedelta(minutes=1)
ISSUE_ACTIVITIES_TTL = timedelta(minutes=2)
PROJECT_TTL = timedelta(minutes=30)
WORKFLOW_TTL = timedelta(hours=1)
WORKFLOW_RULES_TTL = timedelta(hours=1)

# =============================================================================
# Cache Keys
# =============================================================================

ISSUE_CACHE_KEY = "issue:{issue_id}"
ISSUE_SEARCH_CACHE_KEY = "issues:search:{query_hash}:{limit}:{offset}"
PROJECT_WORKFLOWS_CACHE_KEY = "workflow:project:{project_id}"
WORKFLOW_CACHE_KEY = "workflow:single:{workflow_id}"
WORKFLOW_RULES_CACHE_KEY = "workflow:rules:{workflow_id}"
PROJECT_RULES_CACHE_KEY = "workflow:rules:project:{project_id}"
PROJECT_RULES_BY_TYPE_CACHE_KEY = "workflow:rules:project:{project_id}:type:{rule_type}"
ISSUE_ACTIVITIES_CACHE_KEY = "activities:{issue_id}:{categories}:{limit}:{cursor}"
PROJECT_CACHE_KEY = "project:{project_id}"
PROJECT_ISSUES_CACHE_KEY = "project:{project_id}:issues:{query_hash}:{limit}:{offset}"
PROJECTS_CACHE_KEY = "projects:{archived}:{limit}:{offset}"
