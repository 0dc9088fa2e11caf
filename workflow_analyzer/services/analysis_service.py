"""
Analysis service: explains why a YouTrack workflow blocked a user action.
"""

from __future__ import annotations

import uuid
from typing import Optional

from workflow_analyzer.core.constants import MAX_DESCRIPTION_LENGTH
from workflow_analyzer.core.exceptions import (
    AnalysisError,
    NotFoundError,
    ValidationError,
)
from workflow_analyzer.core.logging import LogContext, get_logger
from workflow_analyzer.domain.analysis import AnalysisResponse
from workflow_analyzer.domain.issue import Issue
from workflow_analyzer.domain.workflow import WorkflowRule
from workflow_analyzer.llm.completion import CompletionClient
from workflow_analyzer.repositories.base import IssueRepository, WorkflowRepository
from workflow_analyzer.services.prompt_builder import build_prompt
from workflow_analyzer.services.response_reconciler import reconcile_response

logger = get_logger(__name__)


def validate_description(description: str) -> None:
    if not description or not description.strip():
        raise ValidationError("description", "Description required")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            "description",
            f"Description too long (max {MAX_DESCRIPTION_LENGTH} characters)",
        )


class WorkflowAnalyzer:
    """
    Orchestrates one analysis: issue context, project rules, completion, reconciliation.

    Missing context degrades the prompt rather than failing the request. The only
    failures surfaced to callers are invalid input, an unknown issue, and
    anything unexpected (wrapped in ``AnalysisError``).
    """

    def __init__(
        self,
        issue_repository: IssueRepository,
        workflow_repository: WorkflowRepository,
        completion_client: CompletionClient,
        youtrack_base_url: str,
    ) -> None:
        """
        Initialize the analyzer.

        Args:
            issue_repository: Source of issue context
            workflow_repository: Source of project workflow rules
            completion_client: Language-model completion endpoint
            youtrack_base_url: Used to build rule admin links
        """
        self.issue_repository = issue_repository
        self.workflow_repository = workflow_repository
        self.completion_client = completion_client
        self.youtrack_base_url = youtrack_base_url

    async def analyze(
        self,
        description: str,
        issue_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> AnalysisResponse:
        """
        Explain a failed action.

        Args:
            description: What the user tried and the error they saw
            issue_id: Readable id of the issue involved, e.g. ``DEMO-42``
            project_id: Project short name, used when no issue is given

        Returns:
            Explanation, blamed rules and suggested actions

        Raises:
            ValidationError: Description blank or too long
            NotFoundError: ``issue_id`` does not exist
            AnalysisError: Any other failure
        """
        validate_description(description)

        with LogContext(request_id=uuid.uuid4().hex[:12]):
            try:
                return await self._analyze(description, issue_id, project_id)
            except (ValidationError, NotFoundError, AnalysisError):
                raise
            except Exception as e:
                logger.error("Analysis failed", error=str(e), error_type=type(e).__name__)
                raise AnalysisError(str(e) or type(e).__name__) from e

    async def _analyze(
        self,
        description: str,
        issue_id: Optional[str],
        project_id: Optional[str],
    ) -> AnalysisResponse:
        logger.info("Analyzing workflow failure", issue_id=issue_id, project_id=project_id)

        issue = await self._load_issue(issue_id) if issue_id else None

        effective_project_id = issue.project_id if issue else project_id
        rules: list[WorkflowRule] = []
        if effective_project_id:
            rules = await self._load_rules(effective_project_id)

        prompt = build_prompt(description, issue=issue, rules=rules, issue_id=issue_id)
        logger.debug(
            "Prompt built",
            enriched=issue is not None and bool(rules),
            rule_count=len(rules),
        )

        raw_response = await self.completion_client.complete(prompt)
        response = reconcile_response(raw_response, rules, self.youtrack_base_url)

        logger.info(
            "Analysis complete",
            matched_rules=len(response.workflow_rules),
            suggested_actions=len(response.suggested_actions),
        )
        return response

    async def _load_issue(self, issue_id: str) -> Optional[Issue]:
        try:
            return await self.issue_repository.get_issue(issue_id)
        except NotFoundError:
            logger.info("Issue not found", issue_id=issue_id)
            raise NotFoundError("Issue", issue_id)
        except Exception as e:
            logger.warning("Could not fetch issue, continuing without it", issue_id=issue_id, error=str(e))
            return None

    async def _load_rules(self, project_id: str) -> list[WorkflowRule]:
        try:
            return await self.workflow_repository.get_project_rules(project_id)
        except Exception as e:
            logger.warning("Could not fetch workflow rules, continuing without them", project_id=project_id, error=str(e))
            return []
