"""
Workflow failure analysis endpoint.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from workflow_analyzer.api.deps import get_analyzer
from workflow_analyzer.core.logging import get_logger
from workflow_analyzer.domain.analysis import AnalysisResponse
from workflow_analyzer.services.analysis_service import WorkflowAnalyzer

logger = get_logger(__name__)

router = APIRouter()


class AnalysisRequest(BaseModel):
    """Request to explain a failed workflow action."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Left optional so an empty body reaches the analyzer's own validation
    error_message: str = Field(default="", description="What the user tried and the error shown")
    issue_id: Optional[str] = Field(default=None, description="Readable issue id, e.g. DEMO-42")
    project_id: Optional[str] = Field(default=None, description="Project short name")


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    request: AnalysisRequest,
    analyzer: WorkflowAnalyzer = Depends(get_analyzer),
) -> AnalysisResponse:
    """
    Explain why a workflow rejected an action and suggest what to do.
    """
    logger.info("Received analysis request", issue_id=request.issue_id, project_id=request.project_id)
    return await analyzer.analyze(
        request.error_message,
        issue_id=request.issue_id,
        project_id=request.project_id,
    )
