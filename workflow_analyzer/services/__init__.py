"""Analysis services."""

from workflow_analyzer.services.analysis_service import WorkflowAnalyzer

__all__ = ["WorkflowAnalyzer"]
