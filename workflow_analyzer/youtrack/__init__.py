"""
YouTrack REST client, response classification and mappers.
"""

from workflow_analyzer.youtrack.api_service import YouTrackApiService
from workflow_analyzer.youtrack.client import YouTrackClient

__all__ = ["YouTrackApiService", "YouTrackClient"]
