"""
API v1 routers.
"""

from workflow_analyzer.api.v1 import analysis, cache, health

__all__ = ["analysis", "cache", "health"]
