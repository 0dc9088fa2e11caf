"""
YouTrack workflow analyzer: explains why a workflow action failed.
"""

__version__ = "1.0.0"
