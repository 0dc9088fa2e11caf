"""
Language-model completion clients.
"""

from workflow_analyzer.llm.completion import CompletionClient, OpenAIChatCompletionClient

__all__ = ["CompletionClient", "OpenAIChatCompletionClient"]
