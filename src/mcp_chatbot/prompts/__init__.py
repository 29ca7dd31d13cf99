"""Prompt execution for mcp-chatbot."""

from .base import RenderedPrompt
from .executor import PromptExecutor

__all__ = [
    "PromptExecutor",
    "RenderedPrompt",
]
