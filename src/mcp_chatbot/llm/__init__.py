"""LLM module for mcp-chatbot."""

from .base import BaseLLM
from .config import LLMConfig
from .factory import get_llm
from .schemas import LLMResponse, VerboseResponseItem

__all__ = [
    "BaseLLM",
    "LLMConfig",
    "LLMResponse",
    "VerboseResponseItem",
    "get_llm",
]
