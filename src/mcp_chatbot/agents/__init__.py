"""Conversation engine for mcp-chatbot."""

from .engine import ConversationEngine
from .schemas import EngineState, QueryResult

__all__ = [
    "ConversationEngine",
    "EngineState",
    "QueryResult",
]
