"""Data models for mcp-chatbot."""

from .user_conversation import (
    ContentItem,
    ConversationContext,
    Message,
    MessageRole,
    TextMessage,
    ToolCall,
    ToolResult,
)

__all__ = [
    # Conversation
    "ContentItem",
    "ConversationContext",
    "Message",
    "MessageRole",
    "TextMessage",
    "ToolResult",
    "ToolCall",
]
