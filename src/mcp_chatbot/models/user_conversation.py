import json
import uuid
from enum import Enum
from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field, model_validator

# --------- ENUMS ---------


class MessageRole(str, Enum):
    """Role of message sender."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageType(str, Enum):
    """Type of message content."""

    TEXT = "text"
    TOOL_CALL = "tool_invocation"
    TOOL_RESULT = "tool_result"


# --------- CONTENT TYPES ---------


class TextMessage(BaseModel):
    """Text content block."""

    type: MessageType = MessageType.TEXT
    text: str


class ToolCall(BaseModel):
    """Tool invocation content block. tool_id is the correlation id."""

    type: MessageType = MessageType.TOOL_CALL
    tool_id: str
    tool_name: str
    tool_input: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Tool result content block, correlated to a ToolCall by tool_id."""

    type: MessageType = MessageType.TOOL_RESULT
    tool_id: str
    result: Any
    is_error: bool = False


# Type alias for content items
ContentItem = Union[TextMessage, ToolCall, ToolResult]


class LLMUsageMetrics(BaseModel):
    """Usage metrics from LLM response."""

    in_t: int = 0
    op_t: int = 0


# --------- MESSAGE MODEL ---------


class Message(BaseModel):
    """
    A single turn in a conversation.

    The content field is an ordered list that can contain:
    - TextMessage: Text content
    - ToolCall: Tool invocation request (assistant turns)
    - ToolResult: Result from a tool execution (user turns)
    """

    role: MessageRole
    content: List[ContentItem]
    usage: LLMUsageMetrics = Field(default_factory=LLMUsageMetrics)
    msg_id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    @model_validator(mode="after")
    def validate_role_content(self) -> "Message":
        """Validate that content types match the message role."""
        has_tool_call = any(isinstance(c, ToolCall) for c in self.content)
        has_tool_result = any(isinstance(c, ToolResult) for c in self.content)

        if self.role == MessageRole.USER:
            if has_tool_call:
                raise ValueError("USER messages cannot contain ToolCall")

        elif self.role == MessageRole.ASSISTANT:
            if has_tool_result:
                raise ValueError("ASSISTANT messages cannot contain ToolResult")

        return self

    @property
    def text(self) -> str:
        """Concatenated text blocks."""
        return "\n".join(c.text for c in self.content if isinstance(c, TextMessage))

    @property
    def tool_calls(self) -> List[ToolCall]:
        return [c for c in self.content if isinstance(c, ToolCall)]

    @property
    def tool_results(self) -> List[ToolResult]:
        return [c for c in self.content if isinstance(c, ToolResult)]

    def to_anthropic_message(self) -> Dict[str, Any]:
        """Convert to Anthropic message format."""
        blocks = []
        for item in self.content:
            if isinstance(item, TextMessage):
                blocks.append({"type": "text", "text": item.text})
            elif isinstance(item, ToolCall):
                blocks.append(
                    {
                        "type": "tool_use",
                        "id": item.tool_id,
                        "name": item.tool_name,
                        "input": item.tool_input,
                    }
                )
            elif isinstance(item, ToolResult):
                block = {
                    "type": "tool_result",
                    "tool_use_id": item.tool_id,
                    "content": str(item.result),
                }
                if item.is_error:
                    block["is_error"] = True
                blocks.append(block)
        return {"role": self.role.value, "content": blocks}

    def to_openai_messages(self) -> List[Dict[str, Any]]:
        """
        Convert to OpenAI message format.

        Returns a list because OpenAI requires separate messages for tool results.
        """
        messages = []

        # Separate content types
        text_parts = [c for c in self.content if isinstance(c, TextMessage)]
        tool_calls = self.tool_calls
        tool_results = self.tool_results

        # Assistant message with text and/or tool_calls
        if self.role == MessageRole.ASSISTANT:
            msg: Dict[str, Any] = {"role": "assistant"}
            if text_parts:
                msg["content"] = " ".join(t.text for t in text_parts)
            else:
                msg["content"] = None
            if tool_calls:
                msg["tool_calls"] = [
                    {
                        "id": tc.tool_id,
                        "type": "function",
                        "function": {
                            "name": tc.tool_name,
                            "arguments": json.dumps(tc.tool_input),
                        },
                    }
                    for tc in tool_calls
                ]
            messages.append(msg)

        # Tool results become separate messages (OpenAI requires this)
        for tr in tool_results:
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": tr.tool_id,
                    "content": str(tr.result),
                }
            )

        # User text message
        if self.role == MessageRole.USER and text_parts:
            messages.append(
                {
                    "role": "user",
                    "content": " ".join(t.text for t in text_parts),
                }
            )

        return messages


# --------- CONVERSATION CONTEXT ---------


class ConversationContext(BaseModel):
    """
    Ordered conversation history for one query (or several, when retained).

    Every ToolCall is answered by exactly one ToolResult with the same
    tool_id before the next completion is requested.
    """

    messages: List[Message] = Field(default_factory=list)

    # --------- HELPER METHODS ---------

    def add_message(self, message: Message) -> None:
        """Add a message to the conversation."""
        self.messages.append(message)

    def add_user_text(self, text: str) -> Message:
        message = Message(role=MessageRole.USER, content=[TextMessage(text=text)])
        self.add_message(message)
        return message

    def unanswered_tool_calls(self) -> List[ToolCall]:
        """ToolCalls that have no matching ToolResult yet."""
        answered = {
            tr.tool_id for msg in self.messages for tr in msg.tool_results
        }
        return [
            tc
            for msg in self.messages
            for tc in msg.tool_calls
            if tc.tool_id not in answered
        ]

    # --------- PROVIDER-SPECIFIC CONVERTERS ---------

    def to_anthropic_messages(self) -> List[Dict[str, Any]]:
        """
        Convert to Anthropic message format.

        Handles text, tool_use, and tool_result blocks.
        """
        result = []
        for msg in self.messages:
            msg_dict = msg.to_anthropic_message()
            if msg_dict and msg_dict.get("content"):
                result.append(msg_dict)
        return result

    def to_openai_messages(self) -> List[Dict[str, Any]]:
        """
        Convert to OpenAI message format.

        Note: Each Message may produce multiple OpenAI messages (for tool results).
        """
        result = []
        for msg in self.messages:
            result.extend(msg.to_openai_messages())
        return result
