"""
Anthropic LLM implementation.
"""

import uuid
from typing import Any, List, Optional

from mcp_chatbot.models.user_conversation import (
    ConversationContext,
    LLMUsageMetrics,
    Message,
    MessageRole,
    TextMessage,
    ToolCall,
)
from mcp_chatbot.tools.base_tool import BaseTool

from .base import BaseLLM
from .config import LLMConfig


class AnthropicLLM(BaseLLM):
    """Anthropic LLM provider (Messages API)."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self._client = None

    @property
    def client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            import anthropic

            # Use config api_key if provided, otherwise falls back to ANTHROPIC_API_KEY env var
            self._client = anthropic.AsyncAnthropic(api_key=self.config.api_key)
        return self._client

    def _parse_response(self, response, msg_id: str) -> Message:
        """Parse Anthropic response into a Message."""
        content_items = []
        for block in response.content:
            if block.type == "text":
                content_items.append(TextMessage(text=block.text))
            elif block.type == "tool_use":
                content_items.append(
                    ToolCall(
                        tool_id=block.id,
                        tool_name=block.name,
                        tool_input=block.input or {},
                    )
                )

        usage = getattr(response, "usage", None)
        return Message(
            role=MessageRole.ASSISTANT,
            content=content_items,
            msg_id=msg_id,
            usage=LLMUsageMetrics(
                in_t=getattr(usage, "input_tokens", 0) or 0,
                op_t=getattr(usage, "output_tokens", 0) or 0,
            ),
        )

    async def complete(
        self,
        context: ConversationContext,
        tools: Optional[List[BaseTool]] = None,
        system_prompt: Optional[str] = None,
        **kwargs: Any,
    ) -> Message:
        """Single completion using the Anthropic Messages API."""
        request_kwargs = {
            "model": self.model,
            "messages": context.to_anthropic_messages(),
            **self._request_options(**kwargs),
        }
        if system_prompt:
            request_kwargs["system"] = system_prompt
        if tools:
            request_kwargs["tools"] = [tool.to_anthropic_schema() for tool in tools]

        response = await self.client.messages.create(**request_kwargs)
        return self._parse_response(response, kwargs.get("out_msg_id") or str(uuid.uuid4()))
