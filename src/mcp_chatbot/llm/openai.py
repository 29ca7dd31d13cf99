"""
OpenAI LLM implementation.
"""

import uuid
from typing import Any, List, Optional

import orjson

from mcp_chatbot.models.user_conversation import (
    ConversationContext,
    LLMUsageMetrics,
    Message,
    MessageRole,
    TextMessage,
    ToolCall,
)
from mcp_chatbot.tools.base_tool import BaseTool
from mcp_chatbot.tools.schemas import MalformedResponseError

from .base import BaseLLM
from .config import LLMConfig


class OpenAILLM(BaseLLM):
    """OpenAI LLM provider (Chat Completions API)."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self._client = None

    @property
    def client(self):
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            # Use config api_key if provided, otherwise falls back to OPENAI_API_KEY env var
            if self.config.api_key:
                self._client = AsyncOpenAI(api_key=self.config.api_key)
            else:
                self._client = AsyncOpenAI()
        return self._client

    def _uses_max_completion_tokens(self) -> bool:
        """Check if model uses max_completion_tokens instead of max_tokens.

        Newer OpenAI models (GPT-4.1, o-series) require max_completion_tokens
        while legacy models (gpt-4o, gpt-4o-mini, gpt-4-turbo) still use max_tokens.
        """
        legacy_models = ("gpt-4o", "gpt-4-turbo")
        return not self.model.startswith(legacy_models)

    def _is_reasoning_model(self) -> bool:
        """Check if model is a reasoning model (o-series) that doesn't support temperature."""
        return self.model.startswith(("o1", "o3", "o4-mini"))

    def _parse_response(self, response, msg_id: str) -> Message:
        """Parse OpenAI response into a Message."""
        if not response.choices:
            raise MalformedResponseError("OpenAI response contained no choices")
        message = response.choices[0].message
        content_items = []

        if message.content:
            content_items.append(TextMessage(text=message.content))

        if message.tool_calls:
            for tc in message.tool_calls:
                try:
                    tool_input = orjson.loads(tc.function.arguments or "{}")
                except orjson.JSONDecodeError as e:
                    raise MalformedResponseError(
                        f"Invalid arguments for tool call {tc.function.name}: {e}"
                    ) from e
                content_items.append(
                    ToolCall(
                        tool_id=tc.id,
                        tool_name=tc.function.name,
                        tool_input=tool_input,
                    )
                )

        usage = getattr(response, "usage", None)
        return Message(
            role=MessageRole.ASSISTANT,
            content=content_items,
            msg_id=msg_id,
            usage=LLMUsageMetrics(
                in_t=getattr(usage, "prompt_tokens", 0) or 0,
                op_t=getattr(usage, "completion_tokens", 0) or 0,
            ),
        )

    async def complete(
        self,
        context: ConversationContext,
        tools: Optional[List[BaseTool]] = None,
        system_prompt: Optional[str] = None,
        **kwargs: Any,
    ) -> Message:
        """Single completion using the OpenAI Chat Completions API."""
        messages = context.to_openai_messages()
        if system_prompt:
            messages = [{"role": "system", "content": system_prompt}] + messages

        request_kwargs = {
            "model": self.model,
            "messages": messages,
        }

        options = self._request_options(**kwargs)
        # Use appropriate token limit parameter based on model
        if self._uses_max_completion_tokens():
            request_kwargs["max_completion_tokens"] = options["max_tokens"]
        else:
            request_kwargs["max_tokens"] = options["max_tokens"]

        # Temperature not supported for o-series reasoning models
        if "temperature" in options and not self._is_reasoning_model():
            request_kwargs["temperature"] = options["temperature"]

        if tools:
            request_kwargs["tools"] = [tool.to_openai_schema() for tool in tools]

        response = await self.client.chat.completions.create(**request_kwargs)
        return self._parse_response(response, kwargs.get("out_msg_id") or str(uuid.uuid4()))
