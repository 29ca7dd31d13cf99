"""
Base LLM interface for mcp-chatbot.

A backend turns the current conversation plus the current tool set into
one assistant message. The turn loop around it lives in the engine.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from mcp_chatbot.models.user_conversation import ConversationContext, Message
from mcp_chatbot.tools.base_tool import BaseTool

from .config import LLMConfig


class BaseLLM(ABC):
    """Abstract base class for model backends."""

    def __init__(self, config: LLMConfig):
        self.config = config
        self.model = config.model
        self.temperature = config.temperature
        self.max_tokens = config.max_tokens

    @abstractmethod
    async def complete(
        self,
        context: ConversationContext,
        tools: Optional[List[BaseTool]] = None,
        system_prompt: Optional[str] = None,
        **kwargs: Any,
    ) -> Message:
        """
        Request a single completion.

        Args:
            context: Full conversation history to send.
            tools: Tool set to expose for this completion only.
            system_prompt: Optional system prompt for LLM behavior.
            **kwargs: Per-call overrides (max_tokens, temperature).

        Returns:
            Assistant Message whose content holds TextMessage and ToolCall
            blocks in the order the model returned them.
        """
        pass

    def _request_options(self, **kwargs: Any) -> dict:
        """Token limit and temperature, with per-call overrides."""
        options = {"max_tokens": kwargs.get("max_tokens", self.max_tokens)}
        temperature = kwargs.get("temperature", self.temperature)
        if temperature is not None:
            options["temperature"] = temperature
        return options
