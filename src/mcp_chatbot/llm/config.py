"""
LLM configuration for mcp-chatbot.

Pydantic models for model backend configuration.
"""

import os
from typing import Literal, Optional, Set

from pydantic import BaseModel, model_validator

DEFAULT_MODELS = {
    "anthropic": "claude-3-7-sonnet-20250219",
    "openai": "gpt-4o",
}


class LLMConfig(BaseModel):
    """Model backend configuration. Defaults to Anthropic Claude 3.7 Sonnet."""

    provider: Literal["anthropic", "openai"] = os.getenv(
        "MCP_CHATBOT_LLM_PROVIDER", "anthropic"
    )
    # None picks the provider's default model
    model: Optional[str] = os.getenv("MCP_CHATBOT_LLM_MODEL") or None
    temperature: Optional[float] = (
        float(os.environ["MCP_CHATBOT_LLM_TEMPERATURE"])
        if os.getenv("MCP_CHATBOT_LLM_TEMPERATURE")
        else None
    )
    max_tokens: int = int(os.getenv("MCP_CHATBOT_LLM_MAX_TOKENS", 2024))
    system_prompt: Optional[str] = os.getenv("MCP_CHATBOT_SYSTEM_PROMPT") or None

    # Optional user-provided API key (falls back to the SDK's env var if None)
    api_key: Optional[str] = None

    def get_provider_supported_model_ids(self) -> Set[str]:
        """Get the supported model IDs for the LLM."""
        if self.provider == "openai":
            return set(
                [
                    "gpt-4.1-2025-04-14",
                    "gpt-4.1-mini-2025-04-14",
                    "gpt-4.1-nano-2025-04-14",
                    "gpt-4o",
                    "gpt-4o-mini",
                    "gpt-4-turbo",
                    "o3-mini",
                    "o4-mini",
                    "o3",
                ]
            )
        elif self.provider == "anthropic":
            return set(
                [
                    "claude-3-7-sonnet-20250219",
                    "claude-3-5-haiku-20241022",
                    "claude-opus-4-20250514",
                    "claude-sonnet-4-20250514",
                    "claude-sonnet-4-5-20250929",
                    "claude-haiku-4-5-20251001",
                    "claude-opus-4-5-20251101",
                    "claude-3-haiku-20240307",
                ]
            )
        else:
            raise ValueError(f"Unsupported provider: {self.provider}")

    @model_validator(mode="after")
    def validate_model(self):
        """Fill in the default model and validate it."""
        if self.model is None:
            self.model = DEFAULT_MODELS[self.provider]
        supported_model_ids = self.get_provider_supported_model_ids()
        if self.model not in supported_model_ids:
            raise ValueError(
                f"Unsupported model: {self.model} for provider: {self.provider}. Supported: {supported_model_ids}"
            )
        return self
