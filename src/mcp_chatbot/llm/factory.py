"""
LLM factory for mcp-chatbot.

Creates LLM instances based on configuration.
"""

from .base import BaseLLM
from .config import LLMConfig


def get_llm(config: LLMConfig) -> BaseLLM:
    """
    Get an LLM instance based on configuration.

    Args:
        config: LLM configuration. Defaults to Anthropic.

    Returns:
        BaseLLM instance

    Raises:
        ValueError: If provider is not supported
        ImportError: If provider dependencies are not installed
    """
    provider = config.provider.lower()

    if provider == "openai":
        try:
            from .openai import OpenAILLM

            return OpenAILLM(config)
        except ImportError:
            raise ImportError(
                "openai is required for OpenAI. Install with: pip install openai"
            )

    elif provider == "anthropic":
        try:
            from .anthropic import AnthropicLLM

            return AnthropicLLM(config)
        except ImportError:
            raise ImportError(
                "anthropic is required for Anthropic. Install with: pip install anthropic"
            )

    else:
        raise ValueError(
            f"Unsupported LLM provider: {provider}. "
            f"Supported providers: anthropic, openai"
        )
