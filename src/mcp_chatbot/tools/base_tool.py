"""
Base tool interface for mcp-chatbot.

Provides a backend-agnostic tool definition with schema exporters for
each supported model backend.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseTool(ABC):
    """
    Abstract base class for tools the model may invoke.

    Concrete tools describe themselves (name, description, input schema)
    and know how to run; model backends only see the exported schema.
    """

    name: str = ""
    description: str = ""

    @property
    @abstractmethod
    def input_schema(self) -> Dict[str, Any]:
        """
        Get the input schema for this tool.

        Returns:
            Dict with type, properties, and required fields
        """
        pass

    @abstractmethod
    async def run(self, **kwargs) -> Any:
        """
        Execute the tool's core logic asynchronously.

        Args:
            **kwargs: Tool-specific arguments

        Returns:
            str: Tool output
        """
        pass

    def to_anthropic_schema(self) -> Dict[str, Any]:
        """
        Get tool schema for Anthropic direct API.

        Returns:
            Dict with name, description, and input_schema
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    def to_openai_schema(self) -> Dict[str, Any]:
        """
        Get tool schema for OpenAI.

        Returns:
            Dict with type: function wrapper and parameters
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }
