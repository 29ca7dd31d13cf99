"""
Prompt execution for mcp-chatbot.

Renders a named, parameterized prompt on the provider that published it
and returns the text to feed into the conversation engine as a query.
"""

import logging
from typing import Any, Dict, List, Optional

from mcp_chatbot.tools.registry import CapabilityRegistry
from mcp_chatbot.tools.schemas import PromptSpec

from .base import RenderedPrompt

logger = logging.getLogger(__name__)


class PromptExecutor:
    """Renders registered prompts through their owning provider."""

    def __init__(self, registry: CapabilityRegistry):
        self._registry = registry

    def list_prompts(self) -> List[PromptSpec]:
        """Prompts known to the registry, one per name."""
        return self._registry.prompts

    async def execute(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """
        Render a prompt and return its text.

        Args:
            name: Prompt name
            arguments: Prompt arguments; values are sent as strings

        Returns:
            str: Text of the first rendered message

        Raises:
            MCPNotFoundError: If no provider registered the prompt
            MCPInvocationError: If the provider fails to render it
            MalformedResponseError: If the provider returns no text message
        """
        return (await self.render(name, arguments)).text

    async def render(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> RenderedPrompt:
        connection = self._registry.get_prompt_owner(name)
        # MCP prompt arguments are string-valued
        str_arguments = {key: str(value) for key, value in (arguments or {}).items()}

        logger.info(f"Rendering prompt {name} on {connection.server_id} with args {str_arguments}")
        text = await connection.get_prompt(name, str_arguments)
        return RenderedPrompt(
            name=name,
            server_id=connection.server_id,
            arguments=str_arguments,
            text=text,
        )
