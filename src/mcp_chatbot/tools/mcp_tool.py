"""
MCP (Model Context Protocol) tool wrapper for mcp-chatbot.

Wraps tools discovered from MCP servers behind the BaseTool interface,
so every model backend can export their schemas.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from .base_tool import BaseTool

if TYPE_CHECKING:
    from .mcp_connection import MCPConnection


class MCPTool(BaseTool):
    """
    Wrapper for a tool discovered from an MCP server.
    Execution is delegated to the connection that published it.
    """

    def __init__(
        self,
        connection: "MCPConnection",
        tool_name: str,
        tool_description: str,
        input_schema: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize an MCP tool wrapper.

        Args:
            connection: MCPConnection owning this tool
            tool_name: Name of the tool from MCP server
            tool_description: Description of the tool from MCP server
            input_schema: JSON schema for tool inputs from MCP server.
                         If None, defaults to an empty object schema.
        """
        self._connection = connection
        self.name = tool_name
        self.description = tool_description
        self._input_schema = input_schema or {
            "type": "object",
            "properties": {},
            "required": [],
        }

    @property
    def input_schema(self) -> Dict[str, Any]:
        """
        Get the input schema from the MCP tool definition.

        Returns:
            Dict with type, properties, and required fields
        """
        return self._input_schema

    @property
    def connection(self) -> "MCPConnection":
        return self._connection

    @property
    def server_id(self) -> str:
        return self._connection.server_id

    async def run(self, **kwargs) -> str:
        """
        Execute the MCP tool on its owning server.

        Args:
            **kwargs: Tool arguments to pass to the MCP server

        Returns:
            str: Text of the first content block returned by the server

        Raises:
            MCPInvocationError: If the server reports a failure
            MalformedResponseError: If the server returns no text content
        """
        return await self._connection.call_tool(self.name, kwargs)

    def __repr__(self) -> str:
        return f"MCPTool(name={self.name!r}, server_id={self.server_id!r})"
