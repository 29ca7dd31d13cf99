"""
Capability registry for mcp-chatbot.

Aggregates tools, resources, resource templates and prompts from every
connected provider into name- (or URI-) keyed maps to the owning connection.
When two providers publish the same key, the later-registered one wins.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from .mcp_connection import MCPConnection
from .mcp_tool import MCPTool
from .schemas import (
    MCPConfigError,
    MCPConnectionError,
    MCPNotFoundError,
    MCPServerConfig,
    PromptSpec,
    ResourceSpec,
    ResourceTemplateSpec,
)

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[str, MCPServerConfig], MCPConnection]


class CapabilityRegistry:
    """
    Routing table from capability names to provider connections.

    Written only during startup discovery, read during routing.

    Example:
        async with CapabilityRegistry() as registry:
            await registry.connect_all(servers_config.servers)
            text = await registry.invoke_tool("search_papers", {"topic": "llm"})
    """

    def __init__(self, connection_factory: Optional[ConnectionFactory] = None):
        """
        Args:
            connection_factory: Builds a connection from (server_id, config).
                                Defaults to MCPConnection.
        """
        self._connection_factory = connection_factory or MCPConnection
        self._connections: Dict[str, MCPConnection] = {}

        self._tools: Dict[str, MCPTool] = {}
        self._tool_owners: Dict[str, MCPConnection] = {}
        self._resources: Dict[str, ResourceSpec] = {}
        self._resource_owners: Dict[str, MCPConnection] = {}
        self._resource_templates: Dict[str, ResourceTemplateSpec] = {}
        self._template_owners: Dict[str, MCPConnection] = {}
        self._prompts: Dict[str, PromptSpec] = {}
        self._prompt_owners: Dict[str, MCPConnection] = {}

    # --------- LIFECYCLE ---------

    async def connect(self, server_id: str, config: MCPServerConfig) -> MCPConnection:
        """
        Connect to a provider, discover its capabilities and register them.

        Raises:
            MCPConfigError: If a provider with this id is already connected
            MCPConnectionError: If connecting or discovery fails
        """
        if server_id in self._connections:
            raise MCPConfigError(f"Provider '{server_id}' is already connected")

        connection = self._connection_factory(server_id, config)
        await connection.connect()
        try:
            await connection.discover()
        except Exception as e:
            try:
                await connection.close()
            except Exception as close_error:
                logger.debug(f"Error closing half-open connection {server_id}: {close_error}")
            if isinstance(e, MCPConnectionError):
                raise
            raise MCPConnectionError(
                f"Discovery failed for '{server_id}': {e}"
            ) from e

        self.register(connection)
        return connection

    async def connect_all(self, servers: Mapping[str, MCPServerConfig]) -> List[str]:
        """
        Connect to every configured provider, in order.

        Providers that fail to connect are logged and left out; startup
        continues with the rest.

        Returns:
            Ids of the providers that connected
        """
        connected = []
        for server_id, config in servers.items():
            logger.info(f"Connecting to {server_id}...")
            try:
                await self.connect(server_id, config)
            except MCPConnectionError as e:
                logger.warning(f"Excluding provider {server_id}: {e}")
                continue
            connected.append(server_id)
        return connected

    def register(self, connection: MCPConnection) -> None:
        """
        Register every capability of an already discovered connection.

        Raises:
            MCPConfigError: If another connection holds the same server_id
        """
        previous = self._connections.get(connection.server_id)
        if previous is not None and previous is not connection:
            raise MCPConfigError(
                f"Provider '{connection.server_id}' is already registered"
            )
        self._connections[connection.server_id] = connection

        for tool in connection.tools:
            self._claim(self._tool_owners, tool.name, connection, "tool")
            self._tools[tool.name] = tool

        for resource in connection.resources:
            self._claim(self._resource_owners, resource.uri, connection, "resource")
            self._resources[resource.uri] = resource

        for template in connection.resource_templates:
            self._claim(
                self._template_owners, template.uri_template, connection, "resource template"
            )
            self._resource_templates[template.uri_template] = template

        for prompt in connection.prompts:
            self._claim(self._prompt_owners, prompt.name, connection, "prompt")
            self._prompts[prompt.name] = prompt

        if connection.tools:
            logger.info(
                f"Connected to {connection.server_id} with tools: "
                f"{[t.name for t in connection.tools]}"
            )
        if connection.resources:
            logger.info(f"Available resources: {[r.uri for r in connection.resources]}")
        if connection.prompts:
            logger.info(f"Available prompts: {[p.name for p in connection.prompts]}")

    async def close_all(self) -> None:
        """
        Close every connection.

        A failing close is logged and never stops the remaining ones.
        """
        for server_id, connection in list(self._connections.items()):
            try:
                await connection.close()
            except Exception as e:
                logger.error(f"Error closing connection {server_id}: {e}")
        logger.info("Closed all connections")

    async def __aenter__(self) -> "CapabilityRegistry":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close_all()
        return False

    # --------- ROUTING ---------

    async def invoke_tool(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """
        Route a tool invocation to its owning provider.

        Raises:
            MCPNotFoundError: If no provider registered the tool
            MCPInvocationError: If the provider fails to execute it
            MalformedResponseError: If the provider returns no text content
        """
        connection = self.get_tool_owner(tool_name)
        logger.info(f"Calling tool {tool_name} on {connection.server_id} with args {arguments}")
        return await connection.call_tool(tool_name, arguments)

    def get_tool_owner(self, tool_name: str) -> MCPConnection:
        connection = self._tool_owners.get(tool_name)
        if connection is None:
            raise MCPNotFoundError(f"No session found for tool {tool_name}")
        return connection

    def get_prompt_owner(self, prompt_name: str) -> MCPConnection:
        connection = self._prompt_owners.get(prompt_name)
        if connection is None:
            raise MCPNotFoundError(f"Prompt not found: {prompt_name}")
        return connection

    def get_resource_owner(self, uri: str) -> MCPConnection:
        connection = self._resource_owners.get(uri)
        if connection is None:
            raise MCPNotFoundError(f"Resource not found: {uri}")
        return connection

    def find_resource_owner(self, uri: str) -> Optional[MCPConnection]:
        return self._resource_owners.get(uri)

    def get_template_owner(self, uri_template: str) -> MCPConnection:
        connection = self._template_owners.get(uri_template)
        if connection is None:
            raise MCPNotFoundError(f"Resource template not found: {uri_template}")
        return connection

    # --------- VIEWS ---------

    @property
    def connections(self) -> List[MCPConnection]:
        return list(self._connections.values())

    @property
    def tools(self) -> List[MCPTool]:
        """Current tool set, one entry per name."""
        return list(self._tools.values())

    @property
    def resources(self) -> List[ResourceSpec]:
        return list(self._resources.values())

    @property
    def resource_templates(self) -> List[ResourceTemplateSpec]:
        return list(self._resource_templates.values())

    @property
    def prompts(self) -> List[PromptSpec]:
        return list(self._prompts.values())

    @property
    def resource_schemes(self) -> Set[str]:
        """URI schemes used by any registered resource or resource template."""
        schemes = {
            uri.partition("://")[0] for uri in self._resources if "://" in uri
        }
        schemes.update(
            t.scheme for t in self._resource_templates.values() if "://" in t.uri_template
        )
        return schemes

    def _claim(
        self,
        owners: Dict[str, MCPConnection],
        key: str,
        connection: MCPConnection,
        kind: str,
    ) -> None:
        previous = owners.get(key)
        if previous is not None and previous is not connection:
            logger.debug(
                f"{kind} '{key}' from {previous.server_id} is now served by "
                f"{connection.server_id}"
            )
        owners[key] = connection
