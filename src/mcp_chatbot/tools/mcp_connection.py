"""
MCP provider connection for mcp-chatbot.

Owns the lifecycle of one capability provider: transport setup, the
initialize handshake, capability discovery, invocation and teardown.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from mcp import ClientSession
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl

from .mcp_tool import MCPTool
from .schemas import (
    MalformedResponseError,
    MCPConfigError,
    MCPConnectionError,
    MCPInvocationError,
    MCPServerConfig,
    MCPTransport,
    PromptArgumentSpec,
    PromptSpec,
    ResourceSpec,
    ResourceTemplateSpec,
)

logger = logging.getLogger(__name__)


class MCPConnection:
    """
    Long-lived connection to a single MCP server.

    Resources, resource templates and prompts are optional capabilities:
    a server that does not implement them contributes empty lists.
    """

    def __init__(self, server_id: str, config: MCPServerConfig):
        """
        Initialize with a provider id and its launch spec.

        Args:
            server_id: Identifier of the provider in the configuration
            config: MCPServerConfig with connection settings
        """
        config.validate()
        self.server_id = server_id
        self.config = config
        self.session: Optional[ClientSession] = None
        self.server_capabilities: Any = None
        self._transport_context = None
        self._http_client = None

        self.tools: List[MCPTool] = []
        self.resources: List[ResourceSpec] = []
        self.resource_templates: List[ResourceTemplateSpec] = []
        self.prompts: List[PromptSpec] = []

    async def connect(self) -> None:
        """
        Open the transport and complete the initialize handshake.

        Raises:
            MCPConnectionError: If the handshake does not complete
        """
        try:
            transport_type = self.config.transport
            if transport_type == MCPTransport.SSE:
                self._transport_context = self._connect_sse()
            elif transport_type == MCPTransport.STDIO:
                self._transport_context = self._connect_stdio()
            elif transport_type == MCPTransport.STREAMABLE_HTTP:
                self._transport_context = self._connect_streamable_http()
            else:
                raise MCPConfigError(f"Unknown transport type: {transport_type}")

            # Streamable HTTP returns (read, write, get_session_id), SSE/stdio return (read, write)
            transport_result = await self._transport_context.__aenter__()
            if transport_type == MCPTransport.STREAMABLE_HTTP:
                read_stream, write_stream, _get_session_id = transport_result
            else:
                read_stream, write_stream = transport_result

            session = ClientSession(read_stream, write_stream)
            await session.__aenter__()
            self.session = session
            init_result = await session.initialize()
            self.server_capabilities = getattr(init_result, "capabilities", None)

        except Exception as e:
            for cleanup_error in await self._release():
                logger.debug(f"Cleanup error for {self.server_id}: {cleanup_error}")
            raise MCPConnectionError(
                f"Failed to connect to '{self.server_id}': {e}"
            ) from e

        logger.info(f"Connected to: {self.server_id}")

    async def discover(self) -> None:
        """
        Discover everything the server offers.

        Raises:
            MCPConnectionError: If the required tool listing fails
        """
        try:
            self.tools = await self.list_tools()
        except Exception as e:
            raise MCPConnectionError(
                f"Failed to list tools of '{self.server_id}': {e}"
            ) from e

        self.resources = await self.list_resources()
        self.resource_templates = await self.list_resource_templates()
        self.prompts = await self.list_prompts()

        logger.info(
            f"Discovered {len(self.tools)} tools, {len(self.resources)} resources, "
            f"{len(self.resource_templates)} resource templates and "
            f"{len(self.prompts)} prompts from {self.server_id}"
        )

    async def list_tools(self) -> List[MCPTool]:
        tools_response = await self._require_session().list_tools()
        return [
            MCPTool(
                connection=self,
                tool_name=tool.name,
                tool_description=tool.description or "",
                input_schema=tool.inputSchema if hasattr(tool, "inputSchema") else None,
            )
            for tool in tools_response.tools
        ]

    async def list_resources(self) -> List[ResourceSpec]:
        if not self._advertises("resources"):
            return []
        try:
            response = await self._require_session().list_resources()
        except McpError as e:
            logger.info(f"No resources available for {self.server_id}: {e}")
            return []
        return [
            ResourceSpec(
                uri=str(resource.uri),
                name=resource.name or "",
                description=resource.description or "",
                mime_type=resource.mimeType,
            )
            for resource in response.resources
        ]

    async def list_resource_templates(self) -> List[ResourceTemplateSpec]:
        if not self._advertises("resources"):
            return []
        try:
            response = await self._require_session().list_resource_templates()
        except McpError as e:
            logger.debug(f"No resource templates available for {self.server_id}: {e}")
            return []
        return [
            ResourceTemplateSpec(
                uri_template=template.uriTemplate,
                name=template.name or "",
                description=template.description or "",
                mime_type=template.mimeType,
            )
            for template in response.resourceTemplates
        ]

    async def list_prompts(self) -> List[PromptSpec]:
        if not self._advertises("prompts"):
            return []
        try:
            response = await self._require_session().list_prompts()
        except McpError as e:
            logger.info(f"No prompts available for {self.server_id}: {e}")
            return []
        return [
            PromptSpec(
                name=prompt.name,
                description=prompt.description or "",
                arguments=[
                    PromptArgumentSpec(
                        name=arg.name,
                        description=arg.description or "",
                        required=bool(arg.required),
                    )
                    for arg in (prompt.arguments or [])
                ],
            )
            for prompt in response.prompts
        ]

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """
        Execute a tool and return the text of its first content block.

        Raises:
            MCPInvocationError: If the server fails or flags the result as an error
            MalformedResponseError: If the result carries no text content
        """
        try:
            result = await self._require_session().call_tool(
                tool_name, arguments=arguments
            )
        except Exception as e:
            raise MCPInvocationError(
                f"Tool '{tool_name}' failed on '{self.server_id}': {e}"
            ) from e

        content = getattr(result, "content", None)
        if getattr(result, "isError", False):
            raise MCPInvocationError(
                f"Tool '{tool_name}' failed on '{self.server_id}': "
                f"{_first_text(content) or 'no details'}"
            )
        if not content:
            raise MalformedResponseError(
                f"Tool '{tool_name}' on '{self.server_id}' returned no content"
            )
        text = _first_text(content)
        if text is None:
            raise MalformedResponseError(
                f"Tool '{tool_name}' on '{self.server_id}' returned non-text content"
            )

        logger.debug(f"Successfully executed tool: {tool_name}")
        return text

    async def read_resource(self, uri: str) -> str:
        """
        Read a resource; exactly one text content entry is expected.

        Raises:
            MCPInvocationError: If the server fails to read the resource
            MalformedResponseError: If the response does not hold exactly one text entry
        """
        try:
            result = await self._require_session().read_resource(AnyUrl(uri))
        except Exception as e:
            raise MCPInvocationError(
                f"Failed to read resource '{uri}' from '{self.server_id}': {e}"
            ) from e

        contents = getattr(result, "contents", None) or []
        if len(contents) != 1:
            raise MalformedResponseError(
                f"Resource '{uri}' on '{self.server_id}' returned "
                f"{len(contents)} content entries, expected 1"
            )
        text = getattr(contents[0], "text", None)
        if text is None:
            raise MalformedResponseError(
                f"Resource '{uri}' on '{self.server_id}' has no text content"
            )
        return text

    async def get_prompt(self, prompt_name: str, arguments: Dict[str, str]) -> str:
        """
        Render a prompt and return the text of its first message.

        Raises:
            MCPInvocationError: If the server fails to render the prompt
            MalformedResponseError: If no text message comes back
        """
        try:
            result = await self._require_session().get_prompt(
                prompt_name, arguments=arguments
            )
        except Exception as e:
            raise MCPInvocationError(
                f"Prompt '{prompt_name}' failed on '{self.server_id}': {e}"
            ) from e

        messages = getattr(result, "messages", None)
        if not messages:
            raise MalformedResponseError(
                f"Prompt '{prompt_name}' on '{self.server_id}' returned no messages"
            )
        text = getattr(messages[0].content, "text", None)
        if text is None:
            raise MalformedResponseError(
                f"Prompt '{prompt_name}' on '{self.server_id}' returned non-text content"
            )
        return text

    async def close(self) -> None:
        """
        Close session, transport and HTTP client.

        All are always attempted; the first error is re-raised afterwards.
        """
        errors = await self._release()
        logger.debug(f"Closed connection: {self.server_id}")
        if errors:
            raise errors[0]

    async def _release(self) -> List[Exception]:
        errors: List[Exception] = []
        session, self.session = self.session, None
        transport_context, self._transport_context = self._transport_context, None
        http_client, self._http_client = self._http_client, None

        if session is not None:
            try:
                await session.__aexit__(None, None, None)
            except Exception as e:
                errors.append(e)

        if transport_context is not None:
            try:
                await transport_context.__aexit__(None, None, None)
            except Exception as e:
                errors.append(e)

        if http_client is not None:
            try:
                await http_client.aclose()
            except Exception as e:
                errors.append(e)

        return errors

    def _require_session(self) -> ClientSession:
        if self.session is None:
            raise MCPConnectionError(f"Not connected to '{self.server_id}'")
        return self.session

    def _advertises(self, capability: str) -> bool:
        # Without an initialize result we cannot tell, so probe anyway
        if self.server_capabilities is None:
            return True
        return getattr(self.server_capabilities, capability, None) is not None

    def _connect_sse(self):
        """Establish SSE connection and return context manager."""
        from mcp.client.sse import sse_client

        return sse_client(
            url=str(self.config.url),
            headers=self.config.headers,
            timeout=self.config.timeout,
            sse_read_timeout=self.config.sse_read_timeout,
        )

    def _connect_stdio(self):
        """Establish stdio connection and return context manager."""
        from mcp.client.stdio import StdioServerParameters, stdio_client

        env = self.config.env
        if self.config.inherit_env:
            env = {**os.environ, **(self.config.env or {})}

        server_params = StdioServerParameters(
            command=self.config.command,
            args=self.config.args or [],
            env=env,
        )
        return stdio_client(server_params)

    def _connect_streamable_http(self):
        """Establish Streamable HTTP connection and return context manager."""
        import httpx
        from mcp.client.streamable_http import streamable_http_client

        self._http_client = httpx.AsyncClient(
            headers=self.config.headers or {},
            timeout=httpx.Timeout(
                self.config.timeout, read=self.config.sse_read_timeout
            ),
        )
        return streamable_http_client(
            url=str(self.config.url), http_client=self._http_client
        )

    def __repr__(self) -> str:
        return f"MCPConnection(server_id={self.server_id!r}, transport={self.config.transport.value!r})"


def _first_text(content: Any) -> Optional[str]:
    """Text of the first content block, tolerating dict-shaped blocks."""
    if not content:
        return None
    block = content[0]
    if hasattr(block, "text"):
        return block.text
    if isinstance(block, dict) and "text" in block:
        return block["text"]
    return None
