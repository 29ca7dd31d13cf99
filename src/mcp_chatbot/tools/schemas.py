from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_serializer


# MCP Exception Classes
class MCPError(Exception):
    """Base exception for MCP operations."""

    pass


class MCPConfigError(MCPError):
    """Configuration errors (invalid launch spec or config file)."""

    pass


class MCPConnectionError(MCPError):
    """Provider unreachable or handshake/discovery failed."""

    pass


class MCPNotFoundError(MCPError):
    """Unknown tool name, resource identifier or prompt name."""

    pass


class MCPInvocationError(MCPError):
    """Provider-side failure while executing a tool, resource or prompt operation."""

    pass


class MalformedResponseError(MCPError):
    """A provider or model response violates the expected shape."""

    pass


class MCPTransport(str, Enum):
    """MCP transport type."""

    SSE = "sse"
    STDIO = "stdio"
    STREAMABLE_HTTP = (
        "streamable_http"  # For servers that use HTTP POST with optional SSE responses
    )


class MCPServerConfig(BaseModel):
    """
    Launch specification for one capability provider.

    stdio providers are spawned as subprocesses from command/args/env,
    SSE and streamable HTTP providers are reached at url.
    """

    transport: MCPTransport = MCPTransport.STDIO

    # SSE / streamable HTTP options
    url: Optional[HttpUrl] = None
    headers: Optional[Dict[str, str]] = None
    timeout: int = 5
    sse_read_timeout: int = 300

    # stdio options
    command: Optional[str] = None
    args: Optional[List[str]] = None
    env: Optional[Dict[str, str]] = None
    # Pass the parent environment (API keys etc.) through to the subprocess
    inherit_env: bool = True

    def validate(self) -> None:
        """Validate configuration based on transport type."""
        if self.transport == MCPTransport.SSE:
            if not self.url:
                raise MCPConfigError("SSE transport requires 'url'")
        elif self.transport == MCPTransport.STREAMABLE_HTTP:
            if not self.url:
                raise MCPConfigError("Streamable HTTP transport requires 'url'")
        elif self.transport == MCPTransport.STDIO:
            if not self.command:
                raise MCPConfigError("stdio transport requires 'command'")

    @field_serializer("url")
    def serialize_url(self, url: Optional[HttpUrl]) -> Optional[str]:
        return str(url) if url else None


# --------- CAPABILITY DESCRIPTORS ---------


class ResourceSpec(BaseModel):
    """Addressable, read-only content unit published by a provider."""

    model_config = ConfigDict(frozen=True)

    uri: str
    name: str = ""
    description: str = ""
    mime_type: Optional[str] = None


class ResourceTemplateSpec(BaseModel):
    """URI pattern (e.g. ``papers://{topic}``) under which a provider serves resources."""

    model_config = ConfigDict(frozen=True)

    uri_template: str
    name: str = ""
    description: str = ""
    mime_type: Optional[str] = None

    @property
    def scheme(self) -> str:
        return self.uri_template.partition("://")[0]


class PromptArgumentSpec(BaseModel):
    """One argument accepted by a prompt template."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    required: bool = False


class PromptSpec(BaseModel):
    """Parameterized, provider-rendered prompt template."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    arguments: List[PromptArgumentSpec] = Field(default_factory=list)
