"""Provider connections, capability registry and resource resolution for mcp-chatbot."""

from .base_tool import BaseTool
from .config import ServersConfig, load_servers_config
from .mcp_connection import MCPConnection
from .mcp_tool import MCPTool
from .registry import CapabilityRegistry
from .resource_resolver import ResourceResolver
from .schemas import (
    MalformedResponseError,
    MCPConfigError,
    MCPConnectionError,
    MCPError,
    MCPInvocationError,
    MCPNotFoundError,
    MCPServerConfig,
    MCPTransport,
    PromptArgumentSpec,
    PromptSpec,
    ResourceSpec,
    ResourceTemplateSpec,
)

__all__ = [
    "BaseTool",
    "CapabilityRegistry",
    "MCPConnection",
    "MCPServerConfig",
    "MCPTransport",
    "MCPTool",
    "ResourceResolver",
    "ServersConfig",
    "load_servers_config",
    "MCPError",
    "MCPConfigError",
    "MCPConnectionError",
    "MCPNotFoundError",
    "MCPInvocationError",
    "MalformedResponseError",
    "PromptArgumentSpec",
    "PromptSpec",
    "ResourceSpec",
    "ResourceTemplateSpec",
]
