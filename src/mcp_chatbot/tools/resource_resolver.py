"""
Resource resolution for mcp-chatbot.

Maps a requested resource URI to the provider serving it and returns the
resource text. Short-hand aliases (``papers://ai`` for a registered
``papers://topics/ai``) and resource templates (``papers://{topic}``) are
resolved by a fallback scan over the registered resources of the same scheme.
"""

import logging
import re
from typing import Optional, Tuple

from .mcp_connection import MCPConnection
from .registry import CapabilityRegistry
from .schemas import MCPNotFoundError

logger = logging.getLogger(__name__)

_TEMPLATE_VARIABLE = re.compile(r"\{[^{}]+\}")


class ResourceResolver:
    """Resolves resource URIs through a CapabilityRegistry."""

    def __init__(self, registry: CapabilityRegistry):
        self._registry = registry

    async def resolve(self, uri: str) -> str:
        """
        Read the resource registered for ``uri``.

        Args:
            uri: Resource URI, either canonical or a same-scheme alias

        Returns:
            str: Text content of the resource

        Raises:
            MCPNotFoundError: If neither exact lookup nor fallback matches
            MCPInvocationError: If the owning provider fails to read it
            MalformedResponseError: If the provider response is not a single text entry
        """
        target, connection = uri, self._registry.find_resource_owner(uri)
        if connection is None:
            match = self._fallback(uri)
            if match is None:
                raise MCPNotFoundError(f"Resource not found: {uri}")
            target, connection = match
            logger.debug(f"Resolved {uri} to {target} on {connection.server_id}")

        return await connection.read_resource(target)

    def _fallback(self, uri: str) -> Optional[Tuple[str, MCPConnection]]:
        scheme, separator, suffix = uri.partition("://")
        if not separator or scheme not in self._registry.resource_schemes:
            return None
        suffix = suffix.rstrip("/")

        for resource in self._registry.resources:
            registered_scheme, _, registered_suffix = resource.uri.partition("://")
            if registered_scheme != scheme:
                continue
            registered_suffix = registered_suffix.rstrip("/")
            if registered_suffix == suffix or registered_suffix.rsplit("/", 1)[-1] == suffix:
                return resource.uri, self._registry.get_resource_owner(resource.uri)

        for template in self._registry.resource_templates:
            if template.scheme == scheme and template_matches(template.uri_template, uri):
                return uri, self._registry.get_template_owner(template.uri_template)

        return None


def template_matches(uri_template: str, uri: str) -> bool:
    """Whether ``uri`` is an expansion of a simple ``{var}`` URI template."""
    literals = _TEMPLATE_VARIABLE.split(uri_template)
    pattern = "[^/]+".join(re.escape(literal) for literal in literals)
    return re.fullmatch(pattern, uri) is not None
