"""
Provider configuration for mcp-chatbot.

Loads the ``mcpServers`` mapping (provider id -> launch spec) from a JSON
or YAML file and returns typed Pydantic models.
"""

from pathlib import Path
from typing import Dict

import orjson
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .schemas import MCPConfigError, MCPServerConfig


class ServersConfig(BaseModel):
    """Provider id -> launch spec, in configuration order."""

    model_config = ConfigDict(populate_by_name=True)

    servers: Dict[str, MCPServerConfig] = Field(
        default_factory=dict, alias="mcpServers"
    )

    def validate_servers(self) -> None:
        """Validate every launch spec against its transport."""
        for server_id, config in self.servers.items():
            try:
                config.validate()
            except MCPConfigError as e:
                raise MCPConfigError(f"Invalid config for '{server_id}': {e}") from e


def load_servers_config(config_path: Path) -> ServersConfig:
    """
    Load provider configuration from JSON (default) or YAML.

    Args:
        config_path: Path to the config file; ``.yaml``/``.yml`` are read as YAML

    Returns:
        ServersConfig with validated launch specs

    Raises:
        FileNotFoundError: If the file does not exist
        MCPConfigError: If the file cannot be parsed or validated
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    raw = config_path.read_bytes()
    try:
        if config_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        else:
            data = orjson.loads(raw)
    except (orjson.JSONDecodeError, yaml.YAMLError) as e:
        raise MCPConfigError(f"Could not parse {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MCPConfigError(f"Expected a mapping at the top of {config_path}")

    try:
        config = ServersConfig(**data)
    except ValidationError as e:
        raise MCPConfigError(f"Invalid server configuration in {config_path}: {e}") from e

    config.validate_servers()
    return config
