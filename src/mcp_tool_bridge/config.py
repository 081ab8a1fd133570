"""Configuration models for the MCP tool bridge."""

import json
import re
from pathlib import Path
from typing import (
    Any,
    Dict,
    Mapping,
    Optional,
    Union,
)
from urllib.parse import urlsplit

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
)

from .exceptions import ConfigurationError


DEFAULT_PLUGIN_ID = "mcp-integration"

# Server identifiers never contain the registered-name separator ("_").
SERVER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")


def validate_server_name(server_name: str) -> str:
    """Check that a server identifier is safe to use as a registered-name prefix.

    Args:
        server_name: Server identifier to validate.

    Returns:
        The identifier unchanged.

    Raises:
        ValueError: If the identifier is empty or contains characters other than
            ASCII letters, digits and hyphens.
    """
    if not SERVER_NAME_PATTERN.match(server_name):
        raise ValueError(
            f"Invalid server identifier {server_name!r}: only letters, digits and '-' are allowed"
        )
    return server_name


class ServerConfig(BaseModel):
    """Configuration for a single remote MCP server."""

    url: Optional[str] = None
    enabled: bool = True
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: float = 30.0
    sse_read_timeout: float = 300.0

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        return value


class PluginConfig(BaseModel):
    """Configuration for all remote servers handled by the plugin."""

    servers: Dict[str, ServerConfig] = Field(default_factory=dict)

    @field_validator("servers")
    @classmethod
    def _check_server_names(cls, value: Dict[str, ServerConfig]) -> Dict[str, ServerConfig]:
        for server_name in value:
            validate_server_name(server_name)
        return value

    def enabled_servers(self) -> Dict[str, ServerConfig]:
        """Return the servers that are enabled and have a URL configured."""
        return {
            name: server_config
            for name, server_config in self.servers.items()
            if server_config.enabled and server_config.url
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PluginConfig":
        """Build a configuration from a plain mapping.

        Raises:
            ConfigurationError: If the data doesn't match the schema.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid plugin configuration: {e}") from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PluginConfig":
        """Load a configuration from a JSON file shaped as ``{"servers": {...}}``.

        Raises:
            ConfigurationError: If the file is missing, isn't valid JSON, or doesn't
                match the schema.
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e

        return cls.from_dict(config_data)


def load_plugin_config(host_config: Optional[Mapping[str, Any]], plugin_id: str = DEFAULT_PLUGIN_ID) -> PluginConfig:
    """Extract the plugin's configuration from the host configuration tree.

    The plugin configuration lives at ``plugins.entries[plugin_id].config``.
    Any missing level yields an empty configuration.

    Args:
        host_config: Host configuration mapping (may be None).
        plugin_id: Identifier under which the plugin is configured.

    Returns:
        Validated plugin configuration.

    Raises:
        ConfigurationError: If the plugin section doesn't match the schema.
    """
    section: Any = host_config or {}
    for key in ("plugins", "entries", plugin_id, "config"):
        if not isinstance(section, Mapping):
            section = {}
            break
        section = section.get(key) or {}

    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Configuration for plugin '{plugin_id}' must be a mapping")

    return PluginConfig.from_dict(section)
