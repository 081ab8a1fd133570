"""MCP Tool Bridge.

A Python library that plugs remote Model Context Protocol (MCP) tool servers into a
host application's tool-calling mechanism. Servers are reached over the Streamable
HTTP transport; every tool they expose becomes a host tool named ``server_tool``.

Key Features:
    - One session per configured server, opened on plugin start
    - Tool discovery and a (server, tool) index free of name collisions
    - Routing of tool calls to the owning session
    - Uniform ``{content, isError}`` results; tool failures never reach the host as exceptions
    - Credential masking of server URLs in every log line

Examples:
    Plugin registration:
    >>> from mcp_tool_bridge import register
    >>> plugin = register(api)

    Using the registry directly:
    >>> from mcp_tool_bridge import ServerConfig, ToolRegistry
    >>> registry = ToolRegistry()
    >>> await registry.connect("docs", ServerConfig(url="https://docs.example.com/mcp"))
    >>> result = await registry.dispatch("docs", "ask", {"prompt": "How do I page results?"})
    >>> await registry.disconnect()

See Also:
    - MCP Protocol Documentation: https://modelcontextprotocol.io
"""

__version__ = "0.1.0"

from .config import (
    PluginConfig,
    ServerConfig,
    load_plugin_config,
)
from .exceptions import (
    ConfigurationError,
    DisconnectError,
    ServerAlreadyConnectedError,
    ServerConnectionError,
    ToolBridgeError,
    ToolInvocationError,
    ToolNotFoundError,
)
from .plugin import (
    ToolBridgePlugin,
    register,
)
from .registry import ToolRegistry
from .session import (
    RemoteSession,
    Session,
)
from .types import (
    ServerEntry,
    ToolEntry,
)
from .utils import (
    format_registered_name,
    mask_url_credentials,
    parse_registered_name,
    to_host_result,
)


__all__ = [
    # Core
    "ToolRegistry",
    "ToolBridgePlugin",
    "register",
    # Sessions
    "Session",
    "RemoteSession",
    # Configuration models
    "ServerConfig",
    "PluginConfig",
    "load_plugin_config",
    # Registry records
    "ServerEntry",
    "ToolEntry",
    # Exceptions
    "ToolBridgeError",
    "ConfigurationError",
    "ServerConnectionError",
    "ServerAlreadyConnectedError",
    "ToolNotFoundError",
    "ToolInvocationError",
    "DisconnectError",
    # Utility functions
    "format_registered_name",
    "parse_registered_name",
    "mask_url_credentials",
    "to_host_result",
    # Version
    "__version__",
]
