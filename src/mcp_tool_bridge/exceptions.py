"""Custom exceptions for the MCP tool bridge."""

from typing import (
    List,
    Optional,
    Sequence,
    Tuple,
)


class ToolBridgeError(Exception):
    """Base exception for all tool bridge errors.

    All custom exceptions in this module inherit from this base class,
    making it easy to catch all bridge-specific errors.
    """

    pass


class ConfigurationError(ToolBridgeError):
    """Raised when there's an error in plugin or server configuration.

    This includes issues like:
    - Missing or invalid configuration files
    - Malformed JSON in configuration
    - Server identifiers containing the registered-name separator
    - Schema validation failures

    Examples:
        >>> raise ConfigurationError("Config file not found: servers.json")
        >>> raise ConfigurationError("Invalid server identifier: 'my_server'")
    """

    pass


class ServerConnectionError(ToolBridgeError):
    """Raised when a server session cannot be opened, initialized or enumerated.

    The registry state is left untouched when this is raised: no server entry
    and no tool entries are recorded for the failing server.

    Examples:
        >>> raise ServerConnectionError("Failed to connect to docs: connection refused")
    """

    def __init__(self, message: str, server_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.server_name = server_name


class ServerAlreadyConnectedError(ServerConnectionError):
    """Raised when connecting a server identifier that already has a live session."""

    pass


class ToolNotFoundError(ToolBridgeError):
    """Raised when dispatching to a (server, tool) pair that isn't registered.

    The ``known_keys`` attribute lists every (server, tool) pair known at the
    time of the failed lookup.

    Examples:
        >>> raise ToolNotFoundError("docs", "ask", [("api", "ask")])
    """

    def __init__(self, server_name: str, tool_name: str, known_keys: Sequence[Tuple[str, str]]) -> None:
        self.server_name = server_name
        self.tool_name = tool_name
        self.known_keys: List[Tuple[str, str]] = list(known_keys)
        available = ", ".join(f"{server}:{tool}" for server, tool in self.known_keys) or "(none)"
        super().__init__(f"Tool not found: {server_name}:{tool_name}. Available: {available}")


class ToolInvocationError(ToolBridgeError):
    """Raised when the remote call for a registered tool fails.

    Remote results flagged with ``isError`` are not exceptions; this covers
    transport and protocol failures raised by the session.
    """

    def __init__(self, message: str, server_name: str, tool_name: str) -> None:
        super().__init__(message)
        self.server_name = server_name
        self.tool_name = tool_name


class DisconnectError(ToolBridgeError):
    """Raised internally when closing a session fails.

    Disconnect errors are logged and never propagated, so one failing server
    cannot prevent the remaining sessions from being closed.
    """

    def __init__(self, message: str, server_name: str) -> None:
        super().__init__(message)
        self.server_name = server_name
