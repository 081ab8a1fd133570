import asyncio
import logging
from typing import (
    Any,
    Dict,
    List,
    Optional,
    Tuple,
)

from mcp.types import (
    CallToolResult,
    Tool,
)

from .config import (
    ServerConfig,
    validate_server_name,
)
from .exceptions import (
    ConfigurationError,
    DisconnectError,
    ServerAlreadyConnectedError,
    ServerConnectionError,
    ToolInvocationError,
    ToolNotFoundError,
)
from .session import (
    RemoteSession,
    SessionFactory,
)
from .types import (
    ServerEntry,
    ToolEntry,
)
from .utils import (
    format_tool_id,
    mask_url_credentials,
)


logger = logging.getLogger(__name__)


class ToolRegistry:
    """Keeps track of remote MCP servers and the tools they expose.

    This class handles:
    - Opening one session per server and discovering its tools
    - Indexing tools by (server, tool) so equal tool names never collide
    - Routing tool calls to the owning session
    - Closing every session on disconnect
    """

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        """Initialize an empty registry.

        Args:
            session_factory: Callable building a session for ``(server_name, config)``.
                Defaults to :class:`RemoteSession` (Streamable HTTP).
        """
        self.session_factory: SessionFactory = session_factory or RemoteSession
        self.servers: Dict[str, ServerEntry] = {}
        self.tools: Dict[Tuple[str, str], ToolEntry] = {}
        # Serializes connect/disconnect. Index updates happen without awaiting,
        # so dispatch and list_tools never see a half-committed server.
        self._lock = asyncio.Lock()

    async def connect(self, server_name: str, config: ServerConfig) -> List[Tool]:
        """Open a session to a server and record the tools it exposes.

        Args:
            server_name: Unique server identifier, used as the registered-name prefix.
            config: Connection settings for the server.

        Returns:
            Tools discovered on the server.

        Raises:
            ConfigurationError: If the server identifier is invalid.
            ServerAlreadyConnectedError: If the identifier already has a live session.
            ServerConnectionError: If opening, initializing or enumerating fails.
                Nothing is recorded for the server in that case.
        """
        try:
            validate_server_name(server_name)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        async with self._lock:
            if server_name in self.servers:
                raise ServerAlreadyConnectedError(f"Server '{server_name}' is already connected", server_name)

            safe_url = mask_url_credentials(config.url or "")
            logger.info("[%s] Connecting to %s...", server_name, safe_url)

            session = None
            try:
                session = self.session_factory(server_name, config)
                await session.open()
                tools = await session.list_tools()
            except Exception as e:
                logger.error("[%s] Failed to connect: %s", server_name, e)
                if session is not None:
                    await self._close_quietly(server_name, session)
                raise ServerConnectionError(f"Failed to connect to {server_name}: {e}", server_name) from e

            self.servers[server_name] = ServerEntry(name=server_name, url=safe_url, session=session)
            for tool in tools:
                entry = ToolEntry(server=server_name, tool=tool)
                if entry.key in self.tools:
                    logger.warning("[%s] Duplicate tool '%s' reported, keeping the last one", server_name, tool.name)
                self.tools[entry.key] = entry

            logger.info("[%s] Connected: %d tool(s) available", server_name, len(tools))
            return tools

    async def dispatch(
        self,
        server_name: str,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> CallToolResult:
        """Route a tool call to the session of the server that owns the tool.

        Args:
            server_name: Identifier of the server exposing the tool.
            tool_name: Name of the tool on that server.
            arguments: Arguments passed to the tool. Validation is left to the server.

        Returns:
            The remote result, unchanged. A result with ``isError=True`` is a
            regular return value, not an exception.

        Raises:
            ToolNotFoundError: If (server_name, tool_name) isn't registered.
            ToolInvocationError: If the session fails to carry out the call.
        """
        entry = self.tools.get((server_name, tool_name))
        server = self.servers.get(server_name)
        if entry is None or server is None:
            raise ToolNotFoundError(server_name, tool_name, list(self.tools))

        try:
            return await server.session.call_tool(tool_name, arguments or {})
        except Exception as e:
            tool_id = format_tool_id(server_name, tool_name)
            logger.error("[%s] Tool '%s' failed: %s", server_name, tool_name, e)
            raise ToolInvocationError(f"Tool '{tool_id}' failed: {e}", server_name, tool_name) from e

    def list_tools(self, server_name: Optional[str] = None) -> List[ToolEntry]:
        """List registered tools, optionally only those of one server."""
        return [entry for entry in self.tools.values() if server_name is None or entry.server == server_name]

    async def disconnect(self) -> None:
        """Close every session and clear the registry.

        Close failures are logged and don't stop the remaining sessions from
        being closed. The registry is always empty afterwards.
        """
        async with self._lock:
            try:
                for server_name in list(self.servers):
                    # unindex before closing so concurrent dispatches fail fast
                    server = self.servers.pop(server_name)
                    for key in [key for key in self.tools if key[0] == server_name]:
                        del self.tools[key]
                    try:
                        await server.session.close()
                    except Exception as e:
                        error = DisconnectError(f"Error disconnecting from {server_name}: {e}", server_name)
                        logger.error("[%s] %s", server_name, error)
                    else:
                        logger.info("[%s] Disconnected", server_name)
            finally:
                self.servers.clear()
                self.tools.clear()

    async def _close_quietly(self, server_name: str, session: Any) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.warning("[%s] Error closing failed session: %s", server_name, e)

    def print_tools_summary(self) -> None:
        """Print a summary of all connected servers and their tools."""
        print("\n" + "=" * 80)
        print("TOOLS SUMMARY")
        print("=" * 80)

        for server_name, server in self.servers.items():
            entries = self.list_tools(server_name)
            print(f"\n[{server_name}] {server.url}")
            print(f"  Tools ({len(entries)}):")
            for entry in entries:
                print(f"    - {entry.registered_name}: {entry.description}")

        print("\n" + "=" * 80 + "\n")
