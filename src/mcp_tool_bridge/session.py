"""Sessions to remote MCP servers over the Streamable HTTP transport."""

import logging
from contextlib import AsyncExitStack
from datetime import timedelta
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
)

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client
from mcp.types import (
    CallToolResult,
    Implementation,
    Tool,
)

from . import __version__
from .config import ServerConfig
from .utils import mask_url_credentials


logger = logging.getLogger(__name__)


class Session(Protocol):
    """A live connection to one remote tool server."""

    async def open(self) -> None: ...

    async def list_tools(self) -> List[Tool]: ...

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> CallToolResult: ...

    async def close(self) -> None: ...


SessionFactory = Callable[[str, ServerConfig], Session]


class RemoteSession:
    """MCP client session over Streamable HTTP.

    The transport and the ``ClientSession`` are entered on a private
    ``AsyncExitStack`` so each server can be closed on its own.
    """

    def __init__(self, server_name: str, config: ServerConfig):
        if not config.url:
            raise ValueError(f"Server '{server_name}' has no url configured")
        self.server_name = server_name
        self.config = config
        self._stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None

    @property
    def is_open(self) -> bool:
        return self._session is not None

    async def open(self) -> None:
        """Open the transport and perform the MCP initialize handshake.

        Raises:
            RuntimeError: If the session is already open.
            Exception: Any transport or protocol error from the MCP SDK. Partially
                opened resources are released before the error propagates.
        """
        if self._stack is not None:
            raise RuntimeError(f"Session for '{self.server_name}' is already open")

        stack = AsyncExitStack()
        try:
            read, write, _ = await stack.enter_async_context(
                streamablehttp_client(
                    self.config.url,
                    headers=self.config.headers or None,
                    timeout=timedelta(seconds=self.config.timeout),
                    sse_read_timeout=timedelta(seconds=self.config.sse_read_timeout),
                )
            )
            session = await stack.enter_async_context(
                ClientSession(
                    read,
                    write,
                    client_info=Implementation(name=f"mcp-tool-bridge-{self.server_name}", version=__version__),
                )
            )
            result = await session.initialize()
        except BaseException:
            await stack.aclose()
            raise

        self._stack = stack
        self._session = session
        logger.debug(
            "[%s] Initialized session with %s (protocol %s)",
            self.server_name,
            mask_url_credentials(self.config.url or ""),
            result.protocolVersion,
        )

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"Session for '{self.server_name}' is not open")
        return self._session

    async def list_tools(self) -> List[Tool]:
        """Enumerate every tool the server exposes, following pagination cursors."""
        session = self._require_session()

        tools: List[Tool] = []
        cursor: Optional[str] = None
        while True:
            result = await session.list_tools(cursor=cursor) if cursor else await session.list_tools()
            tools.extend(result.tools)
            cursor = result.nextCursor
            if not cursor:
                return tools

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> CallToolResult:
        session = self._require_session()
        return await session.call_tool(name, arguments)

    async def close(self) -> None:
        """Close the session and its transport. Closing twice is a no-op."""
        stack, self._stack, self._session = self._stack, None, None
        if stack is not None:
            await stack.aclose()
