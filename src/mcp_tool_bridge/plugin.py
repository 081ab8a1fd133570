"""Host plugin exposing remote MCP tools as host-native tools.

Each tool discovered on a configured server is registered with the host under
its registered name (``server_tool``). Two more tools are always available:
``mcp-list`` to inspect the registry and ``mcp-call`` to call any remote tool
by server and tool name.

Examples:
    Registration from the host's plugin loader:
    >>> from mcp_tool_bridge import register
    >>> plugin = register(api)

    Host configuration:
    >>> api.config = {
    ...     "plugins": {"entries": {"mcp-integration": {"config": {
    ...         "servers": {"api-copilot": {"url": "https://copilot.example.com/mcp"}}
    ...     }}}}
    ... }
"""

import json
import logging
from typing import (
    Any,
    Dict,
    Mapping,
    Hashable,
    Optional,
)

from .config import (
    DEFAULT_PLUGIN_ID,
    load_plugin_config,
)
from .exceptions import ConfigurationError
from .host import (
    HostAPI,
    HostLogHandler,
)
from .registry import ToolRegistry
from .session import SessionFactory
from .types import ToolEntry
from .utils import (
    error_result,
    text_block,
    to_host_result,
)


logger = logging.getLogger(__name__)

PACKAGE_LOGGER_NAME = __name__.rsplit(".", 1)[0]

LIST_TOOL_NAME = "mcp-list"
CALL_TOOL_NAME = "mcp-call"

LIST_TOOL_PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "server": {
            "type": "string",
            "description": "Only list the tools of this server",
        },
    },
}

CALL_TOOL_PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "server": {"type": "string", "description": "Identifier of the MCP server"},
        "tool": {"type": "string", "description": "Name of the tool on that server"},
        "args": {"type": "object", "description": "Arguments passed to the tool"},
    },
    "required": ["server", "tool"],
}


class ToolBridgePlugin:
    """Adapter between the host's plugin API and a :class:`ToolRegistry`.

    The registry only exists between ``start()`` and ``stop()``. Tool calls
    made outside that window return an error result.
    """

    def __init__(
        self,
        api: HostAPI,
        plugin_id: str = DEFAULT_PLUGIN_ID,
        session_factory: Optional[SessionFactory] = None,
    ):
        self.api = api
        self.plugin_id = plugin_id
        self.session_factory = session_factory
        self.registry: Optional[ToolRegistry] = None
        # host tool name -> owner: the escape-hatch name itself, or the remote (server, tool) key
        self.registered_tools: Dict[str, Hashable] = {}
        self._log_handler: Optional[HostLogHandler] = None

    def register(self) -> None:
        """Register the service and the escape-hatch tools with the host."""
        self._install_log_handler()

        self.api.register_service({"id": self.plugin_id, "start": self.start, "stop": self.stop})

        self._register_host_tool(
            {
                "name": LIST_TOOL_NAME,
                "description": (
                    "List the tools available on the connected MCP servers, with the name each one "
                    "is registered under. Optionally restrict the listing to one server."
                ),
                "parameters": LIST_TOOL_PARAMETERS,
                "execute": self._execute_list,
            }
        )
        self._register_host_tool(
            {
                "name": CALL_TOOL_NAME,
                "description": "Call any tool of a connected MCP server by server identifier and tool name.",
                "parameters": CALL_TOOL_PARAMETERS,
                "execute": self._execute_call,
            }
        )

        logger.info("Plugin registered")

    async def start(self) -> None:
        """Connect every enabled server and register its tools with the host."""
        logger.info("Starting...")
        if self.registry is not None:
            logger.warning("Already started, disconnecting the previous sessions first")
            previous, self.registry = self.registry, None
            await previous.disconnect()

        registry = ToolRegistry(self.session_factory)
        self.registry = registry

        try:
            config = load_plugin_config(getattr(self.api, "config", None), self.plugin_id)
        except ConfigurationError as e:
            logger.error("Invalid configuration, no servers will be connected: %s", e)
            return

        enabled = config.enabled_servers()
        for server_name in config.servers:
            if server_name not in enabled:
                logger.info("[%s] Skipped (disabled or no url)", server_name)

        for server_name, server_config in enabled.items():
            try:
                await registry.connect(server_name, server_config)
            except Exception as e:
                logger.error("Failed to initialize %s: %s", server_name, e)
                continue

            for entry in registry.list_tools(server_name):
                self._register_remote_tool(entry)

        logger.info("Started: %d server(s), %d tool(s)", len(registry.servers), len(registry.tools))

    async def stop(self) -> None:
        """Close every session. The registry is dropped even if closing fails."""
        logger.info("Stopping...")
        registry, self.registry = self.registry, None
        if registry is not None:
            await registry.disconnect()
        logger.info("Stopped")

    async def call(self, server_name: str, tool_name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Call a remote tool and return the host result shape.

        Never raises: every failure is returned as a result with ``isError`` set.
        """
        try:
            if self.registry is None:
                return error_result(f"Plugin '{self.plugin_id}' is not started")
            result = await self.registry.dispatch(server_name, tool_name, dict(arguments or {}))
            return to_host_result(result)
        except Exception as e:
            logger.error("[%s] Call to '%s' failed: %s", server_name, tool_name, e)
            return error_result(str(e))

    def _install_log_handler(self) -> None:
        host_logger = getattr(self.api, "logger", None)
        if host_logger is None or self._log_handler is not None:
            return
        package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
        if package_logger.level == logging.NOTSET:
            package_logger.setLevel(logging.INFO)
        self._log_handler = HostLogHandler(host_logger)
        package_logger.addHandler(self._log_handler)

    def uninstall_log_handler(self) -> None:
        """Stop forwarding log records to the host logger."""
        if self._log_handler is not None:
            logging.getLogger(PACKAGE_LOGGER_NAME).removeHandler(self._log_handler)
            self._log_handler = None

    def _register_host_tool(self, spec: Dict[str, Any], owner: Optional[Hashable] = None) -> None:
        name = spec["name"]
        owner = name if owner is None else owner
        if name in self.registered_tools:
            if self.registered_tools[name] != owner:
                logger.warning("Host tool '%s' is already registered for %s, skipping", name, self.registered_tools[name])
            return
        self.api.register_tool(spec)
        self.registered_tools[name] = owner

    def _register_remote_tool(self, entry: ToolEntry) -> None:
        server_name, tool_name = entry.key

        async def execute(request_id: Any, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
            return await self.call(server_name, tool_name, params)

        self._register_host_tool(
            {
                "name": entry.registered_name,
                "description": entry.description or f"MCP tool {entry.id}",
                "parameters": entry.input_schema,
                "execute": execute,
            },
            owner=entry.key,
        )

    async def _execute_list(self, request_id: Any, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        try:
            if self.registry is None:
                return error_result(f"Plugin '{self.plugin_id}' is not started")
            server_name = (params or {}).get("server") or None
            entries = [entry.describe() for entry in self.registry.list_tools(server_name)]
            return {"content": [text_block(json.dumps(entries, indent=2))], "isError": False}
        except Exception as e:
            logger.error("Listing tools failed: %s", e)
            return error_result(str(e))

    async def _execute_call(self, request_id: Any, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        params = params or {}
        server_name = params.get("server")
        tool_name = params.get("tool")
        if not server_name or not tool_name:
            return error_result("Both 'server' and 'tool' are required")
        arguments = params.get("args") or {}
        if not isinstance(arguments, Mapping):
            return error_result("'args' must be an object")
        return await self.call(server_name, tool_name, arguments)


def register(api: HostAPI, plugin_id: str = DEFAULT_PLUGIN_ID) -> ToolBridgePlugin:
    """Plugin entry point called by the host."""
    plugin = ToolBridgePlugin(api, plugin_id)
    plugin.register()
    return plugin
