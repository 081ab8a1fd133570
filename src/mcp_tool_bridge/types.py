"""Registry record types for the MCP tool bridge."""

from typing import (
    Any,
    Dict,
    Optional,
    Tuple,
)

from pydantic import (
    BaseModel,
    ConfigDict,
)

from mcp.types import Tool

from .utils import (
    format_registered_name,
    format_tool_id,
)


class ServerEntry(BaseModel):
    """A connected server and its live session."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    url: str
    session: Any


class ToolEntry(BaseModel):
    """A tool exposed by one connected server.

    The owning session is reached through ``server`` and the registry's server
    index, so entries never keep a session alive on their own.
    """

    model_config = ConfigDict(frozen=True)

    server: str
    tool: Tool

    @property
    def name(self) -> str:
        return self.tool.name

    @property
    def description(self) -> Optional[str]:
        return self.tool.description

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.tool.inputSchema

    @property
    def key(self) -> Tuple[str, str]:
        return (self.server, self.tool.name)

    @property
    def id(self) -> str:
        return format_tool_id(self.server, self.tool.name)

    @property
    def registered_name(self) -> str:
        return format_registered_name(self.server, self.tool.name)

    def describe(self) -> Dict[str, Any]:
        """Return a JSON-ready description used by the listing tool."""
        return {
            "id": self.id,
            "registeredName": self.registered_name,
            "server": self.server,
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }
