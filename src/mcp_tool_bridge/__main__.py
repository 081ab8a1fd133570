"""Command line client: connect the servers of a config file and list or call their tools.

Usage:
    mcp-tool-bridge servers.json
    mcp-tool-bridge servers.json --server docs
    mcp-tool-bridge servers.json --call docs ask --args '{"prompt": "hello"}'
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import (
    List,
    Optional,
)

from .config import PluginConfig
from .exceptions import ConfigurationError
from .registry import ToolRegistry
from .utils import (
    error_result,
    to_host_result,
)


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mcp-tool-bridge", description=__doc__.splitlines()[0])
    parser.add_argument("config", help='JSON file shaped as {"servers": {name: {"url": ...}}}')
    parser.add_argument("--server", help="only connect this server")
    parser.add_argument("--call", nargs=2, metavar=("SERVER", "TOOL"), help="call a tool after connecting")
    parser.add_argument("--args", default="{}", help="JSON object of tool arguments (default: {})")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    config = PluginConfig.from_file(args.config)
    servers = config.enabled_servers()
    if args.server:
        servers = {name: cfg for name, cfg in servers.items() if name == args.server}
        if not servers:
            logger.error("Server '%s' is not configured or is disabled", args.server)
            return 1

    registry = ToolRegistry()
    try:
        logger.info("Connecting to %d MCP server(s)...", len(servers))
        for server_name, server_config in servers.items():
            try:
                await registry.connect(server_name, server_config)
            except Exception as e:
                logger.warning("Failed to connect to %s: %s", server_name, e)
        logger.info("Successfully connected to %d server(s)", len(registry.servers))

        registry.print_tools_summary()

        if args.call:
            server_name, tool_name = args.call
            try:
                result = to_host_result(await registry.dispatch(server_name, tool_name, json.loads(args.args)))
            except Exception as e:
                result = error_result(str(e))
            print(json.dumps(result, indent=2))
            return 1 if result["isError"] else 0
        return 0
    finally:
        await registry.disconnect()


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(message)-60s %(filename)s:%(lineno)d",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    args = parse_args(argv)
    try:
        sys.exit(asyncio.run(run(args)))
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(2)


if __name__ == "__main__":
    main()
