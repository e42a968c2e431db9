"""MCP server for vargos.

Exposes every tool in ``vargos.tools.TOOL_DOMAINS`` as an MCP tool.
Uses stdio transport.
"""

import asyncio
import inspect
import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from ..config import CoreConfig
from ..system import CoreServices, create_core_services
from ..tools import ToolSpec, get_all_tools, run_tool

logger = logging.getLogger(__name__)


def _mcp_handler(tool: ToolSpec, services: CoreServices):
    """Bind a tool to the service bundle as a JSON-returning MCP handler."""
    async def handler(**kwargs) -> str:
        return json.dumps(await run_tool(tool, services, **kwargs), default=str)

    # FastMCP builds the argument schema from the signature; hide ``services``
    signature = inspect.signature(tool.handler)
    handler.__signature__ = signature.replace(
        parameters=list(signature.parameters.values())[1:],
        return_annotation=str,
    )
    handler.__name__ = tool.name.replace("-", "_")
    handler.__doc__ = tool.description
    return handler


def create_server(services: CoreServices, name: str = "vargos") -> FastMCP:
    """Create an MCP server exposing all tools over ``services``."""
    mcp = FastMCP(name)
    for tool in get_all_tools():
        mcp.add_tool(_mcp_handler(tool, services), name=tool.name, description=tool.description)
    logger.debug(f"Registered {len(get_all_tools())} MCP tools")
    return mcp


async def serve(config: Optional[CoreConfig] = None) -> None:
    """Wire the services and serve MCP over stdio until the client disconnects."""
    config = config or CoreConfig.from_env()
    services = await create_core_services(config)
    async with services:
        if services.env:
            services.env.load_into_environ()
        await create_server(services).run_stdio_async()


def main():
    """Entry point for the MCP server."""
    import sys

    # Configure logging to stderr (stdout is for MCP protocol)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    asyncio.run(serve())


if __name__ == "__main__":
    main()
