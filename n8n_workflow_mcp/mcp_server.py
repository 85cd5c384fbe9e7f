"""MCP protocol server for the n8n workflow manager.

Uses the official MCP Python SDK with stdio transport.

IMPORTANT: All logging MUST go to stderr, not stdout!
The MCP protocol uses stdout for JSON-RPC communication.
"""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .config import Settings, get_settings
from .dispatcher import OperationDispatcher
from .logging_config import get_logger, setup_logging
from .manager import N8nWorkflowManager

logger = get_logger(__name__)

SERVER_NAME = "n8n-workflow-manager"


# -----------------------------------------------------------------------------
# Tool Definitions
# -----------------------------------------------------------------------------

def get_tool_definitions(dispatcher: OperationDispatcher) -> list[Tool]:
    """Return the list of available MCP tools with their schemas."""
    return [
        Tool(
            name=definition.name,
            description=definition.description,
            inputSchema=definition.input_json_schema(),
        )
        for definition in dispatcher.list_operations()
    ]


def render_response(envelope: Dict[str, Any]) -> list[TextContent]:
    """Serialize a response envelope into MCP text content."""
    return [TextContent(
        type="text",
        text=json.dumps(envelope, indent=2, default=str)
    )]


# -----------------------------------------------------------------------------
# MCP Protocol Handlers
# -----------------------------------------------------------------------------

def create_server(dispatcher: OperationDispatcher) -> Server:
    """Create the MCP server bound to a dispatcher."""
    mcp = Server(SERVER_NAME)

    @mcp.list_tools()
    async def list_tools() -> list[Tool]:
        """Return the list of available tools."""
        return get_tool_definitions(dispatcher)

    @mcp.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> list[TextContent]:
        """Execute a tool and return the result."""
        logger.info("Calling tool", extra={"tool_name": name})
        envelope = await dispatcher.dispatch(name, arguments or {})
        return render_response(envelope)

    return mcp


# -----------------------------------------------------------------------------
# Main Entry Point
# -----------------------------------------------------------------------------

async def serve(settings: Optional[Settings] = None) -> None:
    """Run the MCP server using stdio transport."""
    settings = settings or get_settings()
    manager = N8nWorkflowManager.from_settings(settings)
    mcp = create_server(OperationDispatcher(manager))

    logger.info(
        "n8n MCP server running on stdio",
        extra={"config": settings.get_safe_dict()}
    )

    async with stdio_server() as (read_stream, write_stream):
        await mcp.run(
            read_stream,
            write_stream,
            mcp.create_initialization_options()
        )


def main() -> None:
    """Console entry point."""
    settings = get_settings()
    setup_logging(settings.mcp_log_level)

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception:
        logger.critical("Fatal error in main()", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
