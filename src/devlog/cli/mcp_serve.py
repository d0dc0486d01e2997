"""MCP serve command implementation."""

import asyncio
import json
import logging
import sys
from typing import Any, Optional

import typer
from rich.console import Console

from devlog.cli.log import (
    LayoutOption,
    LogFileOption,
    ProjectFolderOption,
    VerboseOption,
    open_store,
)
from devlog.store.logstore import InvalidInputError

console = Console(stderr=True)
logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def mcp_serve(
    transport: str = typer.Option("stdio", "--transport", "-t", help="Transport type: stdio, sdk"),
    log_file: Optional[str] = LogFileOption,
    layout: Optional[str] = LayoutOption,
    project_folder: Optional[str] = ProjectFolderOption,
    verbose: bool = VerboseOption,
) -> None:
    """Start devlog as an MCP server."""

    from devlog.mcp.server import create_server, run_mcp_server

    if transport not in ("stdio", "sdk"):
        console.print(f"[red]Unknown transport: {transport}[/red]")
        raise typer.Exit(1)

    # an unusable log aborts startup
    store = open_store(log_file, layout, project_folder, verbose)
    server = create_server(store)

    console.print(f"[bold]devlog MCP Server[/bold]")
    console.print(f"Version: {server.version}")
    console.print(f"Transport: {transport}")
    console.print(f"Log: {store.path}", markup=False)
    console.print(f"Tools: {len(server.get_tools())}")
    console.print("")

    if transport == "sdk":
        run_mcp_server(server)
    else:
        asyncio.run(_run_stdio_server(server))


async def _run_stdio_server(server) -> None:
    """Run server over stdio transport."""
    console.print("[dim]Listening on stdin...[/dim]")

    while True:
        try:
            # Read line from stdin
            line = await asyncio.get_running_loop().run_in_executor(
                None, sys.stdin.readline
            )

            if not line:
                break

            line = line.strip()
            if not line:
                continue

            # Parse JSON-RPC request
            try:
                request = json.loads(line)
            except json.JSONDecodeError:
                _send(_error_response(None, PARSE_ERROR, "Parse error"))
                continue

            response = await handle_request(server, request)
            if response is not None:
                _send(response)

        except KeyboardInterrupt:
            break

    console.print("[dim]Shutting down[/dim]")


async def handle_request(server, request: Any) -> Optional[dict]:
    """Turn one JSON-RPC request into a response (None for notifications)."""
    if not isinstance(request, dict):
        return _error_response(None, INVALID_REQUEST, "Request must be a JSON object")

    method = str(request.get("method") or "")
    params = request.get("params")
    if not isinstance(params, dict):
        params = {}
    request_id = request.get("id")

    if method.startswith("notifications/"):
        # No response needed for notifications
        return None

    if method == "initialize":
        return _result_response(request_id, {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {}
            },
            "serverInfo": {
                "name": server.name,
                "version": server.version
            }
        })

    if method == "ping":
        return _result_response(request_id, {})

    if method == "tools/list":
        return _result_response(request_id, {"tools": server.get_tools()})

    if method == "tools/call":
        tool_name = params.get("name", "")
        tool_args = params.get("arguments", {})

        try:
            result = await server.call_tool(tool_name, tool_args)
        except InvalidInputError as e:
            return _error_response(request_id, INVALID_PARAMS, str(e))
        except Exception as e:
            logger.exception("Tool %s crashed", tool_name)
            return _error_response(request_id, INTERNAL_ERROR, f"Internal error: {e}")

        return _result_response(request_id, result)

    return _error_response(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")


def _result_response(request_id: Any, result: dict) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "result": result
    }


def _error_response(request_id: Any, code: int, message: str) -> dict:
    """Build a JSON-RPC error response."""
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {
            "code": code,
            "message": message
        }
    }


def _send(response: dict) -> None:
    print(json.dumps(response), flush=True)
