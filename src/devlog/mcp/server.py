"""devlog MCP server: expose the development log via Model Context Protocol.

Usage:
    devlog mcp-serve

Configuration (for any MCP-compatible agent):
    {
        "mcpServers": {
            "devlog": {
                "command": "devlog",
                "args": ["mcp-serve"]
            }
        }
    }
"""

import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devlog import __version__
from devlog.output.formatter import format_error
from devlog.store.logstore import (
    InvalidInputError,
    LogNotFoundError,
    LogStore,
    LogWriteError,
    UnknownToolError,
)

logger = logging.getLogger(__name__)

MAX_TAIL_LINES = 1000
DEFAULT_TAIL_LINES = 20


class ToolArgs(BaseModel):
    # strict: no "10" -> 10 or True -> 1 coercion
    model_config = ConfigDict(strict=True)


class TailArgs(ToolArgs):
    lines: int = Field(
        DEFAULT_TAIL_LINES, ge=1, le=MAX_TAIL_LINES, description="Number of lines to return"
    )


class WriteArgs(ToolArgs):
    text: str = Field(..., min_length=1, description="Entry text")


class SearchArgs(ToolArgs):
    query: str = Field(..., min_length=1, description="Text to look for")


@dataclass
class Tool:
    """A callable tool and the pydantic model of its arguments."""
    name: str
    description: str
    args_model: type[ToolArgs]
    handler: Callable[[Any], str]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.args_model.model_json_schema(),
        }


def parse_arguments(model: type[ToolArgs], arguments: Optional[dict]) -> ToolArgs:
    """Validate raw tool arguments, raising InvalidInputError on failure."""
    try:
        return model.model_validate({} if arguments is None else arguments)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidInputError(f"Invalid arguments: {problems}") from e


def tool_result(text: str, is_error: bool = False) -> dict:
    """Build an MCP tools/call result payload."""
    return {
        "content": [{"type": "text", "text": text}],
        "isError": is_error,
    }


class DevlogServer:
    """Tool registry bound to one LogStore."""

    name = "devlog"
    version = __version__

    def __init__(self, store: LogStore):
        self.store = store
        self._tools: dict[str, Tool] = {}

        self.register(Tool(
            name="tail",
            description="Show the most recent lines of the development log.",
            args_model=TailArgs,
            handler=self._tail,
        ))
        self.register(Tool(
            name="write",
            description="Append a timestamped entry to the development log.",
            args_model=WriteArgs,
            handler=self._write,
        ))
        self.register(Tool(
            name="search",
            description="Find log lines containing a phrase (case-insensitive).",
            args_model=SearchArgs,
            handler=self._search,
        ))

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get_tools(self) -> list[dict]:
        """Tool descriptors for tools/list."""
        return [tool.to_dict() for tool in self._tools.values()]

    async def call_tool(self, name: str, arguments: Optional[dict] = None) -> dict:
        """Run a tool.

        Invalid arguments and unknown tools raise InvalidInputError before the
        log is touched. Read and write failures come back as an error result
        so the caller sees them as tool output.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(f"Unknown tool: {name}")

        args = parse_arguments(tool.args_model, arguments)
        logger.debug("Calling %s with %s", name, args)

        try:
            text = tool.handler(args)
        except LogNotFoundError as e:
            logger.warning("%s failed: %s", name, e)
            return tool_result(
                format_error("NotFound", str(e), "Check that the log file exists and is readable."),
                is_error=True,
            )
        except LogWriteError as e:
            logger.warning("%s failed: %s", name, e)
            return tool_result(format_error("IOError", str(e)), is_error=True)

        return tool_result(text)

    def _tail(self, args: TailArgs) -> str:
        return self.store.tail(args.lines)

    def _write(self, args: WriteArgs) -> str:
        self.store.append(args.text)
        return f"Logged entry to {self.store.path}"

    def _search(self, args: SearchArgs) -> str:
        return self.store.search(args.query)


def create_server(store: Optional[LogStore] = None) -> DevlogServer:
    """Create the tool server for a store (default: current directory)."""
    return DevlogServer(store or LogStore())


def create_mcp_server(server: DevlogServer) -> Any:
    """Wrap a DevlogServer in the official MCP SDK server.

    Returns the server instance, or None if mcp package is not installed.
    """
    try:
        import mcp.types as types
        from mcp.server.lowlevel import Server
    except ImportError:
        return None

    sdk_server = Server(server.name, version=server.version)

    @sdk_server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=t["name"], description=t["description"], inputSchema=t["inputSchema"])
            for t in server.get_tools()
        ]

    @sdk_server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        # the SDK reports raised exceptions as isError results
        result = await server.call_tool(name, arguments)
        text = result["content"][0]["text"]
        if result["isError"]:
            raise RuntimeError(text)
        return [types.TextContent(type="text", text=text)]

    return sdk_server


def run_mcp_server(server: DevlogServer) -> None:
    """Serve over stdio with the official MCP SDK."""
    sdk_server = create_mcp_server(server)
    if sdk_server is None:
        print("Error: MCP package not installed. Install with: pip install 'devlog[mcp]'", file=sys.stderr)
        sys.exit(1)

    import asyncio
    from mcp.server.stdio import stdio_server

    async def main():
        async with stdio_server() as (read_stream, write_stream):
            await sdk_server.run(
                read_stream, write_stream, sdk_server.create_initialization_options()
            )

    asyncio.run(main())
