"""devlog CLI entry point."""

import typer
from rich.console import Console

from devlog import __version__
from devlog.cli.log import path, search, tail, write
from devlog.cli.mcp_serve import mcp_serve

app = typer.Typer(
    name="devlog",
    help="Append-only development log for coding agents",
    no_args_is_help=True,
    invoke_without_command=True,
)

console = Console()

LOG_COMMANDS = (tail, write, search, path)


@app.callback()
def main(
    show_version: bool = typer.Option(
        False, "--version", "-V", help="Show version and exit"
    ),
) -> None:
    """devlog: append-only development log for coding agents."""
    if show_version:
        version()
        raise typer.Exit()


@app.command()
def version():
    """Show devlog version."""
    console.print(f"devlog {__version__}")


for command in LOG_COMMANDS:
    app.command()(command)
app.command(name="mcp-serve")(mcp_serve)


if __name__ == "__main__":
    app()
