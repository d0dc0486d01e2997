"""Log commands: tail, write, search, path."""

import json
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from devlog.output.console import configure_logging
from devlog.output.formatter import format_log_info
from devlog.store.config import ConfigError, load_config
from devlog.store.logstore import LogStore, LogStoreError

console = Console()
err_console = Console(stderr=True)

LogFileOption = typer.Option(
    None, "--log-file", "-l", envvar="DEVLOG_FILE", help="Path to the log file"
)
LayoutOption = typer.Option(
    None, "--layout", help="Log location: auto, nested, inline"
)
ProjectFolderOption = typer.Option(
    None, "--project-folder", help="Folder that holds the log"
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show debug output")


def open_store(
    log_file: Optional[str] = None,
    layout: Optional[str] = None,
    project_folder: Optional[str] = None,
    verbose: bool = False,
) -> LogStore:
    """Build the LogStore for the current directory and make sure the log exists."""
    configure_logging(verbose)
    try:
        config = load_config(log_file=log_file, layout=layout, project_folder=project_folder)
        store = LogStore(config=config)
        store.ensure_exists()
    except (ConfigError, LogStoreError) as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    return store


def _print_lines(text: str) -> None:
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def tail(
    lines: int = typer.Option(20, "--lines", "-n", min=1, max=1000, help="Number of lines to show"),
    log_file: Optional[str] = LogFileOption,
    layout: Optional[str] = LayoutOption,
    project_folder: Optional[str] = ProjectFolderOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show the last lines of the development log."""
    store = open_store(log_file, layout, project_folder, verbose)
    try:
        _print_lines(store.tail(lines))
    except LogStoreError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)


def write(
    text: str = typer.Argument(..., help="Entry text"),
    log_file: Optional[str] = LogFileOption,
    layout: Optional[str] = LayoutOption,
    project_folder: Optional[str] = ProjectFolderOption,
    verbose: bool = VerboseOption,
) -> None:
    """Append a timestamped entry to the development log."""
    store = open_store(log_file, layout, project_folder, verbose)
    try:
        store.append(text)
    except LogStoreError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Logged:[/green] {escape(text)}", highlight=False)


def search(
    query: str = typer.Argument(..., help="Text to look for (case-insensitive)"),
    log_file: Optional[str] = LogFileOption,
    layout: Optional[str] = LayoutOption,
    project_folder: Optional[str] = ProjectFolderOption,
    verbose: bool = VerboseOption,
) -> None:
    """Search the development log for matching lines."""
    store = open_store(log_file, layout, project_folder, verbose)
    try:
        _print_lines(store.search(query))
    except LogStoreError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)


def path(
    log_file: Optional[str] = LogFileOption,
    layout: Optional[str] = LayoutOption,
    project_folder: Optional[str] = ProjectFolderOption,
    format_output: str = typer.Option("text", "--format", "-f", help="Output format: text, json"),
    verbose: bool = VerboseOption,
) -> None:
    """Show where the development log lives."""
    store = open_store(log_file, layout, project_folder, verbose)
    try:
        info = store.info().to_dict()
    except LogStoreError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if format_output == "json":
        _print_lines(json.dumps(info, indent=2))
        return

    _print_lines(format_log_info(info))
