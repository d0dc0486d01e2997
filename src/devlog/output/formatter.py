"""LLM-friendly output formatting."""

from typing import Optional


def format_bytes(size: int) -> str:
    """Format byte size for display."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def format_error(
    error_type: str,
    error_msg: str,
    suggestion: Optional[str] = None,
) -> str:
    """Format an error with an optional hint for the caller."""

    lines = [f"Error: {error_type}: {error_msg}"]

    if suggestion:
        lines.append("")
        lines.append(f"Suggestion: {suggestion}")

    return "\n".join(lines)


def format_log_info(info: dict) -> str:
    """Format a log file summary."""
    return "\n".join([
        f"Path: {info['path']}",
        f"Size: {format_bytes(info['size_bytes'])}",
        f"Lines: {info['lines']} ({info['entries']} entries)",
    ])
