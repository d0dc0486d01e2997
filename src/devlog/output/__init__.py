"""Output formatting package."""

from .formatter import (
    format_bytes,
    format_error,
    format_log_info,
)

__all__ = [
    "format_bytes",
    "format_error",
    "format_log_info",
]
