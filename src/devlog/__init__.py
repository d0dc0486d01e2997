"""devlog: append-only development log for coding agents."""

__version__ = "0.1.0"
