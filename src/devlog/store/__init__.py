"""Development log storage package."""

from .config import ConfigError, DevlogConfig, load_config
from .logstore import (
    NO_MATCHES,
    InvalidInputError,
    LogInfo,
    LogNotFoundError,
    LogStore,
    LogStoreError,
    LogWriteError,
    UnknownToolError,
)

__all__ = [
    "ConfigError",
    "DevlogConfig",
    "load_config",
    "NO_MATCHES",
    "InvalidInputError",
    "LogInfo",
    "LogNotFoundError",
    "LogStore",
    "LogStoreError",
    "LogWriteError",
    "UnknownToolError",
]
