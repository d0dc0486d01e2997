"""Append-only development log (DEVLOG.md)."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import cached_property
from pathlib import Path
from typing import Callable, Optional

from devlog.store.config import DevlogConfig

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
NO_MATCHES = "No matches found"

HEADER_TITLE = "# Development Log"
HEADER_DESCRIPTION = "Timestamped notes on development progress, decisions and fixes."
BOOTSTRAP_TEXT = "Development log created"


class LogStoreError(Exception):
    """Base error for log store operations."""


class InvalidInputError(LogStoreError):
    """An argument was missing or malformed. Raised before any file access."""


class UnknownToolError(InvalidInputError):
    """A tool name that the server does not expose."""


class LogNotFoundError(LogStoreError):
    """The log file could not be read."""


class LogWriteError(LogStoreError):
    """The log file could not be created or appended to."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format a moment as a UTC, second-precision entry timestamp."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def format_entry(text: str, moment: datetime) -> str:
    return f"[{format_timestamp(moment)}] {text}"


def resolve_path(cwd: Path, config: Optional[DevlogConfig] = None) -> Path:
    """Work out where the log file lives.

    An explicit ``log_file`` always wins. Otherwise ``layout`` picks the
    directory: ``nested`` puts the log in ``cwd/<project_folder>``, ``inline``
    puts it in ``cwd`` itself, and ``auto`` uses ``cwd`` only when the
    directory is already named after the project folder.
    """
    config = config or DevlogConfig()
    cwd = Path(cwd)

    if config.log_file:
        path = Path(config.log_file).expanduser()
        return path if path.is_absolute() else cwd / path

    if config.layout == "inline":
        directory = cwd
    elif config.layout == "nested":
        directory = cwd / config.project_folder
    elif cwd.name == config.project_folder:
        directory = cwd
    else:
        directory = cwd / config.project_folder

    return directory / config.file_name


def ensure_exists(path: Path, now: Callable[[], datetime] = utc_now) -> Path:
    """Create the log with its header and bootstrap entry if it is missing."""
    path = Path(path)
    if path.exists():
        return path

    header = "\n".join([
        HEADER_TITLE,
        "",
        HEADER_DESCRIPTION,
        "",
        format_entry(BOOTSTRAP_TEXT, now()),
    ])

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LogWriteError(f"Cannot create log directory {path.parent}: {e}") from e

    try:
        # "x" so a file that appeared in the meantime is never overwritten
        with open(path, "x", encoding="utf-8") as f:
            f.write(header)
    except FileExistsError:
        return path
    except OSError as e:
        raise LogWriteError(f"Cannot create log file {path}: {e}") from e

    logger.info("Created development log at %s", path)
    return path


def _read_lines(path: Path) -> list[str]:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LogNotFoundError(f"Cannot read log file {path}: {e}") from e
    return content.split("\n")


def tail(path: Path, n: int = 20) -> str:
    """Return the last ``n`` lines of the log, oldest first."""
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise InvalidInputError(f"lines must be a positive integer, got {n!r}")

    lines = _read_lines(path)
    logger.debug("Read %d lines from %s", len(lines), path)
    return "\n".join(lines[-n:])


def append(path: Path, text: str, now: Callable[[], datetime] = utc_now) -> None:
    """Append one timestamped entry to the log."""
    if not isinstance(text, str) or not text:
        raise InvalidInputError("text must be a non-empty string")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidInputError(f"text is not valid UTF-8: {e.reason}") from e

    entry = "\n" + format_entry(text, now())
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(entry)
    except OSError as e:
        raise LogWriteError(f"Cannot write to log file {path}: {e}") from e

    logger.debug("Appended %d characters to %s", len(entry), path)


def search(path: Path, query: str) -> str:
    """Return the lines containing ``query``, ignoring case."""
    if not isinstance(query, str) or not query:
        raise InvalidInputError("query must be a non-empty string")

    needle = query.lower()
    matches = [line for line in _read_lines(path) if needle in line.lower()]
    if not matches:
        return NO_MATCHES
    return "\n".join(matches)


@dataclass
class LogInfo:
    """Summary of the log file on disk."""
    path: Path
    size_bytes: int
    lines: int
    entries: int

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "size_bytes": self.size_bytes,
            "lines": self.lines,
            "entries": self.entries,
        }


class LogStore:
    """The development log for one working directory.

    The path is resolved on first use and kept for the lifetime of the
    store. One process is assumed to be the only writer.
    """

    def __init__(
        self,
        project_dir: str = ".",
        config: Optional[DevlogConfig] = None,
        now: Callable[[], datetime] = utc_now,
    ):
        self.project_dir = Path(project_dir)
        self.config = config or DevlogConfig()
        self._now = now

    @cached_property
    def path(self) -> Path:
        return resolve_path(self.project_dir.resolve(), self.config)

    def ensure_exists(self) -> Path:
        return ensure_exists(self.path, now=self._now)

    def tail(self, n: int = 20) -> str:
        return tail(self.path, n)

    def append(self, text: str) -> None:
        append(self.path, text, now=self._now)

    def search(self, query: str) -> str:
        return search(self.path, query)

    def info(self) -> LogInfo:
        """Size and line counts of the log file."""
        lines = _read_lines(self.path)
        return LogInfo(
            path=self.path,
            size_bytes=self.path.stat().st_size,
            lines=len(lines),
            entries=sum(1 for line in lines if line.startswith("[")),
        )
