"""Log location settings (.devlog.yaml, DEVLOG_* environment variables)."""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

import yaml

CONFIG_FILE_NAME = ".devlog.yaml"
LAYOUTS = ("auto", "nested", "inline")

ENV_VARS = {
    "DEVLOG_FILE": "log_file",
    "DEVLOG_PROJECT_FOLDER": "project_folder",
    "DEVLOG_LAYOUT": "layout",
}


class ConfigError(Exception):
    """Invalid configuration file or value."""


@dataclass(frozen=True)
class DevlogConfig:
    """Where the development log lives.

    log_file: explicit path to the log; overrides everything else.
    project_folder: folder the log is kept in when not given explicitly.
    file_name: name of the log file inside that folder.
    layout: "auto" (use the working directory when it is already named
        project_folder), "nested" (always in project_folder) or "inline"
        (always in the working directory).
    """
    log_file: Optional[str] = None
    project_folder: str = "devlog"
    file_name: str = "DEVLOG.md"
    layout: str = "auto"

    def __post_init__(self):
        if self.layout not in LAYOUTS:
            raise ConfigError(
                f"Unknown layout {self.layout!r}, expected one of: {', '.join(LAYOUTS)}"
            )
        for name in ("project_folder", "file_name"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"{name} must be a non-empty string")
            if Path(value).name != value:
                raise ConfigError(f"{name} must be a plain name, got {value!r}")
        if self.log_file is not None and not isinstance(self.log_file, str):
            raise ConfigError("log_file must be a string")

    def merge(self, **overrides) -> "DevlogConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return replace(self, **changes)


def read_config_file(path: Path) -> dict:
    """Read a YAML config file. A missing file is an empty config."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict) or not all(isinstance(k, str) for k in data):
        raise ConfigError(f"{path} must contain a mapping of setting names")
    return data


def load_config(
    project_dir: str = ".",
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> DevlogConfig:
    """Build the config from defaults, .devlog.yaml, environment and overrides.

    Later sources win; overrides set to None are ignored.
    """
    environ = os.environ if environ is None else environ

    config = DevlogConfig().merge(**read_config_file(Path(project_dir) / CONFIG_FILE_NAME))

    env_values = {key: environ.get(var) or None for var, key in ENV_VARS.items()}
    config = config.merge(**env_values)

    return config.merge(**overrides)
