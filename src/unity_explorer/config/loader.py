# src/unity_explorer/config/loader.py

"""
Loads unity-explorer configuration from a TOML file into attrs models.
"""

import re
import tomllib
from pathlib import Path
from typing import Any, TypeAlias

import attrs
import structlog

from unity_explorer.config.models import (
    DebugProfile,
    ExplorerConfig,
    GlobalConfig,
    UnityExplorerConfig,
)
from unity_explorer.exceptions import ConfigurationError
from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("config.loader")

DEFAULT_CONFIG_NAME = "unity-explorer.toml"

_PATH_KEYS = ("project_source_path", "test_source_path", "test_build_path", "make_cwd_path")
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

TomlTable: TypeAlias = dict[str, Any]


def _to_snake(key: str) -> str:
    """Maps editor-style ``prettyTestLabel`` keys onto ``pretty_test_label``."""
    return _CAMEL_RE.sub("_", key).lower()


def _build_explorer_config(raw: TomlTable, workspace: Path, config_path: Path | None) -> ExplorerConfig:
    known = {a.name for a in attrs.fields(ExplorerConfig)} - {"workspace"}
    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = _to_snake(key)
        if name not in known:
            raise ConfigurationError(f"Unknown explorer option '{key}'", config_path)
        values[name] = value

    for name in _PATH_KEYS:
        relative = values.get(name, ".")
        if not isinstance(relative, str):
            raise ConfigurationError(f"Option '{name}' must be a path string", config_path)
        values[name] = (workspace / relative).resolve()

    try:
        return ExplorerConfig(workspace=workspace, **values)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid explorer options: {e}", config_path) from e


def _build_debug_profiles(raw: TomlTable, workspace: Path, config_path: Path | None) -> dict[str, DebugProfile]:
    profiles: dict[str, DebugProfile] = {}
    for name, table in raw.items():
        if not isinstance(table, dict) or "command" not in table:
            raise ConfigurationError(f"Debug profile '{name}' needs a 'command' list", config_path)
        command = table["command"]
        if isinstance(command, str) or not all(isinstance(part, str) for part in command):
            raise ConfigurationError(f"Debug profile '{name}' command must be a list of strings", config_path)
        cwd = table.get("cwd")
        profiles[name] = DebugProfile(
            name=name,
            command=command,
            cwd=(workspace / cwd).resolve() if cwd else None,
        )
    return profiles


def parse_config(data: TomlTable, workspace: Path, config_path: Path | None = None) -> UnityExplorerConfig:
    """Converts already-parsed TOML data into a validated config object."""
    workspace = workspace.resolve()
    explorer_raw = data.get("explorer", {})
    if not isinstance(explorer_raw, dict):
        raise ConfigurationError("[explorer] must be a table", config_path)

    global_raw = data.get("global", {})
    try:
        global_config = GlobalConfig(**global_raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid [global] options: {e}", config_path) from e

    return UnityExplorerConfig(
        explorer=_build_explorer_config(explorer_raw, workspace, config_path),
        debug_profiles=_build_debug_profiles(data.get("debug", {}), workspace, config_path),
        global_config=global_config,
        config_file_path=config_path,
    )


def load_config(config_path: Path, workspace: Path | None = None) -> UnityExplorerConfig:
    """
    Loads and validates a TOML configuration file.

    Relative paths are resolved against `workspace`, which defaults to the
    directory holding the config file.
    """
    load_log = log.bind(config_path=str(config_path), emoji_key="load")
    load_log.debug("Loading configuration")
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError("Configuration file not found", config_path) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML: {e}", config_path) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration: {e}", config_path) from e

    effective_workspace = workspace if workspace is not None else config_path.resolve().parent
    config = parse_config(data, effective_workspace, config_path)
    load_log.info("Configuration loaded", workspace=str(config.explorer.workspace))
    return config


def default_config(workspace: Path) -> UnityExplorerConfig:
    """Configuration used when no config file exists: everything rooted at the workspace."""
    return UnityExplorerConfig(explorer=ExplorerConfig.for_workspace(workspace))

# 🔼⚙️
