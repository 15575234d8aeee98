# src/unity_explorer/config/models.py

"""
Attrs-based data models for unity-explorer configuration structure.
"""

import logging
from pathlib import Path
from typing import Any

from attrs import define, field


# --- Validators ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_identifier_fragment(inst: Any, attr: Any, value: str) -> None:
    """Validator for the test prefix: must be usable inside a C identifier."""
    if not value or not all(ch.isalnum() or ch == "_" for ch in value):
        raise ValueError(f"Field '{attr.name}' must be a non-empty C identifier fragment, got {value!r}")


def _validate_extension(inst: Any, attr: Any, value: str) -> None:
    if not value or value.startswith(".") or any(sep in value for sep in "/\\"):
        raise ValueError(f"Field '{attr.name}' must be a bare file extension like 'c', got {value!r}")


@define(frozen=True, slots=True)
class DebugProfile:
    """A named debugger launch profile, e.g. ``gdb {executable}``."""
    name: str = field()
    command: tuple[str, ...] = field(converter=tuple)
    cwd: Path | None = field(default=None)


@define(frozen=True, slots=True)
class ExplorerConfig:
    """
    Settings for discovering, building and running Unity tests in one workspace.

    All path fields are absolute once produced by the loader.
    """
    workspace: Path = field()
    project_source_path: Path = field()
    test_source_path: Path = field()
    test_build_path: Path = field()
    make_cwd_path: Path = field()

    pretty_test_label: bool = field(default=False)
    pretty_test_file_label: bool = field(default=False)
    test_build_command_args: str = field(default="")
    folders_command_args: str = field(default="")
    debug_configuration: str = field(default="")

    test_function_prefix: str = field(default="test_", validator=_validate_identifier_fragment)
    test_file_suffix: str = field(default="_test")
    source_extension: str = field(default="c", validator=_validate_extension)
    header_extension: str = field(default="h", validator=_validate_extension)
    build_tool: str = field(default="make")
    report_unmatched_tests: bool = field(default=False)

    @classmethod
    def for_workspace(cls, workspace: Path, **overrides: Any) -> "ExplorerConfig":
        """Builds a config with every path defaulting to the workspace root."""
        workspace = workspace.resolve()
        paths = {
            "project_source_path": workspace,
            "test_source_path": workspace,
            "test_build_path": workspace,
            "make_cwd_path": workspace,
        }
        paths.update(overrides)
        return cls(workspace=workspace, **paths)


@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings for unity-explorer."""
    log_level: str = field(default="INFO", validator=_validate_log_level)


@define(frozen=True, slots=True)
class UnityExplorerConfig:
    """Root configuration object for the unity-explorer application."""
    explorer: ExplorerConfig = field()
    debug_profiles: dict[str, DebugProfile] = field(factory=dict, metadata={"toml_name": "debug"})
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})
    config_file_path: Path | None = field(default=None)


# 🔼⚙️
