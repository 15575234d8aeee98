# src/unity_explorer/cli/utils.py

import asyncio
import logging
from pathlib import Path
from typing import Any

import click
import structlog

from unity_explorer.config import DEFAULT_CONFIG_NAME, UnityExplorerConfig, default_config, load_config
from unity_explorer.exceptions import ConfigurationError
from unity_explorer.telemetry.logger import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging._nameToLevel.keys()), case_sensitive=False)


def logging_options(f):
    """Decorator to add logging options to any command."""
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        envvar="UNITY_EXPLORER_LOG_LEVEL",
        help="Set the logging level (overrides config file).",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="UNITY_EXPLORER_LOG_FILE",
        help="Path to write logs to a file (JSON format).",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="UNITY_EXPLORER_JSON_LOGS",
        help="Output console logs as JSON.",
    )(f)
    return f


def config_options(f):
    """Decorator adding the config file and workspace options."""
    f = click.option(
        "-c",
        "--config-path",
        type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
        default=None,
        envvar="UNITY_EXPLORER_CONF",
        show_envvar=True,
        help=f"Path to the configuration file (default: <workspace>/{DEFAULT_CONFIG_NAME}).",
    )(f)
    f = click.option(
        "-w",
        "--workspace",
        type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
        default=None,
        envvar="UNITY_EXPLORER_WORKSPACE",
        show_envvar=True,
        help="Workspace root that relative paths are resolved against (default: current directory).",
    )(f)
    return f


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    default_log_level: str = "WARNING",
) -> None:
    """
    Setup logging using context values, allowing local overrides.
    """
    log_level_str = local_log_level or ctx.obj.get("LOG_LEVEL") or default_log_level
    log_file_path = local_log_file or ctx.obj.get("LOG_FILE")
    use_json_logs = local_json_logs if local_json_logs is not None else ctx.obj.get("JSON_LOGS", False)

    numeric_level = logging.getLevelName(log_level_str.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
        log_level_str = "INFO"

    core_setup_logging(
        level=numeric_level,
        json_logs=use_json_logs,
        log_file=log_file_path,
    )

    log.debug(
        "CLI logging initialized via utils",
        level=log_level_str,
        file=log_file_path or "console",
        json=use_json_logs,
    )


def resolve_config(config_path: Path | None, workspace: Path | None) -> UnityExplorerConfig:
    """
    Loads the configuration for a command.

    An explicitly given config file must exist; the default one is optional and
    everything falls back to the workspace root when it is absent.
    """
    root = (workspace or Path.cwd()).resolve()
    if config_path is not None:
        return load_config(config_path, workspace)

    candidate = root / DEFAULT_CONFIG_NAME
    if candidate.is_file():
        return load_config(candidate, root)
    log.debug("No configuration file found, using defaults", workspace=str(root))
    return default_config(root)


def load_config_or_exit(ctx: click.Context, config_path: Path | None, workspace: Path | None) -> UnityExplorerConfig:
    ctx.ensure_object(dict)
    try:
        config = resolve_config(config_path, workspace)
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)

    # Config file log level applies unless a CLI/env level was given.
    if not ctx.obj.get("LOG_LEVEL") and config.config_file_path is not None:
        setup_logging_from_context(ctx, default_log_level=config.global_config.log_level)
    return config


def run_async(coro: Any) -> int:
    """
    Runs a command coroutine with asyncio.run() and maps the outcome to an exit code.
    """
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        log.warning("Shutdown initiated by KeyboardInterrupt (CTRL-C).")
        return 130  # Standard exit code for SIGINT
    finally:
        logging.shutdown()

# ⚙️🛠️
