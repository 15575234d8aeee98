# src/unity_explorer/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from unity_explorer.cli.utils import config_options, load_config_or_exit
from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting and validating configuration."""
    pass


@config_cli.command(name="show")
@config_options
@click.pass_context
def show_config(ctx: click.Context, config_path: Path | None, workspace: Path | None):
    """Load, validate, and display the configuration."""
    log.info("Executing 'config show' command", config_path=str(config_path))
    config = load_config_or_exit(ctx, config_path, workspace)

    click.echo(pretty_repr(config, expand_all=True))

    if not config.explorer.debug_configuration:
        log.info("Debugging disabled: no debugConfiguration set.")
    elif config.explorer.debug_configuration not in config.debug_profiles:
        log.warning(
            "debugConfiguration names a profile that is not defined",
            profile=config.explorer.debug_configuration,
        )

# 🔼⚙️
