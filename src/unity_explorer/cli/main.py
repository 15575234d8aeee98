# src/unity_explorer/cli/main.py

"""
Main CLI entry point for unity-explorer using Click.
Handles global options like logging level.
"""

from importlib.metadata import PackageNotFoundError, version

import click
import structlog

from unity_explorer.cli.config_cmds import config_cli
from unity_explorer.cli.test_cmds import debug_cli, list_cli, run_cli
from unity_explorer.cli.utils import logging_options, setup_logging_from_context
from unity_explorer.cli.watch_cmds import watch_cli
from unity_explorer.telemetry import StructLogger

try:
    __version__ = version("unity-explorer")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

log: StructLogger = structlog.get_logger("cli.main")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="unity-explorer")
@logging_options
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
):
    """
    Unity Explorer: discover, build and run Unity C unit tests.

    Test functions named `void test_*(...)` are found in `*_test.c` files, built
    with make and run; their Unity output is turned into pass/fail results.
    """
    ctx.ensure_object(dict)

    ctx.obj["LOG_LEVEL"] = log_level
    ctx.obj["LOG_FILE"] = log_file
    ctx.obj["JSON_LOGS"] = json_logs if json_logs is not None else False

    setup_logging_from_context(ctx, default_log_level="WARNING")
    log.debug(
        "Main CLI group initialized",
        log_level=log_level,
        log_file=log_file,
        json_logs=json_logs,
    )


cli.add_command(config_cli)
cli.add_command(list_cli)
cli.add_command(run_cli)
cli.add_command(debug_cli)
cli.add_command(watch_cli)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
