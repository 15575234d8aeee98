# src/unity_explorer/cli/watch_cmds.py
#
"""
Long-running mode: keep the suite tree current and rerun tests on change.
"""

import asyncio
from pathlib import Path

import click
import structlog
from rich.console import Console

from unity_explorer.cli.test_cmds import create_explorer, render_results, render_tree
from unity_explorer.cli.utils import config_options, load_config_or_exit, resolve_config, run_async
from unity_explorer.config import UnityExplorerConfig
from unity_explorer.exceptions import ConfigurationError
from unity_explorer.models import ROOT_ID
from unity_explorer.runtime.events import LoadEvent, LoadFinished
from unity_explorer.runtime.orchestrator import UnityExplorer
from unity_explorer.runtime.watcher import FileWatchService
from unity_explorer.state import RunTracker
from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.watch")


class WatchSession:
    """Reruns every suite on autorun signals; at most one run plus one queued rerun."""

    def __init__(
        self,
        explorer: UnityExplorer,
        console: Console,
        config_path: Path | None,
        workspace: Path | None,
        run_on_start: bool = True,
    ):
        self.explorer = explorer
        self.console = console
        self.config_path = config_path
        self.workspace = workspace
        self.run_on_start = run_on_start
        self.tracker = RunTracker()
        self._rerun_requested = False
        self._run_task: asyncio.Task | None = None
        self._config_watcher: FileWatchService | None = None
        self._tasks: set[asyncio.Task] = set()

        explorer.tests.subscribe(self._on_load)
        explorer.test_states.subscribe(self.tracker)
        explorer.autorun.subscribe(self._on_autorun)

    def _on_load(self, event: LoadEvent) -> None:
        if isinstance(event, LoadFinished) and event.suite is not None:
            self.tracker.reset(event.suite)
            self.console.print(render_tree(event.suite))

    def _on_autorun(self, _event: None) -> None:
        self.request_run()

    def request_run(self) -> None:
        if self._run_task is not None and not self._run_task.done():
            self._rerun_requested = True
            return
        self._run_task = asyncio.create_task(self._run_loop())

    async def _run_loop(self) -> None:
        while True:
            self._rerun_requested = False
            await self.explorer.run([ROOT_ID])
            self.console.print(render_results(self.tracker))
            if not self._rerun_requested:
                return

    def watch_config(self, config_file: Path) -> None:
        self._config_watcher = FileWatchService(
            asyncio.get_running_loop(),
            on_autorun=lambda: None,
            on_reload=self._schedule_config_reload,
        )
        self._config_watcher.watch_for_reload([config_file])
        self._config_watcher.start()

    def _schedule_config_reload(self) -> None:
        task = asyncio.create_task(self.reload_config())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def reload_config(self) -> bool:
        log.info("Configuration file changed, reloading")
        try:
            config = await asyncio.to_thread(resolve_config, self.config_path, self.workspace)
        except ConfigurationError as e:
            log.error("Failed to reload configuration", error=str(e))
            self.explorer.notifier.show_error(f"Config reload failed: {e}")
            return False
        await self.explorer.apply_config(config.explorer)
        return True

    async def run(self, shutdown_event: asyncio.Event) -> int:
        await self.explorer.load()
        if self.run_on_start:
            self.request_run()
        try:
            await shutdown_event.wait()
        finally:
            log.info("Watch session shutting down")
            if self._run_task is not None and not self._run_task.done():
                self.explorer.cancel()
                self._run_task.cancel()
            if self._config_watcher is not None:
                self._config_watcher.stop()
            self.explorer.dispose()
        return 0


async def _watch(config: UnityExplorerConfig, config_path: Path | None, workspace: Path | None, run_on_start: bool) -> int:
    explorer = create_explorer(config, watch_files=True)
    session = WatchSession(explorer, Console(), config_path, workspace, run_on_start=run_on_start)
    if config.config_file_path is not None:
        session.watch_config(config.config_file_path)
    return await session.run(asyncio.Event())


@click.command(name="watch")
@config_options
@click.option("--no-initial-run", is_flag=True, help="Only run tests after the first change.")
@click.pass_context
def watch_cli(ctx: click.Context, config_path: Path | None, workspace: Path | None, no_initial_run: bool):
    """Watch sources and tests, rerunning all suites whenever they change."""
    config = load_config_or_exit(ctx, config_path, workspace)
    log.info("Starting watch mode", workspace=str(config.explorer.workspace))
    ctx.exit(run_async(_watch(config, config_path, workspace, not no_initial_run)))

# 🔼⚙️
