# src/unity_explorer/runtime/orchestrator.py

"""
High-level coordinator for one workspace: loads the suite tree and drives
build -> execute -> parse -> report for requested suites and tests.
"""

import asyncio
import os
from collections.abc import Sequence
from pathlib import Path

import structlog

from unity_explorer.config.models import ExplorerConfig
from unity_explorer.debug import DebugLauncher, DebugSession
from unity_explorer.discovery import (
    LabelFormatter,
    RegexTestExtractor,
    TestExtractor,
    build_suite_tree,
    scan_files,
    source_file_pattern,
    suite_file_pattern,
)
from unity_explorer.exceptions import DiscoveryError
from unity_explorer.models import ROOT_ID, RootSuite, SuiteNode, TestCase
from unity_explorer.telemetry import StructLogger

from .events import (
    Decoration,
    EventEmitter,
    LoadEvent,
    LoadFinished,
    LoadStarted,
    RunEvent,
    RunFinished,
    RunStarted,
    SuiteEvent,
    SuiteState,
    TestEvent,
    TestState,
)
from .notifier import UserNotifier
from .process import ProcessCoordinator, RunResult
from .result_parser import Failed, Passed, check_result
from .watcher import FileWatchService

log: StructLogger = structlog.get_logger("runtime.orchestrator")

EXECUTABLE_EXTENSION = ".exe"


class UnityExplorer:
    """
    Owns the current suite tree of a workspace and runs its tests.

    Hosts subscribe to `tests` (load events), `test_states` (run events) and
    `autorun` (fired when a watched source or test file changes).
    """

    def __init__(
        self,
        config: ExplorerConfig,
        *,
        notifier: UserNotifier | None = None,
        coordinator: ProcessCoordinator | None = None,
        extractor: TestExtractor | None = None,
        debug_launcher: DebugLauncher | None = None,
        watch_files: bool = False,
    ):
        self.notifier = notifier or UserNotifier()
        self.coordinator = coordinator or ProcessCoordinator(config.make_cwd_path, config.build_tool)
        self.debug_launcher = debug_launcher
        self.watch_files = watch_files
        self.watcher: FileWatchService | None = None

        self.tests: EventEmitter[LoadEvent] = EventEmitter("tests")
        self.test_states: EventEmitter[RunEvent] = EventEmitter("test_states")
        self.autorun: EventEmitter[None] = EventEmitter("autorun")

        self.suite = RootSuite()
        self._custom_extractor = extractor
        self._configure(config)

        self._load_lock = asyncio.Lock()
        self._load_requests = 0
        self._load_served = 0
        self._reload_tasks: set[asyncio.Task] = set()
        log.debug("UnityExplorer initialized", workspace=str(config.workspace))

    def _configure(self, config: ExplorerConfig) -> None:
        self.config = config
        self.extractor = self._custom_extractor or RegexTestExtractor(config.test_function_prefix)
        self.labels = LabelFormatter(
            workspace=config.workspace,
            pretty_test_label=config.pretty_test_label,
            pretty_test_file_label=config.pretty_test_file_label,
            test_function_prefix=config.test_function_prefix,
            test_file_suffix=config.test_file_suffix,
            source_extension=config.source_extension,
        )
        self.source_pattern = source_file_pattern(config.source_extension, config.header_extension)
        self.test_pattern = suite_file_pattern(config.test_file_suffix, config.source_extension)
        self.coordinator.make_cwd = config.make_cwd_path
        self.coordinator.build_tool = config.build_tool

    async def apply_config(self, config: ExplorerConfig) -> None:
        """Swaps in new settings and reloads the suite tree."""
        log.info("Applying new configuration", workspace=str(config.workspace))
        self._configure(config)
        await self.load()

    # --- Loading ---
    async def load(self) -> None:
        """
        Rebuilds the suite tree from disk.

        Only one load runs at a time. Requests that arrive while a load is in
        flight coalesce into a single trailing load, which all of them await.
        """
        self._load_requests += 1
        ticket = self._load_requests
        async with self._load_lock:
            if self._load_served >= ticket:
                log.debug("Load request coalesced into a newer load", ticket=ticket)
                return
            covers = self._load_requests
            try:
                await self._load_once()
            finally:
                self._load_served = covers

    async def _load_once(self) -> None:
        self.tests.fire(LoadStarted())
        config = self.config
        load_log = log.bind(workspace=str(config.workspace), emoji_key="load")
        load_log.info("Loading tests")

        source_files, test_files = await asyncio.gather(
            scan_files(config.project_source_path, self.source_pattern, self.notifier),
            scan_files(config.test_source_path, self.test_pattern, self.notifier),
        )

        if self.watch_files:
            watcher = self._ensure_watcher()
            watcher.watch_for_autorun(source_files)
            watcher.watch_for_autorun(test_files)
            watcher.watch_for_reload(test_files)

        try:
            suite = await build_suite_tree(test_files, extractor=self.extractor, labels=self.labels)
        except DiscoveryError as e:
            load_log.error("Failed to load tests", error=str(e))
            self.notifier.show_error(f"Cannot load tests: {e}")
            self.tests.fire(LoadFinished(suite=None, error_message=str(e)))
            return

        self.suite = suite
        load_log.info("Tests loaded", suites=len(suite.children), tests=suite.test_count)
        self.tests.fire(LoadFinished(suite=suite))

    def _ensure_watcher(self) -> FileWatchService:
        if self.watcher is None:
            self.watcher = FileWatchService(
                asyncio.get_running_loop(),
                on_autorun=self._on_autorun,
                on_reload=self._schedule_reload,
            )
            self.watcher.start()
        return self.watcher

    def _on_autorun(self) -> None:
        log.debug("Autorun signalled")
        self.autorun.fire(None)

    def _schedule_reload(self) -> None:
        log.info("Test file changed, reloading")
        task = asyncio.create_task(self.load())
        self._reload_tasks.add(task)
        task.add_done_callback(self._reload_tasks.discard)

    # --- Running ---
    async def run(self, tests: Sequence[str]) -> None:
        """Builds and runs the suites behind `tests`, which may be suite or test ids."""
        tests = list(tests)
        self.test_states.fire(RunStarted(tests=tests))
        log.info("Run started", tests=tests)

        await self._prepare_folders()

        if tests and tests[0] == ROOT_ID:
            for suite in self.suite.children:
                await self._run_ids([suite.id])
        else:
            await self._run_ids(tests)

        self.test_states.fire(RunFinished())
        log.info("Run finished")

    async def _prepare_folders(self) -> None:
        if not self.config.folders_command_args:
            return
        result = await self.coordinator.run_build(self.config.folders_command_args)
        if result.failed:
            self.notifier.show_error(
                "Cannot run make target to create folders needed for output. "
                "Please check foldersCommandArgs in settings.",
                error=result.error,
            )

    async def _run_ids(self, ids: Sequence[str]) -> None:
        for node_id in ids:
            suite = self.suite.find_suite(node_id)
            if suite is None:
                self.notifier.show_warning(f"No test or suite with id {node_id} is loaded; skipping it.")
                continue

            result = await self._run_suite(suite)

            if result.failed and not result.stdout:
                for child in suite.children:
                    self.test_states.fire(TestEvent(test=child.id, state=TestState.FAILED, message=result.error))
                self.notifier.show_error(f"Cannot run test executable for {node_id} .", error=result.error)
                continue

            if node_id == suite.id:
                targets = list(suite.children)
            else:
                node = self.suite.find_node(node_id)
                targets = [node] if isinstance(node, TestCase) else []

            for test in targets:
                self._check_test(test, result.stdout)

    async def _run_suite(self, suite: SuiteNode) -> RunResult:
        self.test_states.fire(SuiteEvent(suite=suite.id, state=SuiteState.RUNNING))
        suite_log = log.bind(suite_id=suite.id)

        result = await self.build_suite(suite)
        if result.failed:
            suite_log.warning("Build failed", error=result.error, emoji_key="build")
            self.notifier.show_error(f"Cannot build test executable. Make error:\n{result.error}")
        else:
            executable = self.executable_path(suite)
            suite_log.info("Running test executable", executable=str(executable), emoji_key="execute")
            result = await self.coordinator.run_executable(executable)

        self.test_states.fire(SuiteEvent(suite=suite.id, state=SuiteState.COMPLETED))
        return result

    def _check_test(self, test: TestCase, output: str) -> None:
        self.test_states.fire(TestEvent(test=test.id, state=TestState.RUNNING))
        outcome = check_result(test.label, output)

        if isinstance(outcome, Passed):
            log.debug("Test passed", test_id=test.id, emoji_key="pass")
            self.test_states.fire(TestEvent(test=test.id, state=TestState.PASSED))
        elif isinstance(outcome, Failed):
            log.info("Test failed", test_id=test.id, line=outcome.line + 1, emoji_key="fail")
            self.test_states.fire(
                TestEvent(
                    test=test.id,
                    state=TestState.FAILED,
                    message=outcome.message,
                    decorations=[Decoration(line=outcome.line, message=outcome.message)],
                )
            )
        elif self.config.report_unmatched_tests:
            self.test_states.fire(
                TestEvent(test=test.id, state=TestState.UNKNOWN, message="No result line found in runner output")
            )
        else:
            log.debug("No result line found for test", test_id=test.id, label=test.label)

    # --- Build helpers ---
    def executable_path(self, suite: SuiteNode) -> Path:
        """``<testBuildPath>/<source stem>.exe``, whatever the host OS."""
        return self.config.test_build_path / (suite.file.stem + EXECUTABLE_EXTENSION)

    def build_target(self, suite: SuiteNode) -> str:
        """The executable path as the build tool sees it from its working directory."""
        target = os.path.relpath(self.executable_path(suite), self.coordinator.make_cwd)
        return target.replace("\\", "/")

    async def build_suite(self, suite: SuiteNode) -> RunResult:
        args = f"{self.config.test_build_command_args} {self.build_target(suite)}".strip()
        return await self.coordinator.run_build(args)

    # --- Debugging ---
    async def debug(self, tests: Sequence[str]) -> bool:
        """Builds the suite of the first requested id and starts a debugger on it."""
        configuration = self.config.debug_configuration
        if not configuration:
            self.notifier.show_error(
                "No debug configuration specified. In settings, set debugConfiguration."
            )
            return False
        if self.debug_launcher is None:
            self.notifier.show_error("No debugger launcher is available.")
            return False

        await self._prepare_folders()

        suite = self.suite.find_suite(tests[0]) if tests else None
        if suite is None:
            self.notifier.show_error(f"Cannot find a test suite for {list(tests)}.")
            return False

        result = await self.build_suite(suite)
        if result.failed:
            self.notifier.show_error(f"Cannot build test executable. Make error:\n{result.error}")
            return False

        session = DebugSession(
            workspace=self.config.workspace,
            configuration=configuration,
            executable=self.executable_path(suite),
        )
        log.info("Starting debugger", suite_id=suite.id, executable=str(session.executable), emoji_key="debug")
        if not await self.debug_launcher.start_debugging(session):
            self.notifier.show_error("Debugger could not be started.")
            return False
        return True

    # --- Lifecycle ---
    def cancel(self) -> None:
        """Kills in-flight build and test processes. Emits no events."""
        log.warning("Cancelling active processes")
        self.coordinator.cancel_all()

    def dispose(self) -> None:
        self.cancel()
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None
        for task in list(self._reload_tasks):
            task.cancel()
        self.tests.clear()
        self.test_states.clear()
        self.autorun.clear()

# 🔼⚙️
