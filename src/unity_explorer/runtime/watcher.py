# src/unity_explorer/runtime/watcher.py

"""
Watches discovered source and test files and signals autorun / reload.
"""

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.watcher")
# Groups the burst of events an editor produces for a single save.
DEBOUNCE_DELAY = 0.25


class _WatchedFileHandler(FileSystemEventHandler):
    """Forwards events for watched files from the observer thread to the loop."""

    def __init__(self, service: "FileWatchService"):
        self._service = service

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        paths = [event.src_path]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.append(dest_path)
        for raw_path in paths:
            self._service._on_path_changed(Path(str(raw_path)).resolve())


class FileWatchService:
    """
    Tracks two sets of files: changes to any watched file fire `on_autorun`;
    changes to reload files additionally fire `on_reload`. Both callbacks run on
    the event loop, debounced.

    Files are only ever added, mirroring how watches accumulate across reloads.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        on_autorun: Callable[[], None],
        on_reload: Callable[[], None],
    ):
        self._loop = loop
        self._on_autorun = on_autorun
        self._on_reload = on_reload
        self._autorun_files: set[Path] = set()
        self._reload_files: set[Path] = set()
        self._watched_dirs: set[Path] = set()
        self._observer: Observer | None = None
        self._handler = _WatchedFileHandler(self)
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    @property
    def watched_files(self) -> frozenset[Path]:
        return frozenset(self._autorun_files | self._reload_files)

    def start(self) -> None:
        if self._observer is not None:
            return
        self._observer = Observer()
        for directory in self._watched_dirs:
            self._observer.schedule(self._handler, str(directory), recursive=False)
        self._observer.start()
        log.info("File watching started", directories=len(self._watched_dirs), emoji_key="watch")

    def stop(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        if self._observer is None:
            return
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join()
        self._observer = None
        log.info("File watching stopped", emoji_key="watch")

    def watch_for_autorun(self, files: Iterable[Path]) -> None:
        self._add(files, self._autorun_files)

    def watch_for_reload(self, files: Iterable[Path]) -> None:
        self._add(files, self._reload_files)

    def _add(self, files: Iterable[Path], target: set[Path]) -> None:
        for file in files:
            path = Path(file).resolve()
            if path in target:
                continue
            target.add(path)
            directory = path.parent
            if directory not in self._watched_dirs:
                self._watched_dirs.add(directory)
                if self._observer is not None:
                    self._observer.schedule(self._handler, str(directory), recursive=False)
                log.debug("Watching directory", path=str(directory), emoji_key="watch")

    def _on_path_changed(self, path: Path) -> None:
        # Called from the watchdog thread.
        if path in self._autorun_files or path in self._reload_files:
            log.debug("Watched file changed", path=str(path), emoji_key="watch")
            self._loop.call_soon_threadsafe(self._debounce, "autorun", self._on_autorun)
        if path in self._reload_files:
            self._loop.call_soon_threadsafe(self._debounce, "reload", self._on_reload)

    def _debounce(self, key: str, callback: Callable[[], None]) -> None:
        if handle := self._timers.pop(key, None):
            handle.cancel()
        self._timers[key] = self._loop.call_later(DEBOUNCE_DELAY, self._fire, key, callback)

    def _fire(self, key: str, callback: Callable[[], None]) -> None:
        self._timers.pop(key, None)
        callback()

# 🔼⚙️
