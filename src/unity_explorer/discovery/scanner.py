# src/unity_explorer/discovery/scanner.py

"""
Recursive, asynchronous enumeration of source and test files.
"""

import asyncio
import os
import re
from pathlib import Path

import structlog

from unity_explorer.runtime.notifier import UserNotifier
from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("discovery.scanner")


def source_file_pattern(source_extension: str = "c", header_extension: str = "h") -> re.Pattern[str]:
    """Matches C sources and headers, the files that trigger an autorun when changed."""
    extensions = "|".join(re.escape(ext) for ext in (header_extension, source_extension))
    return re.compile(rf".*\.(?:{extensions})$")


def suite_file_pattern(test_file_suffix: str = "_test", source_extension: str = "c") -> re.Pattern[str]:
    """Matches test sources such as ``math_test.c``."""
    return re.compile(rf".*{re.escape(test_file_suffix)}\.{re.escape(source_extension)}$")


def _list_directory(directory: Path) -> list[tuple[str, bool, Path | None]]:
    """
    Returns ``(name, is_file, real_dir)`` for each entry, sorted by name.

    Symlinks are followed; `real_dir` is the resolved path of a directory entry
    and None for anything else.
    """
    with os.scandir(directory) as it:
        entries = [
            (entry.name, entry.is_file(), Path(os.path.realpath(entry.path)) if entry.is_dir() else None)
            for entry in it
        ]
    entries.sort(key=lambda entry: entry[0])
    return entries


async def scan_files(
    root: Path,
    name_pattern: re.Pattern[str],
    notifier: UserNotifier | None = None,
) -> list[Path]:
    """
    Recursively collects regular files under `root` whose filename matches `name_pattern`.

    Symlinked directories are descended into; each real directory is scanned
    once, which also ends symlink loops. A directory that cannot be read is
    reported and contributes no files; its siblings are still scanned. No
    state is shared between calls, so scans of different roots can run
    concurrently.
    """
    return await _scan_directory(Path(root).resolve(), name_pattern, notifier, set())


async def _scan_directory(
    directory: Path,
    name_pattern: re.Pattern[str],
    notifier: UserNotifier | None,
    visited: set[Path],
) -> list[Path]:
    if directory in visited:
        log.debug("Directory already scanned, skipping", path=str(directory), emoji_key="scan")
        return []
    visited.add(directory)

    try:
        entries = await asyncio.to_thread(_list_directory, directory)
    except OSError as e:
        log.warning("Cannot read directory", path=str(directory), error=str(e), emoji_key="scan")
        if notifier is not None:
            notifier.show_error(f"Cannot read directory '{directory}': {e.strerror or e}")
        return []

    files: list[Path] = []
    for name, is_file, real_dir in entries:
        if is_file:
            if name_pattern.search(name):
                files.append(directory / name)
        elif real_dir is not None:
            files.extend(await _scan_directory(real_dir, name_pattern, notifier, visited))

    log.debug("Scanned directory", path=str(directory), matched=len(files), emoji_key="scan")
    return files

# 🔼⚙️
