# src/unity_explorer/debug.py

"""
Debugger launch boundary.

The explorer builds the suite and hands the resulting executable to a
`DebugLauncher` inside a `DebugSession`. The session is the only place the
executable path lives, so a launcher that resolves it lazily reads it from the
session it was given.
"""

import asyncio
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog
from attrs import define

from unity_explorer.config.models import DebugProfile
from unity_explorer.exceptions import DebugLaunchError
from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("debug")


@define(frozen=True, slots=True)
class DebugSession:
    """Context for one debug launch."""
    workspace: Path
    configuration: str
    executable: Path


@runtime_checkable
class DebugLauncher(Protocol):
    """Protocol for starting a debugger attached to a built test executable."""

    async def start_debugging(self, session: DebugSession) -> bool:
        """
        Starts a debugger for `session.executable`.

        Returns:
            True if the debugger was started.
        """
        ...


class CommandDebugLauncher(DebugLauncher):
    """
    Launches a debugger from a configured command template.

    ``{executable}`` and ``{workspace}`` in the profile command are replaced with
    the session's values. The debugger inherits the terminal.
    """

    def __init__(self, profiles: dict[str, DebugProfile]):
        self.profiles = profiles
        self._processes: list[asyncio.subprocess.Process] = []

    def build_command(self, session: DebugSession) -> list[str] | None:
        profile = self.profiles.get(session.configuration)
        if profile is None:
            return None
        values = {"executable": str(session.executable), "workspace": str(session.workspace)}
        try:
            return [part.format(**values) for part in profile.command]
        except (KeyError, IndexError, ValueError) as e:
            raise DebugLaunchError(f"Invalid placeholder in debug profile '{profile.name}': {e}") from e

    async def start_debugging(self, session: DebugSession) -> bool:
        debug_log = log.bind(configuration=session.configuration, executable=str(session.executable))
        try:
            command = self.build_command(session)
        except DebugLaunchError as e:
            debug_log.error("Cannot build debugger command", error=str(e))
            return False
        if not command:
            debug_log.error("Unknown debug configuration", available=sorted(self.profiles))
            return False

        profile = self.profiles[session.configuration]
        try:
            process = await asyncio.create_subprocess_exec(
                *command, cwd=profile.cwd or session.workspace
            )
        except OSError as e:
            debug_log.error("Failed to start debugger", command=command, error=str(e))
            return False

        self._processes.append(process)
        debug_log.info("Debugger started", pid=process.pid, emoji_key="debug")
        return True

    async def wait(self) -> int | None:
        """Waits for every started debugger; returns the last exit code."""
        exit_code = None
        while self._processes:
            exit_code = await self._processes.pop(0).wait()
        return exit_code

# 🔼⚙️
