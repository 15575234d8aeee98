# src/unity_explorer/runtime/process.py

"""
Serialises build-tool and test-executable invocations.

Two independent domains, "build" and "execute", each hold one lock and one
active-process slot. At most one process per domain is in flight; later
callers queue on the lock and only ever see the output of their own process.
"""

import asyncio
from pathlib import Path

import psutil
import structlog
from attrs import define, field

from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.process")

BUILD_DOMAIN = "build"
EXECUTE_DOMAIN = "execute"


@define(frozen=True, slots=True)
class RunResult:
    """Captured output of one process invocation."""
    stdout: str = field(default="")
    stderr: str = field(default="")
    exit_code: int | None = field(default=None)
    error: str | None = field(default=None)

    @property
    def failed(self) -> bool:
        return self.error is not None


class _Domain:
    """One lock plus the process currently holding it."""

    def __init__(self, name: str):
        self.name = name
        self.lock = asyncio.Lock()
        self.active: asyncio.subprocess.Process | None = None


def kill_process_tree(pid: int) -> None:
    """Kills `pid` and all of its descendants without waiting for them to exit."""
    try:
        parent = psutil.Process(pid)
        processes = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        log.debug("Process already gone", pid=pid)
        return

    for proc in processes:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied as e:
            log.warning("Not allowed to kill process", pid=proc.pid, error=str(e))


class ProcessCoordinator:
    """Runs the build tool and test executables, one of each at a time."""

    def __init__(self, make_cwd: Path, build_tool: str = "make"):
        self.make_cwd = Path(make_cwd)
        self.build_tool = build_tool
        self._build = _Domain(BUILD_DOMAIN)
        self._execute = _Domain(EXECUTE_DOMAIN)

    @property
    def active_build_process(self) -> asyncio.subprocess.Process | None:
        return self._build.active

    @property
    def active_execute_process(self) -> asyncio.subprocess.Process | None:
        return self._execute.active

    async def run_build(self, args: str) -> RunResult:
        """Runs ``<build_tool> <args>`` through the shell in the build working directory."""
        command = f"{self.build_tool} {args}".strip()
        return await self._invoke(
            self._build,
            command,
            lambda: asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.make_cwd,
            ),
        )

    async def run_executable(self, path: Path | str) -> RunResult:
        """Runs a built test executable directly."""
        command = str(path)
        return await self._invoke(
            self._execute,
            command,
            lambda: asyncio.create_subprocess_exec(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            ),
        )

    async def _invoke(self, domain: _Domain, command: str, spawn) -> RunResult:
        proc_log = log.bind(domain=domain.name, command=command)
        async with domain.lock:
            try:
                process = await spawn()
            except OSError as e:
                proc_log.error("Failed to start process", error=str(e), emoji_key=domain.name)
                return RunResult(stderr=str(e), error=f"Cannot start '{command}': {e}")

            domain.active = process
            proc_log.info("Process started", pid=process.pid, emoji_key=domain.name)
            try:
                stdout_bytes, stderr_bytes = await process.communicate()
            finally:
                if domain.active is process:
                    domain.active = None

        exit_code = process.returncode
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        error = None
        if exit_code != 0:
            error = f"Command '{command}' failed with exit code {exit_code}"
            if stderr.strip():
                error += f"\n{stderr.strip()}"

        proc_log.info("Process finished", exit_code=exit_code, emoji_key=domain.name)
        proc_log.debug("Process output", stdout_len=len(stdout), stderr_len=len(stderr))
        return RunResult(stdout=stdout, stderr=stderr, exit_code=exit_code, error=error)

    def cancel_all(self) -> None:
        """Best-effort kill of both active process trees. Does not wait."""
        for domain in (self._build, self._execute):
            process = domain.active
            if process is None or process.returncode is not None:
                continue
            log.warning("Cancelling process", domain=domain.name, pid=process.pid)
            kill_process_tree(process.pid)

# 🔼⚙️
