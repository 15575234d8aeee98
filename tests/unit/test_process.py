# tests/unit/test_process.py

"""Unit tests for the ProcessCoordinator's serialisation and cancellation."""

import asyncio
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from unity_explorer.runtime import process as process_module
from unity_explorer.runtime.process import ProcessCoordinator, RunResult


def _write_runner(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n{body}\n")
    path.chmod(0o755)
    return path


class ConcurrencyProbe:
    """Fake subprocess factory recording how many processes overlap."""

    def __init__(self, delay: float = 0.02):
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self.commands: list[str] = []

    async def spawn(self, command, *args, **kwargs):
        self.commands.append(command)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        return _FakeProcess(self, command)


class _FakeProcess:
    pid = 4242

    def __init__(self, probe: ConcurrencyProbe, command: str):
        self._probe = probe
        self._command = command
        self.returncode = None

    async def communicate(self):
        await asyncio.sleep(self._probe.delay)
        self._probe.active -= 1
        self.returncode = 0
        return f"output of {self._command}".encode(), b""


@pytest.mark.asyncio
class TestProcessCoordinator:
    async def test_build_runs_build_tool_in_working_directory(self, tmp_path: Path) -> None:
        script = tmp_path / "tool.py"
        script.write_text("import os, sys\nprint(os.getcwd())\nprint(' '.join(sys.argv[1:]))\n")
        coordinator = ProcessCoordinator(tmp_path, build_tool=f'"{sys.executable}" tool.py')

        result = await coordinator.run_build("-f Makefile build/math_test.exe")

        assert not result.failed
        assert result.exit_code == 0
        cwd, args = result.stdout.splitlines()
        assert Path(cwd).resolve() == tmp_path.resolve()
        assert args == "-f Makefile build/math_test.exe"
        assert coordinator.active_build_process is None

    async def test_nonzero_exit_is_reported_with_output(self, tmp_path: Path) -> None:
        runner = _write_runner(
            tmp_path / "runner.exe",
            "import sys\nprint(':3:test_x:FAIL: boom')\nprint('oops', file=sys.stderr)\nsys.exit(1)",
        )
        coordinator = ProcessCoordinator(tmp_path)

        result = await coordinator.run_executable(runner)

        assert result.failed
        assert result.exit_code == 1
        assert ":3:test_x:FAIL: boom" in result.stdout
        assert "oops" in result.error

    async def test_missing_executable_yields_error_result(self, tmp_path: Path) -> None:
        coordinator = ProcessCoordinator(tmp_path)

        result = await coordinator.run_executable(tmp_path / "build" / "missing.exe")

        assert result.failed
        assert result.stdout == ""
        assert coordinator.active_execute_process is None

    async def test_builds_are_serialised(self, tmp_path: Path) -> None:
        probe = ConcurrencyProbe()
        coordinator = ProcessCoordinator(tmp_path)

        with patch.object(process_module.asyncio, "create_subprocess_shell", probe.spawn):
            results = await asyncio.gather(*(coordinator.run_build(f"target{i}") for i in range(5)))

        assert probe.max_active == 1
        # Every caller sees its own output only.
        assert [r.stdout for r in results] == [f"output of make target{i}" for i in range(5)]

    async def test_executions_are_serialised(self, tmp_path: Path) -> None:
        probe = ConcurrencyProbe()
        coordinator = ProcessCoordinator(tmp_path)

        with patch.object(process_module.asyncio, "create_subprocess_exec", probe.spawn):
            await asyncio.gather(*(coordinator.run_executable(f"/bin/t{i}.exe") for i in range(4)))

        assert probe.max_active == 1
        assert len(probe.commands) == 4

    async def test_build_and_execute_domains_are_independent(self, tmp_path: Path) -> None:
        probe = ConcurrencyProbe(delay=0.05)
        coordinator = ProcessCoordinator(tmp_path)

        with (
            patch.object(process_module.asyncio, "create_subprocess_shell", probe.spawn),
            patch.object(process_module.asyncio, "create_subprocess_exec", probe.spawn),
        ):
            await asyncio.gather(coordinator.run_build("all"), coordinator.run_executable("/bin/t.exe"))

        assert probe.max_active == 2

    async def test_cancel_all_kills_active_process_and_releases_lock(self, tmp_path: Path) -> None:
        runner = _write_runner(tmp_path / "sleeper.exe", "import time\nprint('started', flush=True)\ntime.sleep(30)")
        coordinator = ProcessCoordinator(tmp_path)

        task = asyncio.create_task(coordinator.run_executable(runner))
        for _ in range(200):
            if coordinator.active_execute_process is not None:
                break
            await asyncio.sleep(0.01)
        assert coordinator.active_execute_process is not None

        coordinator.cancel_all()
        result = await asyncio.wait_for(task, timeout=10)

        assert isinstance(result, RunResult)
        assert result.failed
        assert coordinator.active_execute_process is None
        # The lock was released: another run goes through.
        quick = _write_runner(tmp_path / "quick.exe", "print('ok')")
        assert (await coordinator.run_executable(quick)).stdout.strip() == "ok"

    async def test_cancel_all_without_active_processes_is_a_no_op(self, tmp_path: Path) -> None:
        coordinator = ProcessCoordinator(tmp_path)

        with patch.object(process_module, "kill_process_tree") as mock_kill:
            coordinator.cancel_all()

        mock_kill.assert_not_called()

    async def test_cancel_all_targets_both_domains(self, tmp_path: Path) -> None:
        probe = ConcurrencyProbe(delay=0.2)
        coordinator = ProcessCoordinator(tmp_path)

        with (
            patch.object(process_module.asyncio, "create_subprocess_shell", probe.spawn),
            patch.object(process_module.asyncio, "create_subprocess_exec", probe.spawn),
            patch.object(process_module, "kill_process_tree") as mock_kill,
        ):
            tasks = [
                asyncio.create_task(coordinator.run_build("all")),
                asyncio.create_task(coordinator.run_executable("/bin/t.exe")),
            ]
            await asyncio.sleep(0.05)
            coordinator.cancel_all()
            await asyncio.gather(*tasks)

        assert mock_kill.call_count == 2
        mock_kill.assert_called_with(_FakeProcess.pid)
