# src/unity_explorer/state.py
#
"""
Tracks per-test state across a run by consuming run events.
"""

from enum import Enum, auto

import structlog
from attrs import field, mutable

from unity_explorer.models import RootSuite
from unity_explorer.runtime.events import (
    RunEvent,
    RunFinished,
    RunStarted,
    SuiteEvent,
    SuiteState,
    TestEvent,
    TestState,
)

# Logger specific to state management
log: structlog.stdlib.BoundLogger = structlog.get_logger("state")


class TestStatus(Enum):
    """Display status of one test in the host."""

    __test__ = False

    PENDING = auto()  # Discovered, not reported in this run.
    QUEUED = auto()  # Its suite is building or running.
    RUNNING = auto()
    PASSED = auto()
    FAILED = auto()
    UNKNOWN = auto()  # Ran, but no result line was recognised.


STATUS_EMOJI_MAP = {
    TestStatus.PENDING: "⚪",
    TestStatus.QUEUED: "⏳",
    TestStatus.RUNNING: "🔄",
    TestStatus.PASSED: "✅",
    TestStatus.FAILED: "❌",
    TestStatus.UNKNOWN: "❓",
}

_EVENT_STATUS = {
    TestState.RUNNING: TestStatus.RUNNING,
    TestState.PASSED: TestStatus.PASSED,
    TestState.FAILED: TestStatus.FAILED,
    TestState.UNKNOWN: TestStatus.UNKNOWN,
}


@mutable(slots=True)
class TestRecord:
    """Mutable state for a single test during and after a run."""

    __test__ = False

    test_id: str = field()
    label: str = field()
    suite_id: str = field()
    status: TestStatus = field(default=TestStatus.PENDING)
    message: str | None = field(default=None)
    failure_line: int | None = field(default=None)

    @property
    def emoji(self) -> str:
        return STATUS_EMOJI_MAP.get(self.status, "❓")

    def update_status(self, new_status: TestStatus, message: str | None = None, line: int | None = None) -> None:
        old_status = self.status
        self.status = new_status
        if new_status == TestStatus.FAILED:
            self.message = message
            self.failure_line = line
        elif new_status != old_status:
            self.message = message
            self.failure_line = None

        log_func = log.warning if new_status == TestStatus.FAILED else log.debug
        log_func(
            "Test status changed",
            test_id=self.test_id,
            old_status=old_status.name,
            new_status=new_status.name,
            **({"failure": message} if new_status == TestStatus.FAILED else {}),
        )


@mutable(slots=True)
class RunTracker:
    """
    Subscriber for run events that keeps the latest status of every test.

    When the run finishes, tests left running had no recognisable result line
    and become UNKNOWN; tests whose suite ran but were never checked go back
    to PENDING.
    """
    records: dict[str, TestRecord] = field(factory=dict)
    running: bool = field(default=False)
    completed_suites: list[str] = field(factory=list)

    @classmethod
    def from_suite(cls, suite: RootSuite) -> "RunTracker":
        tracker = cls()
        tracker.reset(suite)
        return tracker

    def reset(self, suite: RootSuite) -> None:
        """Starts over from a freshly loaded tree."""
        self.records = {
            test.id: TestRecord(test_id=test.id, label=test.label, suite_id=suite_node.id)
            for suite_node in suite.children
            for test in suite_node.children
        }
        self.completed_suites = []

    def __call__(self, event: RunEvent) -> None:
        self.handle(event)

    def handle(self, event: RunEvent) -> None:
        if isinstance(event, RunStarted):
            self.running = True
            self.completed_suites = []
        elif isinstance(event, RunFinished):
            self.running = False
            for record in self.records.values():
                if record.status == TestStatus.QUEUED:
                    record.update_status(TestStatus.PENDING)
                elif record.status == TestStatus.RUNNING:
                    # Checked against the output but no result line matched.
                    record.update_status(TestStatus.UNKNOWN)
        elif isinstance(event, SuiteEvent):
            if event.state == SuiteState.COMPLETED:
                self.completed_suites.append(event.suite)
            else:
                for record in self.records.values():
                    if record.suite_id == event.suite:
                        record.update_status(TestStatus.QUEUED)
        elif isinstance(event, TestEvent):
            record = self.records.get(event.test)
            if record is None:
                log.debug("Event for unknown test ignored", test_id=event.test)
                return
            line = event.decorations[0].line if event.decorations else None
            record.update_status(_EVENT_STATUS[event.state], event.message, line)

    def count(self, status: TestStatus) -> int:
        return sum(1 for record in self.records.values() if record.status == status)

    @property
    def has_failures(self) -> bool:
        """True when a test failed or ran without a recognisable result."""
        return self.count(TestStatus.FAILED) > 0 or self.count(TestStatus.UNKNOWN) > 0

# 🔼⚙️
