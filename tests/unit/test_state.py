# tests/unit/test_state.py

"""Unit tests for RunTracker status bookkeeping."""

from pathlib import Path

import pytest

from unity_explorer.models import RootSuite, SuiteNode, TestCase
from unity_explorer.runtime.events import (
    Decoration,
    RunFinished,
    RunStarted,
    SuiteEvent,
    SuiteState,
    TestEvent,
    TestState,
)
from unity_explorer.state import RunTracker, TestStatus


@pytest.fixture
def suite() -> RootSuite:
    def suite_for(name: str, tests: list[str]) -> SuiteNode:
        file = Path("/ws/tests") / name
        return SuiteNode(
            id=str(file),
            label=f"tests/{name}",
            file=file,
            children=[
                TestCase(id=f"{file}::{t}", name=t, label=t, file=file, line=i) for i, t in enumerate(tests)
            ],
        )

    return RootSuite(children=[suite_for("math_test.c", ["test_add", "test_sub"]), suite_for("io_test.c", ["test_io"])])


def test_records_start_pending(suite: RootSuite) -> None:
    tracker = RunTracker.from_suite(suite)

    assert list(tracker.records) == [t.id for t in suite.iter_tests()]
    assert tracker.count(TestStatus.PENDING) == 3
    assert not tracker.has_failures


def test_run_events_update_statuses(suite: RootSuite) -> None:
    tracker = RunTracker.from_suite(suite)
    math = suite.children[0]
    add, sub = math.children

    for event in [
        RunStarted(tests=[math.id]),
        SuiteEvent(suite=math.id, state=SuiteState.RUNNING),
        SuiteEvent(suite=math.id, state=SuiteState.COMPLETED),
        TestEvent(test=add.id, state=TestState.RUNNING),
        TestEvent(test=add.id, state=TestState.PASSED),
        TestEvent(test=sub.id, state=TestState.RUNNING),
        TestEvent(
            test=sub.id,
            state=TestState.FAILED,
            message="Expected 4 Was 5",
            decorations=[Decoration(line=13, message="Expected 4 Was 5")],
        ),
    ]:
        tracker(event)

    assert tracker.running is True
    assert tracker.completed_suites == [math.id]
    assert tracker.records[add.id].status == TestStatus.PASSED
    failed = tracker.records[sub.id]
    assert failed.status == TestStatus.FAILED
    assert failed.message == "Expected 4 Was 5"
    assert failed.failure_line == 13
    assert failed.emoji == "❌"
    assert tracker.has_failures


def test_suite_running_queues_its_tests(suite: RootSuite) -> None:
    tracker = RunTracker.from_suite(suite)
    math = suite.children[0]

    tracker(SuiteEvent(suite=math.id, state=SuiteState.RUNNING))

    assert [r.status for r in tracker.records.values()] == [TestStatus.QUEUED, TestStatus.QUEUED, TestStatus.PENDING]


def test_run_finished_settles_leftover_states(suite: RootSuite) -> None:
    tracker = RunTracker.from_suite(suite)
    math = suite.children[0]
    add, sub = math.children

    tracker(RunStarted(tests=[add.id]))
    tracker(SuiteEvent(suite=math.id, state=SuiteState.RUNNING))
    tracker(TestEvent(test=add.id, state=TestState.RUNNING))
    tracker(RunFinished())

    assert tracker.running is False
    # Checked but without a result line.
    assert tracker.records[add.id].status == TestStatus.UNKNOWN
    # Queued but never checked.
    assert tracker.records[sub.id].status == TestStatus.PENDING
    assert tracker.has_failures


def test_unknown_result_counts_as_failure(suite: RootSuite) -> None:
    tracker = RunTracker.from_suite(suite)
    add = suite.children[0].children[0]

    tracker(TestEvent(test=add.id, state=TestState.UNKNOWN, message="No result line found in runner output"))

    assert tracker.count(TestStatus.FAILED) == 0
    assert tracker.has_failures


def test_passing_again_clears_previous_failure(suite: RootSuite) -> None:
    tracker = RunTracker.from_suite(suite)
    sub = suite.children[0].children[1]

    tracker(TestEvent(test=sub.id, state=TestState.FAILED, message="boom", decorations=[Decoration(3, "boom")]))
    tracker(TestEvent(test=sub.id, state=TestState.PASSED))

    assert tracker.records[sub.id].message is None
    assert tracker.records[sub.id].failure_line is None


def test_events_for_unknown_tests_are_ignored(suite: RootSuite) -> None:
    tracker = RunTracker.from_suite(suite)

    tracker(TestEvent(test="/ws/tests/gone_test.c::test_gone", state=TestState.PASSED))

    assert tracker.count(TestStatus.PASSED) == 0


def test_reset_replaces_records(suite: RootSuite) -> None:
    tracker = RunTracker.from_suite(suite)
    tracker(TestEvent(test=suite.children[0].children[0].id, state=TestState.PASSED))

    tracker.reset(RootSuite(children=[suite.children[1]]))

    assert list(tracker.records) == [suite.children[1].children[0].id]
    assert tracker.count(TestStatus.PENDING) == 1
