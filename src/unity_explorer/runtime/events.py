# src/unity_explorer/runtime/events.py

"""
Load and run events published to the host, plus a minimal emitter.
"""

from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeAlias, TypeVar

import structlog
from attrs import define, field

from unity_explorer.models import RootSuite
from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.events")


class SuiteState(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"


class TestState(str, Enum):
    """States a single test can be reported in."""

    __test__ = False

    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    # Only emitted when unmatched results are reported explicitly.
    UNKNOWN = "unknown"


@define(frozen=True, slots=True)
class Decoration:
    """A message attached to a source line (0-based)."""
    line: int
    message: str


# --- Load events ---
@define(frozen=True, slots=True)
class LoadStarted:
    type: str = field(default="started", init=False)


@define(frozen=True, slots=True)
class LoadFinished:
    suite: RootSuite | None = field(default=None)
    error_message: str | None = field(default=None)
    type: str = field(default="finished", init=False)


# --- Run events ---
@define(frozen=True, slots=True)
class RunStarted:
    tests: tuple[str, ...] = field(converter=tuple)
    type: str = field(default="started", init=False)


@define(frozen=True, slots=True)
class RunFinished:
    type: str = field(default="finished", init=False)


@define(frozen=True, slots=True)
class SuiteEvent:
    suite: str
    state: SuiteState
    type: str = field(default="suite", init=False)


@define(frozen=True, slots=True)
class TestEvent:
    __test__ = False

    test: str
    state: TestState
    message: str | None = field(default=None)
    decorations: tuple[Decoration, ...] = field(factory=tuple, converter=tuple)
    type: str = field(default="test", init=False)


LoadEvent: TypeAlias = LoadStarted | LoadFinished
RunEvent: TypeAlias = RunStarted | RunFinished | SuiteEvent | TestEvent

E = TypeVar("E")


class EventEmitter(Generic[E]):
    """Synchronous publish/subscribe channel. Listener errors are logged, never propagated."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: list[Callable[[E], None]] = []

    def subscribe(self, listener: Callable[[E], None]) -> Callable[[], None]:
        """Adds a listener and returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def fire(self, event: E) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception("Event listener failed", emitter=self.name, event_type=type(event).__name__)

    def clear(self) -> None:
        self._listeners.clear()

# 🔼⚙️
