# src/unity_explorer/runtime/notifier.py

"""
Delivers user-visible messages to whatever host is driving the explorer.
"""

from collections import deque
from collections.abc import Callable

import structlog

from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.notifier")

MessageSink = Callable[[str, str], None]
# Oldest messages are dropped past this many.
MAX_KEPT_MESSAGES = 200


class UserNotifier:
    """
    A bridge for user-facing messages.

    Every message is logged; when a host sink is attached it also receives
    ``(level, message)`` so it can show the message in its own UI.
    """

    def __init__(self, sink: MessageSink | None = None):
        self.sink = sink
        self.messages: deque[tuple[str, str]] = deque(maxlen=MAX_KEPT_MESSAGES)
        self.error_count = 0

    def show_error(self, message: str, **context) -> None:
        log.error(message, **context)
        self.error_count += 1
        self._post("ERROR", message)

    def show_warning(self, message: str, **context) -> None:
        log.warning(message, **context)
        self._post("WARNING", message)

    def _post(self, level: str, message: str) -> None:
        self.messages.append((level, message))
        if self.sink is None:
            return
        try:
            self.sink(level, message)
        except Exception as e:
            # Host failures must not break a load or run cycle.
            log.warning("Failed to deliver message to host", error=str(e), exc_info=False)

# 🔼⚙️
