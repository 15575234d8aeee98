# src/unity_explorer/telemetry/logger/processors.py

"""
Custom structlog processors used by the unity-explorer logging pipeline.
"""

import logging
from typing import Any

from structlog.typing import EventDict

# Keys that are only meaningful while processing and should not be rendered.
_INTERNAL_KEYS = ("emoji_key",)

LOG_EMOJIS: dict[int | str, str] = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
    "scan": "🔍",
    "load": "📄",
    "build": "🔨",
    "execute": "🧪",
    "pass": "✅",
    "fail": "🚫",
    "watch": "👀",
    "debug": "🐞",
    "general": "➡️",
}


def add_emoji_processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefixes the event with an emoji chosen by `emoji_key` or by level."""
    emoji_key = event_dict.get("emoji_key")
    emoji = LOG_EMOJIS.get(emoji_key) if emoji_key else None
    if emoji is None:
        level = logging.getLevelName(str(event_dict.get("level", "info")).upper())
        emoji = LOG_EMOJIS.get(level, LOG_EMOJIS["general"])

    event = event_dict.get("event")
    if isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Drops internal keys before rendering."""
    for key in _INTERNAL_KEYS:
        event_dict.pop(key, None)
    return event_dict

# 🔼⚙️
