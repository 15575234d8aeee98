#
# src/unity_explorer/telemetry/__init__.py
#
"""
Logging and telemetry helpers for unity-explorer.
"""

from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
