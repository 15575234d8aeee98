# src/unity_explorer/exceptions.py

"""
Custom exceptions for unity-explorer.
"""

from pathlib import Path


class UnityExplorerError(Exception):
    """Base class for all unity-explorer errors."""

    pass


class ConfigurationError(UnityExplorerError):
    """Raised when the configuration file is missing, unreadable or invalid."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = path
        full_message = message
        if path:
            full_message += f" (Config: '{path}')"
        super().__init__(full_message)


class DiscoveryError(UnityExplorerError):
    """Base class for errors raised while discovering tests."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        details: Exception | None = None,
    ):
        self.path = path
        self.details = details
        full_message = f"[Discovery] {message}"
        if path:
            full_message += f" (Path: '{path}')"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class SuiteLoadError(DiscoveryError):
    """A test source file could not be read while building the suite tree."""

    pass


class DebugLaunchError(UnityExplorerError):
    """Raised when a debug launch profile is unusable."""

    pass

# 🔼⚙️
