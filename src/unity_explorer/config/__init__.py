#
# config/__init__.py
#
"""
Configuration handling sub-package for unity-explorer.

Exports the loading functions and configuration models.
"""

from .loader import DEFAULT_CONFIG_NAME, default_config, load_config, parse_config
from .models import (
    DebugProfile,
    ExplorerConfig,
    GlobalConfig,
    UnityExplorerConfig,
)

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "DebugProfile",
    "ExplorerConfig",
    "GlobalConfig",
    "UnityExplorerConfig",
    "default_config",
    "load_config",
    "parse_config",
]

# 🔼⚙️
