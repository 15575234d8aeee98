#
# src/unity_explorer/__init__.py
#
"""
Unity Explorer: discovers, builds, runs and reports Unity C unit tests.
"""

from unity_explorer.models import RootSuite, SuiteNode, TestCase
from unity_explorer.runtime.orchestrator import UnityExplorer

__all__ = [
    "RootSuite",
    "SuiteNode",
    "TestCase",
    "UnityExplorer",
]

# 🔼⚙️
