#
# src/unity_explorer/cli/__init__.py
#
"""
Command line host for unity-explorer.
"""

# 🔼⚙️
