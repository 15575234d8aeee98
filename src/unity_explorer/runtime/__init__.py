#
# src/unity_explorer/runtime/__init__.py
#
"""
Runtime components: process coordination, result parsing, events and the
run orchestrator.
"""

# 🔼⚙️
