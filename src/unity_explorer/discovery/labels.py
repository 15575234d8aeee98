# src/unity_explorer/discovery/labels.py

"""
Display-label rules for suites and tests.
"""

import os
from pathlib import Path

from attrs import define, field


@define(frozen=True, slots=True)
class LabelFormatter:
    """
    Computes display labels, optionally stripping the test prefix and the
    test-file suffix. Each is stripped at most once; names that do not carry
    it are returned unchanged.
    """
    workspace: Path = field()
    pretty_test_label: bool = field(default=False)
    pretty_test_file_label: bool = field(default=False)
    test_function_prefix: str = field(default="test_")
    test_file_suffix: str = field(default="_test")
    source_extension: str = field(default="c")

    def test_label(self, test_name: str) -> str:
        if self.pretty_test_label and test_name.startswith(self.test_function_prefix):
            return test_name[len(self.test_function_prefix):]
        return test_name

    def file_label(self, file: Path) -> str:
        relative = os.path.relpath(file, self.workspace)
        if not self.pretty_test_file_label:
            return relative

        tail = f"{self.test_file_suffix}.{self.source_extension}"
        name = Path(file).name
        if name.lower().endswith(tail.lower()) and len(name) > len(tail):
            return name[: -len(tail)]
        return relative

# 🔼⚙️
