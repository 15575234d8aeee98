# src/unity_explorer/runtime/result_parser.py

"""
Extracts a single test's outcome from Unity runner output.

Unity prints one line per test, e.g.::

    src/math_test.c:12:test_addTwoNumbers:PASS
    src/math_test.c:20:test_sub:FAIL: Expected 4 Was 5
"""

import re
from typing import TypeAlias

from attrs import define

_RESULT_SUFFIX = r":(PASS|FAIL: (.*))"


@define(frozen=True, slots=True)
class Passed:
    pass


@define(frozen=True, slots=True)
class Failed:
    line: int  # 0-based
    message: str


@define(frozen=True, slots=True)
class NoMatch:
    pass


CheckOutcome: TypeAlias = Passed | Failed | NoMatch


def result_pattern(test_label: str) -> re.Pattern[str]:
    return re.compile(r":([0-9]+):.*" + re.escape(test_label) + _RESULT_SUFFIX)


def check_result(test_label: str, output: str) -> CheckOutcome:
    """Finds the first result line for `test_label`; `NoMatch` when there is none."""
    match = result_pattern(test_label).search(output)
    if match is None:
        return NoMatch()
    if match.group(2) == "PASS":
        return Passed()
    return Failed(line=int(match.group(1)) - 1, message=match.group(3).rstrip("\r"))

# 🔼⚙️
