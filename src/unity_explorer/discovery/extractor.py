# src/unity_explorer/discovery/extractor.py

"""
Finds Unity test function declarations in C source text.

Only one declaration shape is recognised, ``void <prefix><name>(<params>)``,
so a pattern match is enough. Callers depend on the `TestExtractor` protocol,
not on the regex.
"""

import re
from typing import Protocol, runtime_checkable

from attrs import define

# Whitespace, or a backslash line continuation.
_SEP = r"(?:\s|\\\r?\n)"


@define(frozen=True, slots=True)
class ExtractedTest:
    """A raw match: function name, offset of the match, matched text and 0-based line."""
    raw_name: str
    start_offset: int
    declaration_text: str
    line: int


@runtime_checkable
class TestExtractor(Protocol):
    """Protocol for anything that can list test declarations in a source file."""

    def extract(self, text: str) -> list[ExtractedTest]:
        """Returns the test declarations found in `text`, in file order."""
        ...


class RegexTestExtractor(TestExtractor):
    """Pattern-based extractor for ``void test_*(...)`` declarations."""

    __test__ = False

    def __init__(self, prefix: str = "test_"):
        self.prefix = prefix
        self._pattern = re.compile(
            rf"^(?P<indent>\s*)void{_SEP}+"
            rf"(?P<name>{re.escape(prefix)}\w*){_SEP}*"
            r"\((?P<params>(?:[^()]|\([^()]*\))*)\)",
            re.MULTILINE,
        )

    def extract(self, text: str) -> list[ExtractedTest]:
        tests: list[ExtractedTest] = []
        newlines_before = 0
        scanned_up_to = 0
        for match in self._pattern.finditer(text):
            start = match.start()
            newlines_before += text.count("\n", scanned_up_to, start)
            scanned_up_to = start
            # The match may begin with blank lines; land on the `void` line.
            line = newlines_before + match.group("indent").count("\n")
            tests.append(
                ExtractedTest(
                    raw_name=match.group("name"),
                    start_offset=start,
                    declaration_text=match.group(0),
                    line=line,
                )
            )
        return tests

# 🔼⚙️
