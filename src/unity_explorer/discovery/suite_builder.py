# src/unity_explorer/discovery/suite_builder.py

"""
Assembles the two-level suite tree from test source files.
"""

import asyncio
from collections.abc import Iterable
from pathlib import Path

import structlog

from unity_explorer.discovery.extractor import TestExtractor
from unity_explorer.discovery.labels import LabelFormatter
from unity_explorer.exceptions import SuiteLoadError
from unity_explorer.models import RootSuite, SuiteNode, TestCase, make_test_id
from unity_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("discovery.suite_builder")


def _read_source(file: Path) -> str:
    return file.read_text(encoding="utf-8", errors="replace")


async def build_suite(file: Path, extractor: TestExtractor, labels: LabelFormatter) -> SuiteNode:
    """Reads one test file and returns its suite, empty when it declares no tests."""
    file = Path(file).resolve()
    try:
        text = await asyncio.to_thread(_read_source, file)
    except OSError as e:
        raise SuiteLoadError("Cannot read test file", path=file, details=e) from e

    children = [
        TestCase(
            id=make_test_id(file, found.raw_name),
            name=found.raw_name,
            label=labels.test_label(found.raw_name),
            file=file,
            line=found.line,
        )
        for found in extractor.extract(text)
    ]
    return SuiteNode(id=str(file), label=labels.file_label(file), file=file, children=children)


async def build_suite_tree(
    files: Iterable[Path],
    *,
    extractor: TestExtractor,
    labels: LabelFormatter,
) -> RootSuite:
    """
    Builds a fresh tree with one suite per file, in the given file order.

    Raises:
        SuiteLoadError: a file could not be read; the whole load cycle fails.
    """
    suites: list[SuiteNode] = []
    for file in files:
        suite = await build_suite(file, extractor, labels)
        log.debug("Loaded suite", suite_id=suite.id, tests=len(suite.children), emoji_key="load")
        suites.append(suite)

    root = RootSuite(children=suites)
    log.info("Suite tree built", suites=len(root.children), tests=root.test_count, emoji_key="load")
    return root

# 🔼⚙️
