#
# src/unity_explorer/discovery/__init__.py
#
"""
Test discovery: file scanning, declaration extraction and suite-tree building.
"""
from .extractor import ExtractedTest, RegexTestExtractor, TestExtractor
from .labels import LabelFormatter
from .scanner import scan_files, source_file_pattern, suite_file_pattern
from .suite_builder import build_suite_tree

__all__ = [
    "ExtractedTest",
    "LabelFormatter",
    "RegexTestExtractor",
    "TestExtractor",
    "build_suite_tree",
    "scan_files",
    "source_file_pattern",
    "suite_file_pattern",
]

# 🔼⚙️
