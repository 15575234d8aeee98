import sys
from pathlib import Path

import pytest

from unity_explorer.config import ExplorerConfig

MATH_TEST_SOURCE = """\
#include "unity.h"
#include "math.h"

void setUp(void) {}
void tearDown(void) {}

void test_add(void)
{
    TEST_ASSERT_EQUAL(4, add(2, 2));
}

void test_sub(void)
{
    TEST_ASSERT_EQUAL(4, sub(9, 4));
}
"""

STRING_TEST_SOURCE = """\
#include "unity.h"

void test_concat(void)
{
    TEST_ASSERT_EQUAL_STRING("ab", concat("a", "b"));
}
"""

EMPTY_TEST_SOURCE = """\
#include "unity.h"

static void helper(void) {}
"""


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A small C project: sources in src/, Unity tests in tests/."""
    root = tmp_path.resolve() / "project"
    (root / "src").mkdir(parents=True)
    (root / "tests" / "nested").mkdir(parents=True)
    (root / "src" / "math.c").write_text("int add(int a, int b) { return a + b; }\n")
    (root / "src" / "math.h").write_text("int add(int a, int b);\n")
    (root / "tests" / "math_test.c").write_text(MATH_TEST_SOURCE)
    (root / "tests" / "string_test.c").write_text(STRING_TEST_SOURCE)
    (root / "tests" / "nested" / "empty_test.c").write_text(EMPTY_TEST_SOURCE)
    (root / "tests" / "README.md").write_text("not a test\n")
    return root


@pytest.fixture
def explorer_config(workspace: Path) -> ExplorerConfig:
    return ExplorerConfig.for_workspace(
        workspace,
        project_source_path=workspace / "src",
        test_source_path=workspace / "tests",
        test_build_path=workspace / "build",
    )


@pytest.fixture
def fake_make(tmp_path: Path) -> Path:
    """
    A stand-in for make: writes an executable Unity runner at the last argument.

    The runner reports test_add as passing and test_sub as failing on line 14;
    any other target's runner prints nothing and exits 1.
    """
    script = tmp_path / "fake_make.py"
    script.write_text(
        f"""\
import os
import sys

target = sys.argv[-1]
if "broken" in sys.argv:
    print("make: *** No rule to make target", file=sys.stderr)
    sys.exit(2)
os.makedirs(os.path.dirname(target) or ".", exist_ok=True)
with open(target, "w") as f:
    f.write("#!{sys.executable}\\n")
    f.write("import sys\\n")
    if "math_test" in target:
        f.write("print('tests/math_test.c:7:test_add:PASS')\\n")
        f.write("print('tests/math_test.c:14:test_sub:FAIL: Expected 4 Was 5')\\n")
        f.write("print('2 Tests 1 Failures 0 Ignored')\\n")
    f.write("sys.exit(1)\\n")
os.chmod(target, 0o755)
"""
    )
    return script


@pytest.fixture
def fake_make_command(fake_make: Path) -> str:
    return f'"{sys.executable}" "{fake_make}"'
