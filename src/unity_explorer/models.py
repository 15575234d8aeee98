# src/unity_explorer/models.py

"""
Immutable suite-tree models: root -> file suites -> test cases.
"""

from pathlib import Path

from attrs import define, field

ROOT_ID = "root"
ROOT_LABEL = "Unity"
TEST_ID_SEPARATOR = "::"


def make_test_id(file: Path, name: str) -> str:
    return f"{file}{TEST_ID_SEPARATOR}{name}"


@define(frozen=True, slots=True)
class TestCase:
    """One discovered test function."""

    __test__ = False

    id: str = field()
    name: str = field()
    label: str = field()
    file: Path = field()
    line: int = field()  # 0-based line of the `void` token


@define(frozen=True, slots=True)
class SuiteNode:
    """One test source file and the tests declared in it."""
    id: str = field()
    label: str = field()
    file: Path = field()
    children: tuple[TestCase, ...] = field(factory=tuple, converter=tuple)

    def __attrs_post_init__(self) -> None:
        for child in self.children:
            if child.file != self.file:
                raise ValueError(f"Test '{child.id}' does not belong to suite file '{self.file}'")


@define(frozen=True, slots=True)
class RootSuite:
    """
    Synthetic root owning every file suite of one load cycle.

    A flat id index is built alongside the tree so lookups by suite or test
    id do not walk the tree.
    """
    children: tuple[SuiteNode, ...] = field(factory=tuple, converter=tuple)
    id: str = field(default=ROOT_ID, init=False)
    label: str = field(default=ROOT_LABEL, init=False)
    _nodes: dict[str, "SuiteNode | TestCase"] = field(init=False, repr=False, eq=False)
    _owners: dict[str, SuiteNode] = field(init=False, repr=False, eq=False)

    def __attrs_post_init__(self) -> None:
        nodes: dict[str, SuiteNode | TestCase] = {}
        owners: dict[str, SuiteNode] = {}
        for suite in self.children:
            if suite.id in nodes:
                raise ValueError(f"Duplicate suite id '{suite.id}'")
            nodes[suite.id] = suite
            owners[suite.id] = suite
            for test in suite.children:
                # Repeated test names in one file share an id; the first one wins.
                nodes.setdefault(test.id, test)
                owners.setdefault(test.id, suite)
        object.__setattr__(self, "_nodes", nodes)
        object.__setattr__(self, "_owners", owners)

    def find_suite(self, node_id: str) -> SuiteNode | None:
        """Returns the suite with `node_id`, or the suite owning the test with `node_id`."""
        return self._owners.get(node_id)

    def find_node(self, node_id: str) -> "RootSuite | SuiteNode | TestCase | None":
        if node_id == self.id:
            return self
        return self._nodes.get(node_id)

    def iter_tests(self):
        for suite in self.children:
            yield from suite.children

    @property
    def test_count(self) -> int:
        return sum(len(suite.children) for suite in self.children)

# 🔼⚙️
