"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest
from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from tracing_sync.core.parser import SourceFile

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def find_functions(source: SourceFile) -> list[Node]:
    """Return every ``function_item`` in document order."""
    found: list[Node] = []
    stack = [source.root]
    while stack:
        node = stack.pop()
        if node.type == "function_item":
            found.append(node)
        stack.extend(reversed(node.children))
    return found


def function_named(source: SourceFile, name: str) -> Node:
    for node in find_functions(source):
        name_node = node.child_by_field_name("name")
        if name_node is not None and source.node_text(name_node) == name:
            return node
    raise LookupError(f"No function named {name!r}")


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def rust_parser() -> Parser:
    """Return a tree-sitter parser for Rust."""
    return get_parser("rust")


@pytest.fixture
def readme_source() -> str:
    """The multi-function, multi-module example from the project README."""
    return """fn main() {
    println!("Hello World!");
}
fn add(lhs: i32, rhs: i32) -> i32 {
    lhs + rhs
}
#[cfg(tests)]
mod tests {
    fn sub(lhs: i32, rhs: i32) -> i32 {
        lhs - rhs
    }
    #[test]
    fn test_one() {
        assert_eq!(add(1,1), sub(2, 1));
    }
}"""
