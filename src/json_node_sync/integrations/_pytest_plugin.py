"""pytest plugin for json-node-sync.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.

Source: https://docs.pytest.org/en/stable/how-to/writing_plugins.html
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import pytest

from json_node_sync.controller import ReconciliationController
from json_node_sync.patch.scanner import find_node_at_location, node_value, parse_tree
from json_node_sync.rows.projector import render_path_label
from json_node_sync.stores import DocumentStore, InMemoryContentsMirror, TreeStore


@dataclass
class NodeSyncWorkspace:
    """A document store, tree store, mirror and controller wired together."""

    documents: DocumentStore
    tree: TreeStore
    mirror: InMemoryContentsMirror
    controller: ReconciliationController


def _lookup(document: str, path: Sequence[str | int]) -> tuple[bool, Any]:
    found = find_node_at_location(parse_tree(document), path)
    if found is None:
        return False, None
    return True, node_value(found)


@pytest.fixture(scope="session")
def assert_value_at_path() -> Callable[[str, Sequence[str | int], Any], None]:
    """Fixture that returns a callable asserting the value at a document path.

    Usage in tests::

        def test_age(assert_value_at_path):
            assert_value_at_path('{"user": {"age": 31}}', ["user", "age"], 31)

    Returns:
        A callable ``_assert(document, path, expected) -> None`` that raises
        ``AssertionError`` when ``path`` is missing or holds another value.
    """

    def _assert(document: str, path: Sequence[str | int], expected: Any) -> None:
        present, actual = _lookup(document, path)
        label = render_path_label(path)
        if not present:
            raise AssertionError(f"No value at {label}\n  document: {document}")
        if actual != expected or type(actual) is not type(expected):
            raise AssertionError(
                f"Unexpected value at {label}\n"
                f"  actual:   {actual!r}\n"
                f"  expected: {expected!r}"
            )

    return _assert


@pytest.fixture(scope="session")
def assert_no_value_at_path() -> Callable[[str, Sequence[str | int]], None]:
    """Fixture that returns a callable asserting a document path is absent.

    Returns:
        A callable ``_assert(document, path) -> None`` that raises
        ``AssertionError`` when ``path`` resolves to a value.
    """

    def _assert(document: str, path: Sequence[str | int]) -> None:
        present, actual = _lookup(document, path)
        if present:
            raise AssertionError(
                f"Expected no value at {render_path_label(path)}, "
                f"found {actual!r}"
            )

    return _assert


@pytest.fixture
def node_sync_workspace() -> Callable[[str], NodeSyncWorkspace]:
    """Fixture that returns a factory of wired-up workspaces.

    Usage in tests::

        def test_save(node_sync_workspace):
            ws = node_sync_workspace('{"a": {"b": 1}}')
            node = ws.tree.find_by_path(("a",))
            ws.controller.save(node, '{"b": 2}')

    Returns:
        A callable ``make(document) -> NodeSyncWorkspace``.  The tree store is
        attached to the document store, and the controller writes through to
        an in-memory mirror.
    """

    def make(document: str) -> NodeSyncWorkspace:
        documents = DocumentStore(document)
        tree = TreeStore()
        tree.attach(documents)
        mirror = InMemoryContentsMirror()
        controller = ReconciliationController(documents, tree, mirror=mirror)
        return NodeSyncWorkspace(documents, tree, mirror, controller)

    return make
