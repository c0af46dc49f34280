"""Tests for ReconciliationController: save outcomes, state and edit sessions."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import pytest

from json_node_sync.controller import ControllerState, ReconciliationController
from json_node_sync.exceptions import PatchResolutionError
from json_node_sync.patch.patcher import StructuredTextPatcher
from json_node_sync.patch.scanner import parse_document
from json_node_sync.result import SaveStatus
from json_node_sync.stores import DocumentStore, InMemoryContentsMirror, TreeStore
from json_node_sync.tree.nodes import NodeData, NodeRow, RowType

USER_DOC = '{"user":{"name":"Ann","age":30}}'

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class Wiring:
    def __init__(
        self, text: str, patcher: StructuredTextPatcher | None = None
    ) -> None:
        self.documents = DocumentStore(text)
        self.tree = TreeStore()
        self.tree.attach(self.documents)
        self.mirror = InMemoryContentsMirror()
        self.controller = ReconciliationController(
            self.documents, self.tree, mirror=self.mirror, patcher=patcher
        )

    def node(self, *path: str | int) -> NodeData:
        found = self.tree.find_by_path(path)
        assert found is not None
        return found


class RejectingPatcher(StructuredTextPatcher):
    """Fails on one key so a field-set edit breaks part-way through."""

    def __init__(self, key: str) -> None:
        super().__init__()
        self.key = key

    def set_at_path(self, text: str, path: Sequence[str | int], value: Any) -> str:
        if path and path[-1] == self.key:
            raise PatchResolutionError(f"refusing {self.key}", path)
        return super().set_at_path(text, path, value)


class OverflowingPatcher(StructuredTextPatcher):
    """Fails the way the scanner does on a number too long to convert."""

    def apply_field_set(self, *args: Any, **kwargs: Any) -> str:
        raise ValueError("Exceeds the limit (4300 digits) for integer string")


@pytest.fixture
def wiring() -> Wiring:
    return Wiring(USER_DOC)


# ---------------------------------------------------------------------------
# Committed saves
# ---------------------------------------------------------------------------


class TestCommit:
    def test_object_node(self, wiring: Wiring) -> None:
        result = wiring.controller.save(wiring.node("user"), '{"name":"Ann","age":31}')
        assert result.status is SaveStatus.COMMITTED
        assert result.persisted
        assert result.message is None
        assert wiring.documents.get_text() == '{"user":{"name":"Ann","age":31}}'
        assert result.document_text == wiring.documents.get_text()

    def test_reselects_rebuilt_node_by_path(self, wiring: Wiring) -> None:
        before = wiring.node("user")
        result = wiring.controller.save(before, '{"name":"Ann","age":31}')
        assert result.node is not None
        assert result.node.path == ("user",)
        assert result.node is wiring.tree.selected_node
        assert result.node is not before
        assert NodeRow("age", 31, RowType.NUMBER) in result.node.text

    def test_field_union_deletes_missing_keys(self) -> None:
        wiring = Wiring('{"a": 1, "b": 2}')
        result = wiring.controller.save(wiring.node(), '{"a": 5}')
        assert result.status is SaveStatus.COMMITTED
        assert wiring.documents.get_text() == '{"a": 5}'

    def test_new_keys_are_added(self, wiring: Wiring) -> None:
        edited = '{"name":"Ann","age":30,"vip":true}'
        wiring.controller.save(wiring.node("user"), edited)
        assert wiring.documents.get_text() == (
            '{"user":{"name":"Ann","age":30,"vip":true}}'
        )

    def test_nested_rows_untouched_unless_named(self) -> None:
        wiring = Wiring('{"name": "Ann", "address": {"city": "Oslo"}}')
        wiring.controller.save(wiring.node(), '{"name": "Bea"}')
        assert wiring.documents.get_text() == (
            '{"name": "Bea", "address": {"city": "Oslo"}}'
        )

    def test_named_nested_row_is_overwritten(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        wiring = Wiring('{"name": "Ann", "address": {"city": "Oslo"}}')
        with caplog.at_level(logging.INFO, logger="json_node_sync.controller"):
            wiring.controller.save(wiring.node(), '{"name": "Ann", "address": "n/a"}')
        assert wiring.documents.get_text() == '{"name": "Ann", "address": "n/a"}'
        assert "Overwriting nested values ['address']" in caplog.text

    def test_empty_string_key_object_is_not_a_leaf(self) -> None:
        wiring = Wiring('{"": 5}')
        root = wiring.node()
        assert not root.is_leaf
        wiring.controller.save(root, "6")
        assert parse_document(wiring.documents.get_text()) == {}

    def test_empty_string_key_can_be_removed(self) -> None:
        wiring = Wiring('{"": 1, "a": 2}')
        result = wiring.controller.save(wiring.node(), '{"a": 3}')
        assert result.status is SaveStatus.COMMITTED
        assert parse_document(wiring.documents.get_text()) == {"a": 3}

    def test_exponent_number_resaved_as_integer(self) -> None:
        wiring = Wiring('{"n": 1e2, "a": 1}')
        root = wiring.node()
        wiring.controller.save(root, wiring.controller.get_editable_text(root))
        text = wiring.documents.get_text()
        assert "100.0" not in text
        assert parse_document(text) == {"n": 100, "a": 1}

    def test_non_object_clears_fields(self, wiring: Wiring) -> None:
        wiring.controller.save(wiring.node("user"), "42")
        assert wiring.documents.get_text() == '{"user":{}}'

    def test_leaf_replaced_whole(self) -> None:
        wiring = Wiring('{"tags": ["a", "b"]}')
        leaf = wiring.node("tags", 1)
        result = wiring.controller.save(leaf, '"c"')
        assert result.status is SaveStatus.COMMITTED
        assert wiring.documents.get_text() == '{"tags": ["a", "c"]}'
        assert result.node is not None
        assert result.node.text == (NodeRow(None, "c", RowType.STRING),)

    def test_leaf_can_become_object(self) -> None:
        wiring = Wiring('{"tags": ["a"]}')
        result = wiring.controller.save(wiring.node("tags", 0), '{"k": 1}')
        assert parse_document(wiring.documents.get_text()) == {"tags": [{"k": 1}]}
        assert result.node is not None
        assert result.node.text == (NodeRow("k", 1, RowType.NUMBER),)

    def test_unchanged_text_is_a_no_op_commit(self) -> None:
        doc = '{\n  // keep\n  "a": 1\n}'
        wiring = Wiring(doc)
        node = wiring.node()
        result = wiring.controller.save(node, wiring.controller.get_editable_text(node))
        assert result.status is SaveStatus.COMMITTED
        assert wiring.documents.get_text() == doc

    def test_mirror_written(self, wiring: Wiring) -> None:
        wiring.controller.save(wiring.node("user"), '{"name":"Ann","age":31}')
        assert wiring.mirror.writes == 1
        assert wiring.mirror.contents == wiring.documents.get_text()
        assert wiring.mirror.has_changes is False

    def test_transitions(self, wiring: Wiring) -> None:
        wiring.controller.save(wiring.node("user"), '{"name":"Ann","age":31}')
        assert wiring.controller.last_transitions == (
            ControllerState.PARSING,
            ControllerState.PATCHING,
            ControllerState.RECONCILING,
            ControllerState.IDLE,
        )
        assert wiring.controller.state is ControllerState.IDLE

    def test_works_without_mirror(self) -> None:
        documents = DocumentStore('{"a": 1}')
        tree = TreeStore()
        tree.attach(documents)
        controller = ReconciliationController(documents, tree)
        node = tree.find_by_path(())
        assert node is not None
        assert controller.save(node, '{"a": 2}').status is SaveStatus.COMMITTED


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------


class TestValidationError:
    def test_invalid_json_changes_nothing(self, wiring: Wiring) -> None:
        node = wiring.node("user")
        result = wiring.controller.save(node, "{name: Ann}")
        assert result.status is SaveStatus.VALIDATION_ERROR
        assert result.message is not None
        assert "line 1 column 2" in result.message
        assert result.node is node
        assert result.document_text == USER_DOC
        assert wiring.documents.get_text() == USER_DOC
        assert wiring.mirror.writes == 0

    def test_transitions(self, wiring: Wiring) -> None:
        wiring.controller.save(wiring.node("user"), "nope")
        assert wiring.controller.last_transitions == (
            ControllerState.PARSING,
            ControllerState.IDLE,
        )

    def test_deep_nesting_is_a_validation_error(self, wiring: Wiring) -> None:
        result = wiring.controller.save(wiring.node("user"), "[" * 100_000)
        assert result.status is SaveStatus.VALIDATION_ERROR
        assert wiring.controller.state is ControllerState.IDLE
        assert wiring.documents.get_text() == USER_DOC


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------


class TestFallback:
    def test_failing_key_leaves_document_unchanged(self) -> None:
        doc = '{"a": 1, "b": 2}'
        wiring = Wiring(doc, patcher=RejectingPatcher("b"))
        node = wiring.node()
        result = wiring.controller.save(node, '{"a": 10, "b": 20}')
        assert result.status is SaveStatus.FALLBACK
        assert not result.persisted
        assert result.message == "refusing b"
        assert wiring.documents.get_text() == doc
        assert result.document_text == doc
        assert wiring.mirror.writes == 0

    def test_node_replaced_in_memory(self) -> None:
        wiring = Wiring('{"a": 1, "b": 2}', patcher=RejectingPatcher("b"))
        node = wiring.node()
        result = wiring.controller.save(node, '{"a": 10, "b": 20}')
        assert result.node is not None
        assert result.node.id == node.id
        assert result.node.path == node.path
        assert result.node.text == (
            NodeRow("a", 10, RowType.NUMBER),
            NodeRow("b", 20, RowType.NUMBER),
        )
        assert wiring.tree.selected_node is result.node
        assert wiring.tree.nodes[0] is result.node

    def test_vanished_path(self, wiring: Wiring) -> None:
        stale = NodeData("99", ("gone",), (NodeRow("x", 1, RowType.NUMBER),))
        result = wiring.controller.save(stale, '{"x": 2}')
        assert result.status is SaveStatus.FALLBACK
        assert result.message is not None
        assert '$["gone"]' in result.message
        assert wiring.documents.get_text() == USER_DOC
        assert wiring.tree.selected_node is result.node

    def test_unparseable_document(self) -> None:
        wiring = Wiring("{")
        node = NodeData("1", (), (NodeRow("a", 1, RowType.NUMBER),))
        result = wiring.controller.save(node, '{"a": 2}')
        assert result.status is SaveStatus.FALLBACK
        assert wiring.documents.get_text() == "{"

    def test_transitions_and_warning(
        self, wiring: Wiring, caplog: pytest.LogCaptureFixture
    ) -> None:
        stale = NodeData("99", ("gone",), (NodeRow("x", 1, RowType.NUMBER),))
        with caplog.at_level(logging.WARNING, logger="json_node_sync.controller"):
            wiring.controller.save(stale, '{"x": 2}')
        assert wiring.controller.last_transitions == (
            ControllerState.PARSING,
            ControllerState.PATCHING,
            ControllerState.FALLBACK,
            ControllerState.IDLE,
        )
        assert "not persisted" in caplog.text

    def test_any_patch_time_exception_falls_back(self) -> None:
        doc = '{"a": 1}'
        wiring = Wiring(doc, patcher=OverflowingPatcher())
        result = wiring.controller.save(wiring.node(), '{"a": 2}')
        assert result.status is SaveStatus.FALLBACK
        assert result.message is not None
        assert "4300 digits" in result.message
        assert wiring.documents.get_text() == doc
        assert wiring.mirror.writes == 0
        assert wiring.controller.state is ControllerState.IDLE
        assert wiring.controller.last_transitions[-2:] == (
            ControllerState.FALLBACK,
            ControllerState.IDLE,
        )


# ---------------------------------------------------------------------------
# Edit session
# ---------------------------------------------------------------------------


class TestEditSession:
    def test_open_defaults_to_selected_node(self, wiring: Wiring) -> None:
        node = wiring.node("user")
        wiring.tree.set_selected_node(node)
        session = wiring.controller.open()
        assert wiring.controller.is_open
        assert session.node is node
        assert session.text == '{\n  "name": "Ann",\n  "age": 30\n}'
        assert session.error is None

    def test_open_without_node_raises(self, wiring: Wiring) -> None:
        with pytest.raises(ValueError, match="No node"):
            wiring.controller.open()

    def test_open_leaf_seeds_quoted_string(self) -> None:
        wiring = Wiring('["x"]')
        session = wiring.controller.open(wiring.node(0))
        assert session.text == '"x"'

    def test_submit_valid_closes(self, wiring: Wiring) -> None:
        wiring.controller.open(wiring.node("user"))
        wiring.controller.update_text('{"name":"Ann","age":31}')
        result = wiring.controller.submit()
        assert result.status is SaveStatus.COMMITTED
        assert not wiring.controller.is_open
        assert wiring.controller.session is None

    def test_submit_invalid_stays_open_with_error(self, wiring: Wiring) -> None:
        wiring.controller.open(wiring.node("user"))
        wiring.controller.update_text("{name: Ann}")
        result = wiring.controller.submit()
        assert result.status is SaveStatus.VALIDATION_ERROR
        session = wiring.controller.session
        assert session is not None
        assert session.error == result.message
        assert session.text == "{name: Ann}"
        assert wiring.documents.get_text() == USER_DOC

    def test_update_text_clears_error(self, wiring: Wiring) -> None:
        wiring.controller.open(wiring.node("user"))
        wiring.controller.update_text("{")
        wiring.controller.submit()
        wiring.controller.update_text("{}")
        session = wiring.controller.session
        assert session is not None
        assert session.error is None

    def test_submit_fallback_closes(self) -> None:
        wiring = Wiring('{"a": 1, "b": 2}', patcher=RejectingPatcher("b"))
        wiring.controller.open(wiring.node())
        wiring.controller.update_text('{"a": 1, "b": 3}')
        assert wiring.controller.submit().status is SaveStatus.FALLBACK
        assert not wiring.controller.is_open

    def test_close_discards(self, wiring: Wiring) -> None:
        wiring.controller.open(wiring.node("user"))
        wiring.controller.close()
        assert wiring.controller.session is None

    @pytest.mark.parametrize("action", ["update_text", "submit"])
    def test_requires_open_session(self, wiring: Wiring, action: str) -> None:
        with pytest.raises(RuntimeError, match="not open"):
            if action == "update_text":
                wiring.controller.update_text("{}")
            else:
                wiring.controller.submit()


class TestTextForms:
    def test_static_helpers(self) -> None:
        leaf = NodeData("1", (0,), (NodeRow(None, "x", RowType.STRING),))
        assert ReconciliationController.get_editable_text(leaf) == '"x"'
        assert ReconciliationController.render_preview(leaf) == "x"
        assert ReconciliationController.render_path_label(["a", 0]) == '$["a"][0]'
