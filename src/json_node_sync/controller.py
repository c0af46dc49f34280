"""ReconciliationController: orchestrates one node edit from text to document.

This is the wiring layer between the row model, the patcher and the stores.

Architecture:
- save() parses the edited text, decides the edit shape from the node, patches
  the current document text, commits the result to the document store and
  re-selects the edited node among the rebuilt nodes by path.
- A leaf node is saved as a single whole-value replacement at its path.  Any
  other node is saved as a field-set edit limited to its primitive fields;
  a non-object value saved over such a node clears those fields.
- When the patch cannot be applied the document is left alone and the node is
  replaced in the tree store with rows built from the parsed value.  The
  result status tells the two outcomes apart.
- Invalid JSON is the only failure that keeps the edit session open.

States: idle -> parsing -> patching -> reconciling -> idle, with
parsing -> idle on invalid input and patching -> fallback -> idle when the
patch fails.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import StrEnum, auto
from typing import TYPE_CHECKING

from json_node_sync.exceptions import RowParseError
from json_node_sync.patch.patcher import StructuredTextPatcher
from json_node_sync.result import SaveResult, SaveStatus
from json_node_sync.rows.parser import ParsedEdit, parse_edit
from json_node_sync.rows.projector import editable_text, render_path_label, project
from json_node_sync.tree.nodes import NodeData, PathSegment

if TYPE_CHECKING:
    from json_node_sync.protocols import ContentsMirror, DocumentSource, TreeSource

__all__ = ["ControllerState", "EditSession", "ReconciliationController"]

logger = logging.getLogger(__name__)


class ControllerState(StrEnum):
    """Where a save currently is."""

    IDLE = auto()
    PARSING = auto()
    PATCHING = auto()
    RECONCILING = auto()
    FALLBACK = auto()


@dataclass
class EditSession:
    """State of one open editor.

    Attributes:
        node:  The node being edited.
        text:  The editor buffer.
        error: Message of the last failed save, cleared on every text change.
    """

    node: NodeData
    text: str
    error: str | None = None


class ReconciliationController:
    """Applies node edits to the document and keeps the tree selection in sync.

    Example::

        documents = DocumentStore('{"user": {"name": "Ann", "age": 30}}')
        tree = TreeStore()
        tree.attach(documents)
        controller = ReconciliationController(documents, tree)

        node = tree.find_by_path(("user",))
        result = controller.save(node, '{"name": "Ann", "age": 31}')
        result.status            # SaveStatus.COMMITTED
        documents.get_text()     # '{"user": {"name": "Ann", "age": 31}}'
    """

    def __init__(
        self,
        document_store: DocumentSource,
        tree_store: TreeSource,
        mirror: ContentsMirror | None = None,
        patcher: StructuredTextPatcher | None = None,
    ) -> None:
        """Initialise the controller.

        Args:
            document_store: Owner of the document text.  Its ``set_text`` is
                expected to rebuild ``tree_store``.
            tree_store: Owner of the nodes and the selection.
            mirror: Optional write-only copy of the document, updated after
                every committed save.
            patcher: Text patcher.  Defaults to ``StructuredTextPatcher()``.
        """
        self._documents = document_store
        self._tree = tree_store
        self._mirror = mirror
        self._patcher = patcher if patcher is not None else StructuredTextPatcher()
        self._state = ControllerState.IDLE
        self._transitions: list[ControllerState] = []
        self._session: EditSession | None = None

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def last_transitions(self) -> tuple[ControllerState, ...]:
        """States entered during the most recent save, in order."""
        return tuple(self._transitions)

    # ------------------------------------------------------------------
    # Read-only text forms
    # ------------------------------------------------------------------

    @staticmethod
    def get_editable_text(node: NodeData | None) -> str:
        return editable_text(node)

    @staticmethod
    def render_preview(node: NodeData | None) -> str:
        return project(node)

    @staticmethod
    def render_path_label(path: Sequence[PathSegment] | None) -> str:
        return render_path_label(path)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(self, node: NodeData, edited_text: str) -> SaveResult:
        """Apply ``edited_text`` to ``node`` and reconcile the stores.

        Args:
            node:        The node snapshot the text was edited from.
            edited_text: The user's JSON text.

        Returns:
            A SaveResult.  COMMITTED when the document was patched, FALLBACK
            when only the in-memory node was replaced, VALIDATION_ERROR when
            the text is not valid JSON.
        """
        self._transitions = []
        label = render_path_label(node.path)

        self._enter(ControllerState.PARSING)
        try:
            parsed = parse_edit(edited_text)
        except RowParseError as exc:
            logger.debug("Rejected edit at %s: %s", label, exc)
            self._enter(ControllerState.IDLE)
            return SaveResult(
                status=SaveStatus.VALIDATION_ERROR,
                message=str(exc),
                node=node,
                document_text=self._documents.get_text(),
            )

        self._enter(ControllerState.PATCHING)
        current = self._documents.get_text()
        try:
            new_text = self._patch(current, node, parsed)
        except Exception as exc:
            # Any patch-time failure leaves the document alone.
            return self._fall_back(node, parsed, current, exc)

        self._enter(ControllerState.RECONCILING)
        self._documents.set_text(new_text)
        if self._mirror is not None:
            self._mirror.set_contents(new_text, has_changes=False)

        found = next((n for n in self._tree.nodes if n.path == node.path), None)
        if found is not None:
            self._tree.set_selected_node(found)
        else:
            logger.debug("Node at %s vanished after rebuild", label)
        logger.info("Committed edit at %s", label)
        self._enter(ControllerState.IDLE)
        return SaveResult(
            status=SaveStatus.COMMITTED, node=found, document_text=new_text
        )

    def _patch(self, text: str, node: NodeData, parsed: ParsedEdit) -> str:
        if node.is_leaf:
            return self._patcher.apply_at_path(text, node.path, parsed.value)

        field_map = parsed.field_map
        nested = [
            row.key
            for row in node.text
            if row.key in field_map and row.type.is_container
        ]
        if nested:
            logger.info(
                "Overwriting nested values %s at %s",
                nested,
                render_path_label(node.path),
            )
        return self._patcher.apply_field_set(
            text, node.path, node.editable_keys, field_map
        )

    def _fall_back(
        self, node: NodeData, parsed: ParsedEdit, text: str, exc: Exception
    ) -> SaveResult:
        self._enter(ControllerState.FALLBACK)
        replacement = replace(node, text=parsed.rows)
        self._tree.replace_node(replacement)
        logger.warning(
            "Edit at %s not persisted, updated in memory only: %s",
            render_path_label(node.path),
            exc,
        )
        self._enter(ControllerState.IDLE)
        return SaveResult(
            status=SaveStatus.FALLBACK,
            message=str(exc),
            node=replacement,
            document_text=text,
        )

    def _enter(self, state: ControllerState) -> None:
        self._state = state
        self._transitions.append(state)

    # ------------------------------------------------------------------
    # Edit session
    # ------------------------------------------------------------------

    @property
    def session(self) -> EditSession | None:
        """The open edit session, or None when the editor is closed."""
        return self._session

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def open(self, node: NodeData | None = None) -> EditSession:
        """Open (or reset) the editor on ``node``.

        Args:
            node: Node to edit.  Defaults to the tree store's selected node.

        Raises:
            ValueError: No node was given and none is selected.
        """
        target = node if node is not None else self._tree.selected_node
        if target is None:
            msg = "No node to edit: pass a node or select one first"
            raise ValueError(msg)
        self._session = EditSession(node=target, text=editable_text(target))
        return self._session

    def update_text(self, text: str) -> None:
        """Replace the editor buffer and clear the last error."""
        session = self._require_session()
        session.text = text
        session.error = None

    def submit(self) -> SaveResult:
        """Save the editor buffer.

        The session stays open, holding the error message, when the text is
        not valid JSON.  Any other outcome closes it.
        """
        session = self._require_session()
        result = self.save(session.node, session.text)
        if result.status is SaveStatus.VALIDATION_ERROR:
            session.error = result.message
        else:
            self.close()
        return result

    def close(self) -> None:
        """Discard the edit session."""
        self._session = None

    def _require_session(self) -> EditSession:
        if self._session is None:
            msg = "The editor is not open"
            raise RuntimeError(msg)
        return self._session
