"""Default document store, tree store and contents mirrors.

``DocumentStore`` owns the canonical document text.  ``TreeStore`` owns the
nodes rebuilt from it and the current selection; attaching a tree store to a
document store subscribes it, so every ``set_text`` rebuilds the nodes.

All mutation happens on the caller's thread.  The stores do no locking.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path as FilePath

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from json_node_sync.exceptions import DocumentSyntaxError
from json_node_sync.tree.builder import TreeBuilder
from json_node_sync.tree.nodes import NodeData, PathSegment

__all__ = [
    "DocumentStore",
    "FileContentsMirror",
    "InMemoryContentsMirror",
    "TreeStore",
]

logger = logging.getLogger(__name__)

DocumentListener = Callable[[str], None]


class DocumentStore:
    """Single owner of the document text.

    Every ``set_text`` fully replaces the text and then notifies subscribers
    in subscription order.

    Example::

        store = DocumentStore('{"a": 1}')
        store.subscribe(lambda text: print("changed:", text))
        store.set_text('{"a": 2}')   # prints: changed: {"a": 2}
    """

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._listeners: list[DocumentListener] = []

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        """Replace the document and notify every subscriber."""
        self._text = text
        for listener in list(self._listeners):
            listener(text)

    def subscribe(self, listener: DocumentListener) -> Callable[[], None]:
        """Call ``listener(text)`` after every change.

        Returns:
            A callable that removes the subscription.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class TreeStore:
    """Nodes rebuilt from the document, plus the selected node.

    Nodes are immutable snapshots.  ``replace_node`` swaps one snapshot for
    another without touching the document; it is how in-memory-only edits
    are shown.
    """

    def __init__(self, builder: TreeBuilder | None = None) -> None:
        self._builder = builder if builder is not None else TreeBuilder()
        self._nodes: list[NodeData] = []
        self._selected: NodeData | None = None

    # ------------------------------------------------------------------
    # TreeSource surface
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> Sequence[NodeData]:
        return tuple(self._nodes)

    @property
    def selected_node(self) -> NodeData | None:
        return self._selected

    def set_selected_node(self, node: NodeData | None) -> None:
        self._selected = node

    def replace_node(self, node: NodeData) -> None:
        """Swap in ``node`` for the node at the same path and select it.

        Ids are not stable across rebuilds, so only the path is matched.
        When no node has the path the node is only selected.
        """
        for index, existing in enumerate(self._nodes):
            if existing.path == node.path:
                self._nodes[index] = node
                break
        self._selected = node

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    def rebuild(self, text: str) -> None:
        """Replace every node with nodes built from ``text``.

        A document that cannot be scanned leaves the store empty.
        """
        try:
            self._nodes = self._builder.build(text)
        except DocumentSyntaxError as exc:
            logger.warning("Document could not be parsed, tree cleared: %s", exc)
            self._nodes = []

    def attach(self, document_store: DocumentStore) -> Callable[[], None]:
        """Rebuild now and after every change of ``document_store``.

        Returns:
            A callable that detaches the store.
        """
        self.rebuild(document_store.get_text())
        return document_store.subscribe(self.rebuild)

    def find_by_path(self, path: Sequence[PathSegment]) -> NodeData | None:
        """Return the first node whose path equals ``path``, or None."""
        wanted = tuple(path)
        return next((node for node in self._nodes if node.path == wanted), None)


class InMemoryContentsMirror:
    """Contents mirror that keeps the last written text in memory."""

    def __init__(self) -> None:
        self.contents: str | None = None
        self.has_changes = False
        self.writes = 0

    def set_contents(self, text: str, has_changes: bool = False) -> None:
        self.contents = text
        self.has_changes = has_changes
        self.writes += 1


class FileContentsMirror:
    """Contents mirror that writes the document to a file.

    Writes go to a temporary file in the target directory which then replaces
    the target, so readers never see partial content.  A ``PermissionError``
    (typically another process holding the file open) is retried with
    exponential backoff.

    Args:
        path:     File to write.
        encoding: Text encoding.  Defaults to UTF-8.
        attempts: Total write attempts before giving up.  Defaults to 5.
    """

    def __init__(
        self, path: str | os.PathLike[str], encoding: str = "utf-8", attempts: int = 5
    ) -> None:
        if attempts < 1:
            msg = f"attempts must be >= 1, got {attempts}"
            raise ValueError(msg)
        self._path = FilePath(path)
        self._encoding = encoding
        self.has_changes = False
        _retry = retry(
            retry=retry_if_exception_type(PermissionError),
            wait=wait_exponential(multiplier=0.05, max=1),
            stop=stop_after_attempt(attempts),
            reraise=True,
        )
        self._write = _retry(self._write_once)

    @property
    def path(self) -> FilePath:
        return self._path

    def set_contents(self, text: str, has_changes: bool = False) -> None:
        self._write(text)
        self.has_changes = has_changes

    def _write_once(self, text: str) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding=self._encoding, newline="") as fh:
                fh.write(text)
            os.replace(temp_path, self._path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise
