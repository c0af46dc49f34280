"""Collaborator protocols for the reconciliation controller.

Defines the structural interfaces the controller consumes.  Hosts can plug in
their own document and tree stores without inheriting from any base class;
any class with conformant members passes ``isinstance`` checks.

Example::

    from json_node_sync.protocols import ContentsMirror

    class ClipboardMirror:
        def set_contents(self, text: str, has_changes: bool = False) -> None:
            copy_to_clipboard(text)

    assert isinstance(ClipboardMirror(), ContentsMirror)  # True
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from json_node_sync.tree.nodes import NodeData

__all__ = ["ContentsMirror", "DocumentSource", "TreeSource"]


@runtime_checkable
class DocumentSource(Protocol):
    """Owner of the canonical document text.

    ``set_text`` fully replaces the document.  Rebuilding the tree after a
    change is the store's side effect, not the caller's.
    """

    def get_text(self) -> str: ...

    def set_text(self, text: str) -> None: ...


@runtime_checkable
class TreeSource(Protocol):
    """Owner of the node list rebuilt from the document, and the selection."""

    @property
    def nodes(self) -> Sequence[NodeData]: ...

    @property
    def selected_node(self) -> NodeData | None: ...

    def set_selected_node(self, node: NodeData | None) -> None: ...

    def replace_node(self, node: NodeData) -> None: ...


@runtime_checkable
class ContentsMirror(Protocol):
    """Write-only copy of the document kept for persistence or export."""

    def set_contents(self, text: str, has_changes: bool = False) -> None: ...
