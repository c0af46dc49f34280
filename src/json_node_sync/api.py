"""Public API functions for json-node-sync.

Stateless helpers for hosts that do not need the full controller: the text
forms shown to the user, tree building, and one-shot patches.  Each patch
call creates a fresh StructuredTextPatcher so no cache state is shared
between calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from json_node_sync.config import FormattingOptions
from json_node_sync.patch.patcher import StructuredTextPatcher
from json_node_sync.rows.projector import editable_text, project
from json_node_sync.rows.projector import render_path_label as _render_path_label
from json_node_sync.tree.builder import TreeBuilder
from json_node_sync.tree.nodes import NodeData, PathSegment

__all__ = [
    "apply_at_path",
    "apply_field_set",
    "build_nodes",
    "get_editable_text",
    "render_path_label",
    "render_preview",
]


def get_editable_text(node: NodeData | None) -> str:
    """Return the text that seeds the editor for ``node``.

    Args:
        node: The node to edit, or None.

    Returns:
        ``"{}"`` without a node; a JSON literal for a leaf; otherwise a
        2-space indented JSON object of the node's primitive fields.
    """
    return editable_text(node)


def render_preview(node: NodeData | None) -> str:
    """Return the read-only text form of ``node`` (leaf strings unquoted)."""
    return project(node)


def render_path_label(path: Sequence[PathSegment] | None) -> str:
    """Return the ``$["a"][0]`` style label of ``path``; ``$`` for the root."""
    return _render_path_label(path)


def build_nodes(document: str) -> list[NodeData]:
    """Build the node list for a document.

    Raises:
        DocumentSyntaxError: The document is not well-formed.
    """
    return TreeBuilder().build(document)


def apply_at_path(
    document: str,
    path: Sequence[PathSegment],
    new_value: Any,
    options: FormattingOptions | None = None,
) -> str:
    """Return ``document`` with the value at ``path`` replaced by ``new_value``.

    Args:
        document:  Document text (comments allowed).
        path:      Location of the value, root first.
        new_value: Any JSON-serializable value.
        options:   Layout of inserted text.  Defaults to ``FormattingOptions()``.

    Raises:
        PatchResolutionError: ``path`` does not resolve.
        DocumentSyntaxError: ``document`` is not well-formed.
    """
    return StructuredTextPatcher(options).apply_at_path(document, path, new_value)


def apply_field_set(
    document: str,
    path: Sequence[PathSegment],
    editable_keys: Iterable[str],
    field_map: Mapping[str, Any],
    options: FormattingOptions | None = None,
) -> str:
    """Return ``document`` with the object at ``path`` matching ``field_map``.

    Keys in ``editable_keys`` missing from ``field_map`` are deleted; every
    key of ``field_map`` is set.  The operation is all-or-nothing.

    Raises:
        PatchResolutionError: ``path`` does not resolve.
        DocumentSyntaxError: ``document`` is not well-formed.
    """
    return StructuredTextPatcher(options).apply_field_set(
        document, path, editable_keys, field_map
    )
