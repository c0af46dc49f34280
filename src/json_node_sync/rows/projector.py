"""Row Model Projector: a node's rows as editable plain JSON text.

All functions here are pure and deterministic for a given node; the same
output seeds the editor and renders the read-only preview.
"""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from typing import Any

from json_node_sync.tree.nodes import NodeData, PathSegment

__all__ = [
    "ROOT_LABEL",
    "editable_text",
    "project",
    "render_path_label",
    "render_preview",
]

ROOT_LABEL = "$"

_EMPTY_OBJECT = "{}"


def _whole_float(value: Any) -> bool:
    return isinstance(value, float) and value.is_integer() and abs(value) < 1e21


def _literal(value: Any) -> str:
    """Render a scalar the way it reads in JSON, strings left unquoted."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if _whole_float(value):
            return str(int(value))
        return json.dumps(value)
    return str(value)


def project(node: NodeData | None) -> str:
    """Return the plain-JSON text form of a node.

    Args:
        node: The node to render, or None.

    Returns:
        - ``"{}"`` when there is no node or it has no rows.
        - For a leaf, the literal text of its value (a string is NOT quoted).
        - Otherwise a 2-space indented JSON object of the node's keyed rows,
          excluding object/array rows since their content lives in child
          nodes.
    """
    if node is None or not node.text:
        return _EMPTY_OBJECT
    if node.is_leaf:
        return _literal(node.text[0].value)

    fields: dict[str, Any] = {}
    for row in node.text:
        if row.key is not None and not row.type.is_container:
            # 1e2 scans as a float; write it back as 100, not 100.0
            fields[row.key] = int(row.value) if _whole_float(row.value) else row.value
    return json.dumps(fields, indent=2, ensure_ascii=False)


def render_preview(node: NodeData | None) -> str:
    """Read-only preview text for a node; identical to ``project``."""
    return project(node)


def editable_text(node: NodeData | None) -> str:
    """Return the text used to seed the editor for ``node``.

    Same as ``project`` except a string leaf is written as a JSON string
    literal, so saving the unchanged buffer parses back to the same value.
    """
    if node is not None and node.is_leaf and isinstance(node.text[0].value, str):
        return json.dumps(node.text[0].value, ensure_ascii=False)
    return project(node)


def render_path_label(path: Sequence[PathSegment] | None) -> str:
    """Return a display label for a path.

    The root renders as ``$``.  Every other segment is appended in brackets:
    integers bare, strings double-quoted.

    Example::

        render_path_label(["customer", 0, "id"])  # '$["customer"][0]["id"]'
    """
    if not path:
        return ROOT_LABEL
    parts = [ROOT_LABEL]
    for segment in path:
        if isinstance(segment, int) and not isinstance(segment, bool):
            parts.append(f"[{segment}]")
        else:
            parts.append(f"[{json.dumps(str(segment), ensure_ascii=False)}]")
    return "".join(parts)
