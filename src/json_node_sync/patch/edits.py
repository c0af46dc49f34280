"""Edit scripts: minimal text replacements that set or delete a value at a path.

``compute_edits`` never rewrites text outside the span it has to touch.  New
text is laid out to blend in with its surroundings:

- A replaced container value is indented to the depth of the line it lands on.
- A member added to a multi-line container goes on its own line, indented like
  its preceding sibling.
- A member added to a single-line container reuses the separators already
  used in that container (``","`` vs ``", "`` and ``":"`` vs ``": "``).

Deleting a member removes exactly one adjoining comma: the one before it when
it has a preceding sibling, otherwise the one after it.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Final

from json_node_sync.config import FormattingOptions
from json_node_sync.exceptions import PatchError, PatchResolutionError
from json_node_sync.patch.scanner import (
    NodeKind,
    ParseNode,
    find_node_at_location,
    parse_tree,
)
from json_node_sync.rows.projector import render_path_label

__all__ = ["DELETE", "Edit", "apply_edits", "compute_edits"]


class _Delete:
    """Sentinel type: remove the value instead of setting it."""

    _instance: _Delete | None = None

    def __new__(cls) -> _Delete:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DELETE"


DELETE: Final = _Delete()

# Marks "no pre-scanned tree supplied" (None means "empty document").
_UNSCANNED: Final = object()


@dataclass(frozen=True, slots=True)
class Edit:
    """Replace ``length`` characters at ``offset`` with ``content``."""

    offset: int
    length: int
    content: str

    @property
    def end(self) -> int:
        return self.offset + self.length


def apply_edits(text: str, edits: Sequence[Edit]) -> str:
    """Apply non-overlapping edits to ``text``.

    Offsets in every edit refer to the original ``text``; edits are applied
    from the end of the text backwards so earlier offsets stay valid.

    Raises:
        ValueError: Two edits overlap.
    """
    result = text
    limit = len(text)
    for edit in sorted(edits, key=lambda e: (e.offset, e.length), reverse=True):
        if edit.end > limit:
            msg = f"Overlapping edit at offset {edit.offset}"
            raise ValueError(msg)
        result = result[: edit.offset] + edit.content + result[edit.end :]
        limit = edit.offset
    return result


# ----------------------------------------------------------------------
# Layout helpers
# ----------------------------------------------------------------------


def _line_indent(text: str, offset: int) -> str:
    """Leading whitespace of the line containing ``offset``."""
    start = max(text.rfind("\n", 0, offset), text.rfind("\r", 0, offset)) + 1
    end = start
    while end < len(text) and text[end] in " \t":
        end += 1
    return text[start:end]


def _is_multiline(text: str, node: ParseNode) -> bool:
    span = text[node.offset : node.end]
    return "\n" in span or "\r" in span


def _serialize(
    value: Any, options: FormattingOptions, indent: str, inline: bool = False
) -> str:
    """JSON text for ``value``; nested lines are prefixed with ``indent``."""
    try:
        if inline or not isinstance(value, (dict, list)) or not value:
            return json.dumps(value, ensure_ascii=False, allow_nan=False)
        dumped = json.dumps(
            value, ensure_ascii=False, allow_nan=False, indent=options.indent_unit
        )
    except (TypeError, ValueError) as exc:
        msg = f"Value cannot be written as JSON: {exc}"
        raise PatchError(msg) from exc
    return dumped.replace("\n", options.eol + indent)


def _between(text: str, left: ParseNode, right: ParseNode) -> str:
    return text[left.end : right.offset]


def _colon(text: str, container: ParseNode) -> str:
    """Key/value separator used by the first member of ``container``."""
    if container.kind is NodeKind.OBJECT and container.children:
        key, value = container.children[0].children
        found = _between(text, key, value)
        if found.strip() == ":":
            return found
    return ": "


def _comma(text: str, container: ParseNode) -> str:
    """Member separator used inside a single-line ``container``."""
    children = container.children
    if len(children) >= 2:
        found = _between(text, children[0], children[1])
        if found.strip() == ",":
            return found
    if container.kind is NodeKind.OBJECT and children:
        return ", " if _colon(text, container).endswith(" ") else ","
    return ", "


def _member_text(
    text: str,
    parent: ParseNode,
    segment: str | int,
    value: Any,
    options: FormattingOptions,
    indent: str,
    inline: bool,
) -> str:
    rendered = _serialize(value, options, indent, inline=inline)
    if parent.kind is NodeKind.OBJECT:
        key = json.dumps(segment, ensure_ascii=False)
        return f"{key}{_colon(text, parent)}{rendered}"
    return rendered


def _insert_member(
    text: str,
    parent: ParseNode,
    segment: str | int,
    value: Any,
    options: FormattingOptions,
) -> Edit:
    """Append a member to ``parent`` (object property or array element)."""
    if parent.children:
        previous = parent.children[-1]
        if _is_multiline(text, parent):
            indent = _line_indent(text, previous.offset)
            member = _member_text(text, parent, segment, value, options, indent, False)
            return Edit(previous.end, 0, f",{options.eol}{indent}{member}")
        member = _member_text(text, parent, segment, value, options, "", True)
        return Edit(previous.end, 0, _comma(text, parent) + member)

    inner = Edit(parent.offset + 1, parent.length - 2, "")
    interior = text[inner.offset : inner.end]
    if interior.strip():
        # Keep comments inside an otherwise empty container.
        inner = Edit(parent.offset + 1, 0, "")
    multiline_document = "\n" in text or "\r" in text
    if not multiline_document:
        member = _member_text(text, parent, segment, value, options, "", True)
        return Edit(inner.offset, inner.length, member)
    outer = _line_indent(text, parent.offset)
    indent = outer + options.indent_unit
    member = _member_text(text, parent, segment, value, options, indent, False)
    content = f"{options.eol}{indent}{member}{options.eol}{outer}"
    return Edit(inner.offset, inner.length, content)


def _remove_member(parent: ParseNode, member: ParseNode) -> Edit:
    """Remove ``member`` from ``parent`` together with one adjoining comma."""
    siblings = parent.children
    if len(siblings) == 1:
        return Edit(parent.offset + 1, parent.length - 2, "")
    index = siblings.index(member)
    if index > 0:
        start = siblings[index - 1].end
        return Edit(start, member.end - start, "")
    return Edit(member.offset, siblings[1].offset - member.offset, "")


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------


def compute_edits(
    text: str,
    path: Sequence[str | int],
    value: Any,
    options: FormattingOptions | None = None,
    *,
    root: Any = _UNSCANNED,
) -> list[Edit]:
    """Compute the edits that set (or delete) the value at ``path``.

    Args:
        text:    Current document text.
        path:    Location to edit, root first.  ``str`` segments address
                 object members, ``int`` segments array elements.
        value:   New value, or ``DELETE`` to remove the member at ``path``.
        options: Layout of inserted text.  Defaults to ``FormattingOptions()``.
        root:    Parse tree of ``text`` when the caller already has one
                 (None for an empty document).  Scanned on demand otherwise.

    Returns:
        The edits to hand to ``apply_edits``.  Empty when deleting a key that
        is already absent.

    Raises:
        PatchResolutionError: The parent of ``path`` does not exist, is not
            a container of the right kind, or an array index is beyond the
            end of the array.  Also raised when deleting the root.
        DocumentSyntaxError: ``text`` is not well-formed.
        PatchError: ``value`` cannot be written as JSON.
    """
    options = options if options is not None else FormattingOptions()
    tree: ParseNode | None = parse_tree(text) if root is _UNSCANNED else root
    path = tuple(path)
    deleting = value is DELETE

    if not path:
        if deleting:
            msg = "Cannot delete the document root"
            raise PatchResolutionError(msg, path)
        if tree is None:
            return [Edit(0, 0, _serialize(value, options, ""))]
        indent = _line_indent(text, tree.offset)
        return [Edit(tree.offset, tree.length, _serialize(value, options, indent))]

    *parent_path, segment = path
    parent = find_node_at_location(tree, parent_path)
    if parent is None:
        msg = f"Path {render_path_label(parent_path)} does not exist"
        raise PatchResolutionError(msg, path)

    if parent.kind is NodeKind.OBJECT and isinstance(segment, str):
        prop = next((p for p in parent.children if p.key == segment), None)
        if prop is None:
            if deleting:
                return []
            return [_insert_member(text, parent, segment, value, options)]
        if deleting:
            return [_remove_member(parent, prop)]
        target = prop.children[1]
        rendered = _serialize(value, options, _line_indent(text, prop.offset))
        return [Edit(target.offset, target.length, rendered)]

    if (
        parent.kind is NodeKind.ARRAY
        and isinstance(segment, int)
        and not isinstance(segment, bool)
    ):
        size = len(parent.children)
        if 0 <= segment < size:
            element = parent.children[segment]
            if deleting:
                return [_remove_member(parent, element)]
            indent = _line_indent(text, element.offset)
            rendered = _serialize(value, options, indent)
            return [Edit(element.offset, element.length, rendered)]
        if segment == size and not deleting:
            return [_insert_member(text, parent, segment, value, options)]
        msg = (
            f"Index {segment} is out of range for {render_path_label(parent_path)}"
            f" (length {size})"
        )
        raise PatchResolutionError(msg, path)

    msg = (
        f"Cannot address {segment!r} inside {parent.kind} at "
        f"{render_path_label(parent_path)}"
    )
    raise PatchResolutionError(msg, path)
