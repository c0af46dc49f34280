"""Scanner: JSON text (with comments) into a parse tree that keeps offsets.

Every ParseNode records where its text starts and how long it is, so edits
can be expressed as replacements of exact character spans while the rest of
the document, including whitespace and comments, stays untouched.

Accepted input is JSON plus ``//`` line comments, ``/* */`` block comments,
trailing commas in objects and arrays, and a leading byte-order mark.

Tree shape:
- OBJECT children are PROPERTY nodes.
- PROPERTY has exactly two children: the key (STRING) and the value.
- ARRAY children are the element value nodes.
- Scalars (STRING, NUMBER, BOOLEAN, NULL) carry their decoded value.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any, NoReturn

from json_node_sync.exceptions import DocumentSyntaxError

__all__ = [
    "NodeKind",
    "ParseNode",
    "find_node_at_location",
    "node_value",
    "parse_document",
    "parse_tree",
]

_NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS: dict[str, Any] = {"true": True, "false": False, "null": None}
_WHITESPACE = " \t\n\r"


class NodeKind(StrEnum):
    """Kinds of parse-tree nodes."""

    OBJECT = auto()
    ARRAY = auto()
    PROPERTY = auto()
    STRING = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    NULL = auto()


@dataclass(slots=True, eq=False)
class ParseNode:
    """A span of the document text with its decoded meaning.

    Attributes:
        kind:     What the span holds (see NodeKind).
        offset:   Index of the first character of the span.
        length:   Number of characters in the span.
        value:    Decoded value for scalars; None for OBJECT, ARRAY, PROPERTY.
        children: Child nodes (see module docstring for the shape).
        parent:   Enclosing node; None for the root.
    """

    kind: NodeKind
    offset: int
    length: int = 0
    value: Any = None
    children: list[ParseNode] = field(default_factory=list)
    parent: ParseNode | None = field(default=None, repr=False)

    @property
    def end(self) -> int:
        """Index one past the last character of the span."""
        return self.offset + self.length

    @property
    def key(self) -> str | None:
        """The key of a PROPERTY node; None for every other kind."""
        if self.kind is NodeKind.PROPERTY and self.children:
            key: str = self.children[0].value
            return key
        return None


class _Scanner:
    """Recursive-descent scanner over one document string."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 1 if text.startswith("\ufeff") else 0

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def scan(self) -> ParseNode | None:
        self._skip_trivia()
        if self._pos >= len(self._text):
            return None
        root = self._parse_value(None)
        self._skip_trivia()
        if self._pos < len(self._text):
            self._fail("End of file expected")
        return root

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fail(self, message: str) -> NoReturn:
        raise DocumentSyntaxError(message, self._pos)

    def _peek(self) -> str:
        return self._text[self._pos] if self._pos < len(self._text) else ""

    def _skip_trivia(self) -> None:
        text = self._text
        while self._pos < len(text):
            ch = text[self._pos]
            if ch in _WHITESPACE:
                self._pos += 1
            elif text.startswith("//", self._pos):
                newline = len(text)
                for terminator in ("\n", "\r"):
                    found = text.find(terminator, self._pos)
                    if found != -1:
                        newline = min(newline, found)
                self._pos = newline
            elif text.startswith("/*", self._pos):
                close = text.find("*/", self._pos + 2)
                if close == -1:
                    self._fail("Unterminated block comment")
                self._pos = close + 2
            else:
                return

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def _parse_value(self, parent: ParseNode | None) -> ParseNode:
        ch = self._peek()
        if ch == "{":
            return self._parse_object(parent)
        if ch == "[":
            return self._parse_array(parent)
        if ch == '"':
            return self._parse_string(parent)
        if ch == "-" or ch.isdigit():
            return self._parse_number(parent)
        for literal, decoded in _LITERALS.items():
            if self._text.startswith(literal, self._pos):
                end = self._pos + len(literal)
                if end < len(self._text) and (
                    self._text[end].isalnum() or self._text[end] == "_"
                ):
                    break
                kind = NodeKind.NULL if decoded is None else NodeKind.BOOLEAN
                node = ParseNode(
                    kind, self._pos, len(literal), value=decoded, parent=parent
                )
                self._pos = end
                return node
        self._fail("Value expected")

    def _parse_object(self, parent: ParseNode | None) -> ParseNode:
        node = ParseNode(NodeKind.OBJECT, self._pos, parent=parent)
        self._pos += 1
        self._skip_trivia()
        while self._peek() != "}":
            node.children.append(self._parse_property(node))
            self._skip_trivia()
            if self._peek() == ",":
                self._pos += 1
                self._skip_trivia()
            elif self._peek() != "}":
                self._fail("Comma or closing brace expected")
        self._pos += 1
        node.length = self._pos - node.offset
        return node

    def _parse_property(self, parent: ParseNode) -> ParseNode:
        if self._peek() != '"':
            self._fail("Property name expected")
        prop = ParseNode(NodeKind.PROPERTY, self._pos, parent=parent)
        prop.children.append(self._parse_string(prop))
        self._skip_trivia()
        if self._peek() != ":":
            self._fail("Colon expected")
        self._pos += 1
        self._skip_trivia()
        value = self._parse_value(prop)
        prop.children.append(value)
        prop.length = value.end - prop.offset
        return prop

    def _parse_array(self, parent: ParseNode | None) -> ParseNode:
        node = ParseNode(NodeKind.ARRAY, self._pos, parent=parent)
        self._pos += 1
        self._skip_trivia()
        while self._peek() != "]":
            node.children.append(self._parse_value(node))
            self._skip_trivia()
            if self._peek() == ",":
                self._pos += 1
                self._skip_trivia()
            elif self._peek() != "]":
                self._fail("Comma or closing bracket expected")
        self._pos += 1
        node.length = self._pos - node.offset
        return node

    def _parse_string(self, parent: ParseNode | None) -> ParseNode:
        start = self._pos
        text = self._text
        pos = start + 1
        while True:
            if pos >= len(text):
                self._fail("Unterminated string")
            ch = text[pos]
            if ch == '"':
                break
            if ch == "\\":
                pos += 2
                continue
            if ch < " ":
                self._pos = pos
                self._fail("Invalid character in string")
            pos += 1
        raw = text[start : pos + 1]
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            self._fail("Invalid escape sequence in string")
        self._pos = pos + 1
        return ParseNode(
            NodeKind.STRING, start, len(raw), value=decoded, parent=parent
        )

    def _parse_number(self, parent: ParseNode | None) -> ParseNode:
        match = _NUMBER_RE.match(self._text, self._pos)
        if match is None:
            self._fail("Invalid number")
        raw = match.group(0)
        value: int | float
        if any(marker in raw for marker in ".eE"):
            value = float(raw)
        else:
            value = int(raw)
        node = ParseNode(
            NodeKind.NUMBER, self._pos, len(raw), value=value, parent=parent
        )
        self._pos = match.end()
        return node


# ----------------------------------------------------------------------
# Public functions
# ----------------------------------------------------------------------


def parse_tree(text: str) -> ParseNode | None:
    """Scan ``text`` into a ParseNode tree.

    Args:
        text: Document text.  Comments and trailing commas are allowed.

    Returns:
        The root node, or None when the text holds no value at all (empty,
        or only whitespace and comments).

    Raises:
        DocumentSyntaxError: The text is not well-formed.
    """
    return _Scanner(text).scan()


def find_node_at_location(
    root: ParseNode | None, path: Sequence[str | int]
) -> ParseNode | None:
    """Return the value node at ``path`` below ``root``, or None.

    String segments select an object member (the first one when a key is
    duplicated); integer segments select an array element.  A segment of the
    wrong kind for its container, or an out-of-range index, yields None.
    """
    node = root
    for segment in path:
        if node is None:
            return None
        if isinstance(segment, str):
            if node.kind is not NodeKind.OBJECT:
                return None
            node = next(
                (prop.children[1] for prop in node.children if prop.key == segment),
                None,
            )
        elif isinstance(segment, int) and not isinstance(segment, bool):
            if node.kind is not NodeKind.ARRAY:
                return None
            if not 0 <= segment < len(node.children):
                return None
            node = node.children[segment]
        else:
            return None
    return node


def node_value(node: ParseNode) -> Any:
    """Decode a value node back into plain Python data.

    Later duplicate keys win, as with ``json.loads``.
    """
    if node.kind is NodeKind.OBJECT:
        return {prop.key: node_value(prop.children[1]) for prop in node.children}
    if node.kind is NodeKind.ARRAY:
        return [node_value(child) for child in node.children]
    if node.kind is NodeKind.PROPERTY:
        return node_value(node.children[1])
    return node.value


def parse_document(text: str) -> Any:
    """Decode JSON-with-comments text into plain Python data.

    Returns None for a document holding no value.

    Raises:
        DocumentSyntaxError: The text is not well-formed.
    """
    root = parse_tree(text)
    return None if root is None else node_value(root)
