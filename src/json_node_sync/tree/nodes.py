"""NodeRow / NodeData dataclasses and the RowType StrEnum.

A tree node is shown to the user as a flat list of rows, one per immediate
field.  Container-valued fields (objects, arrays) appear as rows too, but
their content lives in child nodes, so those rows carry ``value=None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any

__all__ = ["NodeData", "NodeRow", "Path", "PathSegment", "RowType"]

# Object keys are str, array indices are int.
PathSegment = str | int
Path = tuple[PathSegment, ...]


class RowType(StrEnum):
    """JSON kind of a row's value.

    StrEnum values are the lowercased member names (Python 3.11+):
    - STRING  -> "string"
    - NUMBER  -> "number"
    - BOOLEAN -> "boolean"
    - NULL    -> "null"
    - OBJECT  -> "object"
    - ARRAY   -> "array"
    """

    STRING = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    NULL = auto()
    OBJECT = auto()
    ARRAY = auto()

    @property
    def is_container(self) -> bool:
        """True for OBJECT and ARRAY."""
        return self in (RowType.OBJECT, RowType.ARRAY)


@dataclass(frozen=True, slots=True)
class NodeRow:
    """One immediate field of a node.

    Attributes:
        key:   Field name, or None when the row is the node's own value.
        value: JSON scalar.  Always None for OBJECT/ARRAY rows.
        type:  JSON kind of the field's value.
    """

    key: str | None
    value: Any
    type: RowType


@dataclass(frozen=True, slots=True)
class NodeData:
    """A node of the tree derived from the document.

    Nodes are snapshots: nothing in this package mutates one in place.  An
    edit produces either a new document (and so a rebuilt tree) or a
    replacement node built with ``dataclasses.replace``.

    Attributes:
        id:   Identifier unique within one build of the tree.
        path: Location of the node's value in the document, root first.
              The empty tuple is the root.
        text: The node's rows in display order.
    """

    id: str
    path: Path = ()
    text: tuple[NodeRow, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Callers commonly hand over lists; store tuples so equality and
        # hashing behave like value types.
        if not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))
        if not isinstance(self.text, tuple):
            object.__setattr__(self, "text", tuple(self.text))

    @property
    def is_leaf(self) -> bool:
        """True when the node is a single unnamed primitive value."""
        return len(self.text) == 1 and self.text[0].key is None

    @property
    def editable_keys(self) -> list[str]:
        """Keys of the rows that may be edited as text, in row order."""
        return [
            row.key
            for row in self.text
            if row.key is not None and not row.type.is_container
        ]
