"""Row Model Parser: edited JSON text back into typed rows.

The inference rules here are shared by every path that turns a value into
rows: interpreting a save, and the in-memory fallback when a patch cannot be
applied.  Keeping one copy guarantees that projecting a node and parsing the
result yields the same rows for every non-nested node shape.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from json_node_sync.exceptions import RowParseError
from json_node_sync.tree.nodes import NodeRow, RowType

__all__ = ["ParsedEdit", "infer_row_type", "parse_edit", "rows_from_value"]


def _reject_constant(name: str) -> Any:
    # json.loads accepts NaN/Infinity by default; strict JSON does not.
    msg = f"Invalid JSON constant {name!r}"
    raise ValueError(msg)


def infer_row_type(value: Any) -> RowType:
    """Return the RowType of a decoded JSON value.

    Args:
        value: Any value produced by ``json.loads``.

    Returns:
        The matching RowType.  Unknown Python types fall back to STRING.
    """
    if value is None:
        return RowType.NULL
    if isinstance(value, list):
        return RowType.ARRAY
    # CRITICAL: bool MUST be checked before int, bool subclasses int
    if isinstance(value, bool):
        return RowType.BOOLEAN
    if isinstance(value, (int, float)):
        return RowType.NUMBER
    if isinstance(value, dict):
        return RowType.OBJECT
    return RowType.STRING


def _row(key: str | None, value: Any) -> NodeRow:
    row_type = infer_row_type(value)
    return NodeRow(
        key=key,
        value=None if row_type.is_container else value,
        type=row_type,
    )


def rows_from_value(value: Any) -> tuple[NodeRow, ...]:
    """Build rows for a decoded value.

    An object yields one keyed row per member, in member order.  Anything
    else (scalar or array) yields a single row with no key.  Container
    values never carry content into a row; their value is None.
    """
    if isinstance(value, dict):
        return tuple(_row(str(key), member) for key, member in value.items())
    return (_row(None, value),)


@dataclass(frozen=True, slots=True)
class ParsedEdit:
    """Result of parsing edited text.

    Attributes:
        value: The decoded JSON value.
        rows:  Rows inferred from ``value`` (see ``rows_from_value``).
    """

    value: Any
    rows: tuple[NodeRow, ...]

    @property
    def is_object(self) -> bool:
        """True when the text decoded to a JSON object."""
        return isinstance(self.value, dict)

    @property
    def field_map(self) -> dict[str, Any]:
        """The decoded object, or an empty mapping for any other value."""
        return dict(self.value) if isinstance(self.value, dict) else {}


def parse_edit(text: str) -> ParsedEdit:
    """Parse edited text as strict JSON.

    Args:
        text: The editor buffer.

    Returns:
        A ParsedEdit holding the value and its rows.

    Raises:
        RowParseError: The text is not valid JSON.  This is the only
            exception this function raises.
    """
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise RowParseError(exc.msg, exc.lineno, exc.colno) from exc
    except ValueError as exc:
        raise RowParseError(str(exc)) from exc
    except RecursionError as exc:
        msg = "JSON nested too deeply"
        raise RowParseError(msg) from exc
    return ParsedEdit(value=value, rows=rows_from_value(value))
