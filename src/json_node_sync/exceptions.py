"""Exception taxonomy for json-node-sync.

Two families of recoverable failures exist, both scoped to a single save:

- ``ValidationError``: the user's edited text is not valid JSON.  The edit
  session stays open so the text can be corrected.
- ``PatchError``: the edit could not be applied to the document text, either
  because the node's path no longer resolves or because the document itself
  cannot be scanned.  The controller recovers by updating the in-memory node
  only.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
    "DocumentSyntaxError",
    "NodeSyncError",
    "PatchError",
    "PatchResolutionError",
    "RowParseError",
    "ValidationError",
]


class NodeSyncError(Exception):
    """Base class for every error raised by json-node-sync."""


class ValidationError(NodeSyncError):
    """User input could not be interpreted."""


class RowParseError(ValidationError):
    """Edited text is not valid JSON.

    Attributes:
        message: The decoder message, without position information.
        lineno:  1-based line of the failure, or None when unknown.
        colno:   1-based column of the failure, or None when unknown.
    """

    def __init__(
        self, message: str, lineno: int | None = None, colno: int | None = None
    ) -> None:
        self.message = message
        self.lineno = lineno
        self.colno = colno
        if lineno is not None and colno is not None:
            super().__init__(f"{message}: line {lineno} column {colno}")
        else:
            super().__init__(message)


class PatchError(NodeSyncError):
    """An edit could not be applied to the document text."""


class PatchResolutionError(PatchError):
    """A path does not resolve to an editable location in the document.

    Attributes:
        path: The full path that failed to resolve.
    """

    def __init__(self, message: str, path: Sequence[str | int] = ()) -> None:
        super().__init__(message)
        self.path: tuple[str | int, ...] = tuple(path)


class DocumentSyntaxError(PatchError):
    """The document text is not well-formed JSON (comments allowed).

    Attributes:
        offset: Character offset in the document where scanning failed.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset
