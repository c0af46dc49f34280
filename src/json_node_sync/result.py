"""SaveResult dataclass and SaveStatus StrEnum for save outcomes.

This module provides the result type returned by ``ReconciliationController``
save calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto

from json_node_sync.tree.nodes import NodeData

__all__ = ["SaveResult", "SaveStatus"]


class SaveStatus(StrEnum):
    """How a save ended.

    - COMMITTED:        The document was patched and the tree rebuilt.
    - FALLBACK:         The patch failed; only the in-memory node was replaced.
    - VALIDATION_ERROR: The edited text was not valid JSON; nothing changed.
    """

    COMMITTED = auto()
    FALLBACK = auto()
    VALIDATION_ERROR = auto()


@dataclass(frozen=True, slots=True)
class SaveResult:
    """Outcome of one save.

    Attributes:
        status:        See SaveStatus.
        message:       The validation or patch error message; None when
                       committed.
        node:          The selected node after the save.  For COMMITTED this
                       is the rebuilt node at the same path (None if the path
                       vanished); for FALLBACK the replacement node; for
                       VALIDATION_ERROR the node that was being edited.
        document_text: The document text after the save.
    """

    status: SaveStatus
    message: str | None = None
    node: NodeData | None = None
    document_text: str | None = None

    @property
    def persisted(self) -> bool:
        """True when the edit reached the document."""
        return self.status is SaveStatus.COMMITTED
