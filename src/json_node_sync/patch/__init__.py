"""Patch subpackage: formatting-preserving edits to JSON text by path.

Re-exports the public API for the patch module:
- parse_tree / ParseNode / NodeKind: JSON-with-comments scanner keeping offsets
- find_node_at_location / node_value / parse_document: tree lookups and decoding
- Edit / compute_edits / apply_edits / DELETE: minimal edit scripts
- ParseTreeCache: LRU memo of scanned documents
- StructuredTextPatcher: set/delete at a path, whole-value and field-set edits
"""

from json_node_sync.patch.cache import ParseTreeCache
from json_node_sync.patch.edits import DELETE, Edit, apply_edits, compute_edits
from json_node_sync.patch.patcher import StructuredTextPatcher
from json_node_sync.patch.scanner import (
    NodeKind,
    ParseNode,
    find_node_at_location,
    node_value,
    parse_document,
    parse_tree,
)

__all__ = [
    "DELETE",
    "Edit",
    "NodeKind",
    "ParseNode",
    "ParseTreeCache",
    "StructuredTextPatcher",
    "apply_edits",
    "compute_edits",
    "find_node_at_location",
    "node_value",
    "parse_document",
    "parse_tree",
]
