"""json-node-sync - edit one node of a JSON tree and patch it back into the document."""

from __future__ import annotations

from json_node_sync.api import (
    apply_at_path,
    apply_field_set,
    build_nodes,
    get_editable_text,
    render_path_label,
    render_preview,
)
from json_node_sync.config import FormattingOptions
from json_node_sync.controller import (
    ControllerState,
    EditSession,
    ReconciliationController,
)
from json_node_sync.exceptions import (
    DocumentSyntaxError,
    NodeSyncError,
    PatchError,
    PatchResolutionError,
    RowParseError,
    ValidationError,
)
from json_node_sync.patch.patcher import StructuredTextPatcher
from json_node_sync.result import SaveResult, SaveStatus
from json_node_sync.stores import (
    DocumentStore,
    FileContentsMirror,
    InMemoryContentsMirror,
    TreeStore,
)
from json_node_sync.tree.builder import TreeBuilder
from json_node_sync.tree.nodes import NodeData, NodeRow, RowType

__version__: str = "0.1.0"
__all__: list[str] = [
    "ControllerState",
    "DocumentStore",
    "DocumentSyntaxError",
    "EditSession",
    "FileContentsMirror",
    "FormattingOptions",
    "InMemoryContentsMirror",
    "NodeData",
    "NodeRow",
    "NodeSyncError",
    "PatchError",
    "PatchResolutionError",
    "ReconciliationController",
    "RowParseError",
    "RowType",
    "SaveResult",
    "SaveStatus",
    "StructuredTextPatcher",
    "TreeBuilder",
    "TreeStore",
    "ValidationError",
    "apply_at_path",
    "apply_field_set",
    "build_nodes",
    "get_editable_text",
    "render_path_label",
    "render_preview",
]
