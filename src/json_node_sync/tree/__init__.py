"""Tree subpackage for the node model and document-to-node conversion.

Re-exports the node model:
- NodeRow: one immediate field of a node (key, value, type)
- NodeData: a node snapshot (id, path, rows)
- RowType: StrEnum of the six JSON kinds a row can hold

``TreeBuilder`` (document text -> NodeData list) lives in
``json_node_sync.tree.builder``.  It is not re-exported here because it
depends on the rows and patch subpackages, which themselves import the node
model from this package.
"""

from json_node_sync.tree.nodes import NodeData, NodeRow, Path, PathSegment, RowType

__all__ = ["NodeData", "NodeRow", "Path", "PathSegment", "RowType"]
