"""TreeBuilder: converts a JSON document into the flat list of view nodes.

Uses recursive dispatch over the decoded document.  An object becomes one node
whose rows are its immediate fields; each container-valued field then
contributes nodes of its own.  An array has no node of its own: every element
becomes a node at ``path + (index,)``, primitive elements as leaf nodes.

Paths are tuples of segments built during traversal:
- Root is ``()``
- Each level appends the object key (str) or array index (int)
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from itertools import count
from typing import Any

from json_node_sync.patch.scanner import node_value, parse_tree
from json_node_sync.rows.parser import rows_from_value
from json_node_sync.tree.nodes import NodeData, Path

__all__ = ["TreeBuilder"]


@dataclass
class TreeBuilder:
    """Builds ``NodeData`` snapshots from a document.

    Node ids are sequential strings in build order starting at ``"1"``; they
    are only unique within one ``build`` call.

    Example::

        builder = TreeBuilder()
        nodes = builder.build('{"user": {"name": "Ann", "tags": ["a"]}}')
        # [NodeData(path=(),             rows: user<object>),
        #  NodeData(path=("user",),      rows: name="Ann", tags<array>),
        #  NodeData(path=("user", "tags", 0), rows: "a")]
    """

    def build(self, document: str) -> list[NodeData]:
        """Build nodes from document text (comments allowed).

        Args:
            document: JSON document text.  A document holding no value
                (empty, or only comments) yields no nodes.

        Returns:
            Nodes in depth-first order, parents before children.

        Raises:
            DocumentSyntaxError: The text is not well-formed.
        """
        root = parse_tree(document)
        if root is None:
            return []
        return self.build_value(node_value(root))

    def build_value(self, value: Any) -> list[NodeData]:
        """Build nodes from an already decoded JSON value."""
        ids = count(1)
        nodes: list[NodeData] = []
        if isinstance(value, list):
            self._build_elements(value, (), nodes, ids)
        else:
            self._build_node(value, (), nodes, ids)
        return nodes

    def _build_node(
        self, value: Any, path: Path, nodes: list[NodeData], ids: Iterator[int]
    ) -> None:
        """Emit the node for ``value`` then the nodes of its container fields."""
        nodes.append(
            NodeData(id=str(next(ids)), path=path, text=rows_from_value(value))
        )
        if not isinstance(value, dict):
            return
        for key, member in value.items():
            if isinstance(member, dict):
                self._build_node(member, (*path, key), nodes, ids)
            elif isinstance(member, list):
                self._build_elements(member, (*path, key), nodes, ids)

    def _build_elements(
        self,
        items: list[Any],
        path: Path,
        nodes: list[NodeData],
        ids: Iterator[int],
    ) -> None:
        for index, item in enumerate(items):
            if isinstance(item, list):
                self._build_elements(item, (*path, index), nodes, ids)
            else:
                self._build_node(item, (*path, index), nodes, ids)
