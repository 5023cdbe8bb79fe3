# src/nestedset/core/tree/formatters.py
"""Output formatters for tree nodes.

Formatters turn TreeNode lists into CLI output: an indented outline for
people, JSON lines for machines.
"""

import json
from typing import Any, Protocol

from nestedset.contracts import TreeNode, TreeSchema


class TreeFormatter(Protocol):
    """Protocol for node list formatters."""

    def format(self, nodes: list[TreeNode]) -> str:
        """Format nodes (ordered by left bound) for output."""
        ...


def relative_depths(nodes: list[TreeNode]) -> list[int]:
    """Depth of each node relative to the first, for nodes ordered by left bound.

    Uses the reader's depth fact when present, otherwise the chain of open
    intervals, so it also works on a bare subtree.
    """
    if nodes and all(node.depth is not None for node in nodes):
        base = nodes[0].depth or 0
        return [(node.depth or 0) - base for node in nodes]

    depths: list[int] = []
    open_chain: list[TreeNode] = []
    for node in nodes:
        while open_chain and open_chain[-1].right < node.left:
            open_chain.pop()
        depths.append(len(open_chain))
        open_chain.append(node)
    return depths


class OutlineFormatter:
    """Format nodes as an indented outline."""

    def __init__(self, schema: TreeSchema, *, label_column: str | None = None, indent: str = "  ") -> None:
        """
        Args:
            schema: Schema binding (for fact labels)
            label_column: Payload column shown as the node label, defaults
                to the first declared payload column
            indent: One indentation step
        """
        self._schema = schema
        self._indent = indent
        if label_column is None and schema.payload_columns:
            label_column = schema.payload_columns[0]
        self._label_column = label_column

    def format(self, nodes: list[TreeNode]) -> str:
        if not nodes:
            return "(empty)"

        lines: list[str] = []
        for node, depth in zip(nodes, relative_depths(nodes), strict=True):
            label = ""
            if self._label_column is not None and node.payload.get(self._label_column) is not None:
                label = f" {node.payload[self._label_column]}"
            facts = "".join(f" {name}={value}" for name, value in node.facts(self._schema).items())
            lines.append(f"{self._indent * depth}[{node.key}]{label} ({node.left}, {node.right}){facts}")
        return "\n".join(lines)


class JSONLinesFormatter:
    """Format nodes as JSON lines, one row-shaped object per node."""

    def __init__(self, schema: TreeSchema) -> None:
        self._schema = schema

    def format_node(self, node: TreeNode) -> str:
        record: dict[str, Any] = node.to_dict(self._schema)
        return json.dumps(record, allow_nan=False, default=str)

    def format(self, nodes: list[TreeNode]) -> str:
        return "\n".join(self.format_node(node) for node in nodes)
