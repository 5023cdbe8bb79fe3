# src/nestedset/core/tree/__init__.py
"""Tree: the nested-set maintenance and query engine.

Primary API:
    NestedSetTree - Reads, ancestry queries and locked mutations
    TreeDB - Database connection and write-lock management

Helpers:
    check_tree - Invariant checker over TreeNode lists
    build_tree_table - SQLAlchemy Table for a schema binding
    OutlineFormatter, JSONLinesFormatter - CLI output
"""

from nestedset.core.tree.database import TreeDB
from nestedset.core.tree.formatters import (
    JSONLinesFormatter,
    OutlineFormatter,
    TreeFormatter,
)
from nestedset.core.tree.invariants import check_tree
from nestedset.core.tree.schema import build_tree_table
from nestedset.core.tree.tree import NestedSetTree

__all__ = [
    "JSONLinesFormatter",
    "NestedSetTree",
    "OutlineFormatter",
    "TreeDB",
    "TreeFormatter",
    "build_tree_table",
    "check_tree",
]
