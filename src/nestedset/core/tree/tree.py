# src/nestedset/core/tree/tree.py
"""NestedSetTree: High-level API for one nested-set table.

This is the main interface for reading and mutating a tree. It wraps the
low-level database operations; the methods themselves live in the
reading, ancestry and mutation mixins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

from nestedset.core.tree._ancestry import AncestryMixin
from nestedset.core.tree._database_ops import DatabaseOps
from nestedset.core.tree._interval_reading import IntervalReadingMixin
from nestedset.core.tree._mutations import MutationMixin
from nestedset.core.tree.database import TreeDB
from nestedset.core.tree.invariants import check_tree
from nestedset.core.tree.repositories import TreeNodeRepository

if TYPE_CHECKING:
    from nestedset.contracts import TreeSchema
    from nestedset.core.config import NestedSetSettings


class NestedSetTree(
    IntervalReadingMixin,
    AncestryMixin,
    MutationMixin,
):
    """High-level API for a nested-set tree.

    Reads never take the write lock; inserts and deletes each run as one
    locked transaction.

    Example:
        schema = TreeSchema(table="categories", payload_columns=("name",))
        tree = NestedSetTree(TreeDB.in_memory(schema))

        root = tree.insert_node(Placement.ROOT, payload={"name": "All"})
        books = tree.insert_node(Placement.CHILD, root, {"name": "Books"})
        tree.insert_node(Placement.RIGHT, books, {"name": "Music"})
        tree.read_all_nodes([ReadOption.DEPTH])
    """

    def __init__(self, db: TreeDB) -> None:
        """Initialize tree with database connection.

        Args:
            db: TreeDB bound to the tree table
        """
        self._db = db
        self._schema = db.schema
        self._table = db.table

        # Database operations helper for reduced boilerplate
        self._ops = DatabaseOps(db)

        # Row-to-object conversion
        self._node_repo = TreeNodeRepository(db.schema)

    @classmethod
    def from_settings(cls, settings: NestedSetSettings) -> Self:
        """Connect to the configured database and bind the configured table."""
        return cls(TreeDB.from_settings(settings))

    @property
    def schema(self) -> TreeSchema:
        return self._schema

    @property
    def db(self) -> TreeDB:
        return self._db

    def check(self, *, raise_on_violation: bool = False) -> list[str]:
        """Check the stored tree against the nested-set invariants.

        Args:
            raise_on_violation: Raise TreeIntegrityError instead of returning

        Returns:
            Violations found; empty when the tree is valid
        """
        return check_tree(self.read_all_nodes(), strict=raise_on_violation)

    def close(self) -> None:
        self._db.close()
