# src/nestedset/core/tree/_mutations.py
"""Structural mutation methods for NestedSetTree.

Every insert and delete renumbers an unbounded set of other rows, so each
one runs as a single transaction holding the whole-table write lock (see
TreeDB.write_transaction). Bounds the mutation depends on are read inside
that transaction, after the lock is taken.

Renumbering is applied per bound with CASE expressions in one UPDATE, so
a row whose left bound stays put can still have its right bound moved.
That is what keeps ancestors of the insertion point enclosing it.

| Placement  | New bounds           | Shifted by +2                                  |
|------------|----------------------|------------------------------------------------|
| ROOT       | (1, 2)               | nothing (table must be empty)                  |
| CHILD of K | (K.right, K.right+1) | right >= K.right; left > K.right               |
| LEFT of K  | (K.left, K.left+1)   | right > K.left;   left >= K.left               |
| RIGHT of K | (K.right+1, K.right+2) | right > K.right; left > K.right              |
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import Connection, case, delete, insert, literal, select, update

from nestedset.contracts import (
    InvalidOperationError,
    NodeNotFoundError,
    Placement,
    TreeNode,
)

if TYPE_CHECKING:
    from sqlalchemy import Table

    from nestedset.contracts import TreeSchema
    from nestedset.core.tree._database_ops import DatabaseOps
    from nestedset.core.tree.repositories import TreeNodeRepository

slog = structlog.get_logger(__name__)


class MutationMixin:
    """Insert and delete methods. Mixed into NestedSetTree."""

    # Shared state annotations (set by NestedSetTree.__init__)
    _schema: TreeSchema
    _table: Table
    _ops: DatabaseOps
    _node_repo: TreeNodeRepository

    def insert_node(
        self,
        placement: Placement | str,
        target: Any = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        """Insert a new node relative to an existing one.

        Args:
            placement: ROOT, CHILD, LEFT or RIGHT
            target: Key of the node the placement is relative to (not for ROOT)
            payload: Values for declared payload columns

        Returns:
            Key assigned to the new node by the store

        Raises:
            UnknownColumnError: If payload names an undeclared column
            InvalidOperationError: Second root, second child, sibling of the
                root, missing target, or unknown placement
            NodeNotFoundError: If target does not exist
            TreePersistenceError: If the store failed (transaction rolled back)
        """
        try:
            placement = Placement(placement)
        except ValueError:
            raise InvalidOperationError(f"Unknown placement: {placement!r}") from None

        # Checked before any store interaction
        values = self._schema.check_payload(payload or {})
        if placement.requires_target and target is None:
            raise InvalidOperationError(
                f"Placement {placement.value!r} requires a target key",
                placement=placement.value,
            )

        with self._ops.write(f"insert_node({placement.value})") as conn:
            if placement is Placement.ROOT:
                left, right = self._place_root(conn)
            else:
                node = self._fetch_for_update(conn, target)
                if placement is Placement.CHILD:
                    left, right = self._place_child(conn, node)
                elif placement is Placement.LEFT:
                    left, right = self._place_left(conn, node)
                else:
                    left, right = self._place_right(conn, node)

            stmt = insert(self._table).values(
                {
                    self._schema.left_column: left,
                    self._schema.right_column: right,
                    **values,
                }
            )
            key = conn.execute(stmt).inserted_primary_key[0]

        slog.info(
            "node_inserted",
            table=self._schema.table,
            placement=placement.value,
            target=target,
            key=key,
            left=left,
            right=right,
        )
        return key

    def delete_subtree(self, key: Any) -> int:
        """Delete a node together with all its descendants.

        The gap the subtree leaves is closed by shifting every bound to its
        right down by the subtree width, all in the same transaction.

        Returns:
            Number of rows deleted (node plus descendants)

        Raises:
            NodeNotFoundError: If no node has this key
            TreePersistenceError: If the store failed (transaction rolled back)
        """
        left = self._table.c[self._schema.left_column]
        right = self._table.c[self._schema.right_column]

        with self._ops.write("delete_subtree") as conn:
            node = self._fetch_for_update(conn, key)
            width = node.width

            deleted = conn.execute(delete(self._table).where(left.between(node.left, node.right))).rowcount
            conn.execute(update(self._table).where(left > node.right).values({self._schema.left_column: left - width}))
            conn.execute(update(self._table).where(right > node.right).values({self._schema.right_column: right - width}))

        slog.info(
            "subtree_deleted",
            table=self._schema.table,
            key=key,
            left=node.left,
            right=node.right,
            deleted=deleted,
        )
        return int(deleted)

    def update_payload(self, key: Any, payload: Mapping[str, Any]) -> None:
        """Overwrite payload columns of an existing node. Bounds are untouched.

        Raises:
            UnknownColumnError: If payload names an undeclared column
            NodeNotFoundError: If no node has this key
            TreePersistenceError: If the store failed (transaction rolled back)
        """
        values = self._schema.check_payload(payload)
        key_column = self._table.c[self._schema.key_column]

        # No renumbering, so no tree lock
        with self._ops.write("update_payload", lock=False) as conn:
            if not values:
                self._fetch_for_update(conn, key)
                return
            result = conn.execute(update(self._table).where(key_column == key).values(values))
            if result.rowcount == 0:
                raise NodeNotFoundError(key)

        slog.debug("payload_updated", table=self._schema.table, key=key, columns=sorted(values))

    # -------------------------------------------------------------------------
    # Placement strategies. Each runs inside the locked transaction and
    # returns the new node's (left, right).
    # -------------------------------------------------------------------------

    def _fetch_for_update(self, conn: Connection, key: Any) -> TreeNode:
        """Read a node inside the write transaction."""
        table = self._table
        row = conn.execute(select(*table.c).where(table.c[self._schema.key_column] == key)).fetchone()
        if row is None:
            raise NodeNotFoundError(key)
        return self._node_repo.load(row)

    def _place_root(self, conn: Connection) -> tuple[int, int]:
        exists = conn.execute(select(literal(1)).select_from(self._table).limit(1)).first()
        if exists is not None:
            raise InvalidOperationError("There can be only one root node", placement=Placement.ROOT.value)
        return 1, 2

    def _place_child(self, conn: Connection, parent: TreeNode) -> tuple[int, int]:
        if not parent.is_leaf:
            # One child at a time: further children go LEFT/RIGHT of an existing one
            raise InvalidOperationError(
                f"Node {parent.key!r} already has a child; place new nodes beside it instead",
                placement=Placement.CHILD.value,
            )
        self._shift(conn, right_from=parent.right, left_from=parent.right + 1)
        return parent.right, parent.right + 1

    def _place_left(self, conn: Connection, sibling: TreeNode) -> tuple[int, int]:
        if sibling.is_root:
            raise InvalidOperationError("The root node cannot have siblings", placement=Placement.LEFT.value)
        self._shift(conn, right_from=sibling.left + 1, left_from=sibling.left)
        return sibling.left, sibling.left + 1

    def _place_right(self, conn: Connection, sibling: TreeNode) -> tuple[int, int]:
        if sibling.is_root:
            raise InvalidOperationError("The root node cannot have siblings", placement=Placement.RIGHT.value)
        self._shift(conn, right_from=sibling.right + 1, left_from=sibling.right + 1)
        return sibling.right + 1, sibling.right + 2

    def _shift(self, conn: Connection, *, right_from: int, left_from: int) -> None:
        """Open a 2-wide gap: +2 on every right >= right_from and every left >= left_from.

        left_from is never below right_from - 1 for the placements above, so
        every row with a shifted left also has a shifted right.
        """
        left = self._table.c[self._schema.left_column]
        right = self._table.c[self._schema.right_column]
        conn.execute(
            update(self._table)
            .where(right >= right_from)
            .values(
                {
                    self._schema.left_column: case((left >= left_from, left + 2), else_=left),
                    self._schema.right_column: right + 2,
                }
            )
        )
