# src/nestedset/core/tree/_ancestry.py
"""Ancestor and descendant resolution methods for NestedSetTree."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from nestedset.contracts import TreeNode

if TYPE_CHECKING:
    from sqlalchemy import Table

    from nestedset.contracts import TreeSchema
    from nestedset.core.tree._database_ops import DatabaseOps
    from nestedset.core.tree.repositories import TreeNodeRepository


class AncestryMixin:
    """Ancestor chain and subtree queries. Mixed into NestedSetTree.

    Pure reads: no lock, one query each. An unknown key yields [].
    """

    # Shared state annotations (set by NestedSetTree.__init__)
    _schema: TreeSchema
    _table: Table
    _ops: DatabaseOps
    _node_repo: TreeNodeRepository

    def get_parent_chain(self, key: Any) -> list[TreeNode]:
        """Every node whose interval holds the target's left bound.

        Returns:
            Root first, target last (target included)
        """
        target = self._table.alias("t1")
        candidate = self._table.alias("t2")
        key_column, left, right = self._schema.bound_columns

        query = (
            select(*candidate.c)
            .select_from(target)
            .join(candidate, target.c[left].between(candidate.c[left], candidate.c[right]))
            .where(target.c[key_column] == key)
            .order_by(candidate.c[left])
        )
        return self._node_repo.load_all(self._ops.execute_fetchall(query))

    def get_subtree(self, key: Any) -> list[TreeNode]:
        """Every node whose left bound lies within the target's interval.

        Returns:
            Target first, then its descendants in preorder
        """
        target = self._table.alias("t1")
        member = self._table.alias("t2")
        key_column, left, right = self._schema.bound_columns

        query = (
            select(*member.c)
            .select_from(target)
            .join(member, member.c[left].between(target.c[left], target.c[right]))
            .where(target.c[key_column] == key)
            .order_by(member.c[left])
        )
        return self._node_repo.load_all(self._ops.execute_fetchall(query))

    def get_children(self, key: Any) -> list[TreeNode]:
        """Immediate children of a node, left to right.

        Derived from the preorder subtree: the first node after the target is
        its first child, and each following child starts after the previous
        child's right bound.
        """
        subtree = self.get_subtree(key)
        if not subtree:
            return []

        children: list[TreeNode] = []
        cursor = subtree[0].left
        for node in subtree[1:]:
            if node.left > cursor:
                children.append(node)
                cursor = node.right
        return children
