# src/nestedset/core/tree/_interval_reading.py
"""Interval reader methods for NestedSetTree.

Structural facts come from one self-join: every target row t1 is paired
with each candidate t2 whose interval holds t1's left bound. t1 itself is
excluded unless it is the root, so for a non-root target the group is
exactly its proper ancestors and for the root it is the root alone.

The derived-fact expressions are kept literally compatible with existing
trees' consumers:

- depth    COUNT(*) - 1 + (t1.left > 1)
- children ROUND((t1.right - t1.left - 1) / 2)  descendants at ANY depth
- lower    (t1.left - MAX(t2.left)) > 1         1 if a left sibling exists
- upper    ((MIN(t2.right) - t1.right) - (t1.left > 1)) / 2 > 0
                                                1 if a right sibling exists
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from sqlalchemy import Integer, Select, and_, cast, func, literal, or_, select

from nestedset.contracts import ConfigurationError, ReadOption, TreeNode

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Table

    from nestedset.contracts import TreeSchema
    from nestedset.core.tree._database_ops import DatabaseOps
    from nestedset.core.tree.repositories import TreeNodeRepository


def _as_int(condition: ColumnElement[bool]) -> ColumnElement[int]:
    # PostgreSQL refuses arithmetic on BOOLEAN; SQLite already yields 0/1
    return cast(condition, Integer)


def _requested_options(options: Iterable[ReadOption | str] | ReadOption | str) -> set[ReadOption]:
    """Normalise a read selection. A single option or value selects just that fact.

    Raises:
        ConfigurationError: If a value is not a ReadOption
    """
    if isinstance(options, str):
        options = [options]
    requested: set[ReadOption] = set()
    for option in options:
        try:
            requested.add(ReadOption(option))
        except ValueError:
            valid = ", ".join(o.value for o in ReadOption)
            raise ConfigurationError(f"Unknown read option {option!r}; expected one of: {valid}") from None
    return requested


class IntervalReadingMixin:
    """Read-only structural queries. Mixed into NestedSetTree."""

    # Shared state annotations (set by NestedSetTree.__init__)
    _schema: TreeSchema
    _table: Table
    _ops: DatabaseOps
    _node_repo: TreeNodeRepository

    def read_node(self, key: Any, options: Iterable[ReadOption | str] | ReadOption | str = ()) -> TreeNode | None:
        """Read one node with the requested derived facts.

        Args:
            key: Primary key of the node
            options: Derived facts to compute (ReadOption members or values,
                or a single one)

        Returns:
            TreeNode, or None if no node has this key

        Raises:
            ConfigurationError: If an option is not a ReadOption
            TreePersistenceError: If the store rejects the query
        """
        query = self._facts_query(options, key=key)
        if key is None:
            return None
        row = self._ops.execute_fetchone(query)
        if row is None:
            return None
        return self._node_repo.load(row)

    def read_all_nodes(self, options: Iterable[ReadOption | str] | ReadOption | str = ()) -> list[TreeNode]:
        """Read every node with the requested derived facts, ordered by left bound.

        Raises:
            ConfigurationError: If an option is not a ReadOption
            TreePersistenceError: If the store rejects the query
        """
        rows = self._ops.execute_fetchall(self._facts_query(options))
        return self._node_repo.load_all(rows)

    def read_simple_node(self, key: Any) -> TreeNode | None:
        """Read one node's bounds and payload, without the self-join.

        Returns:
            TreeNode with no derived facts, or None if absent
        """
        table = self._table
        query = select(*table.c).where(table.c[self._schema.key_column] == key).limit(1)
        row = self._ops.execute_fetchone(query)
        if row is None:
            return None
        return self._node_repo.load(row)

    def get_root(self) -> TreeNode | None:
        """Read the root node (left bound 1), or None for an empty tree."""
        table = self._table
        query = select(*table.c).where(table.c[self._schema.left_column] == 1).limit(1)
        row = self._ops.execute_fetchone(query)
        if row is None:
            return None
        return self._node_repo.load(row)

    def count_nodes(self) -> int:
        """Number of nodes in the tree."""
        query = select(func.count()).select_from(self._table)
        return int(self._ops.execute_scalar(query))

    def _facts_query(self, options: Iterable[ReadOption | str] | ReadOption | str, *, key: Any = None) -> Select[Any]:
        """Build the self-join that computes derived facts.

        Only the requested facts are selected.
        """
        requested = _requested_options(options)
        schema = self._schema
        t1 = self._table.alias("t1")
        t2 = self._table.alias("t2")
        k1, l1, r1 = (t1.c[name] for name in schema.bound_columns)
        k2, l2, r2 = (t2.c[name] for name in schema.bound_columns)

        columns: list[Any] = [k1, l1, r1, *(t1.c[name] for name in schema.payload_columns)]
        if ReadOption.DEPTH in requested:
            depth = func.count() - 1 + _as_int(l1 > 1)
            columns.append(depth.label(schema.fact_label(ReadOption.DEPTH)))
        if ReadOption.CHILD_COUNT in requested:
            children = func.round((r1 - l1 - 1) / 2)
            columns.append(children.label(schema.fact_label(ReadOption.CHILD_COUNT)))
        if ReadOption.LOWER_SIBLING_COUNT in requested:
            lower = _as_int((l1 - func.max(l2)) > 1)
            columns.append(lower.label(schema.fact_label(ReadOption.LOWER_SIBLING_COUNT)))
        if ReadOption.UPPER_SIBLING_COUNT in requested:
            upper = _as_int(((func.min(r2) - r1) - _as_int(l1 > 1)) / 2 > 0)
            columns.append(upper.label(schema.fact_label(ReadOption.UPPER_SIBLING_COUNT)))

        query = (
            select(*columns)
            .select_from(t1)
            .join(
                t2,
                and_(
                    l1.between(l2, r2),
                    or_(k2 != k1, l1 == literal(1)),
                ),
            )
        )
        if key is not None:
            query = query.where(k1 == key)
        # Grouping by every t1 column is equivalent to grouping by the key
        # (it is unique) and satisfies strict GROUP BY modes.
        return query.group_by(*t1.c).order_by(l1)
