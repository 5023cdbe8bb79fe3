"""Repository layer for tree rows.

Handles the seam between SQLAlchemy rows (physical column names, backend
numeric types) and TreeNode (logical roles, plain ints). This is NOT a
trust boundary - the table is OUR data. A row missing a bound column
crashes with KeyError.
"""

from typing import Any

from sqlalchemy.engine import Row as SARow

from nestedset.contracts.enums import ReadOption
from nestedset.contracts.tree import TreeNode, TreeSchema


class TreeNodeRepository:
    """Repository for tree node records."""

    def __init__(self, schema: TreeSchema) -> None:
        self._schema = schema

    def load(self, row: SARow[Any]) -> TreeNode:
        """Load TreeNode from database row.

        Derived facts are picked up when the query selected them under
        their fact labels. PostgreSQL returns NUMERIC/BOOLEAN and SQLite
        REAL for some of them, so they are normalised to int HERE.
        """
        mapping = row._mapping
        schema = self._schema
        return TreeNode(
            key=mapping[schema.key_column],
            left=int(mapping[schema.left_column]),
            right=int(mapping[schema.right_column]),
            payload={name: mapping[name] for name in schema.payload_columns},
            depth=self._fact(mapping, ReadOption.DEPTH),
            children=self._fact(mapping, ReadOption.CHILD_COUNT),
            lower=self._fact(mapping, ReadOption.LOWER_SIBLING_COUNT),
            upper=self._fact(mapping, ReadOption.UPPER_SIBLING_COUNT),
        )

    def load_all(self, rows: list[SARow[Any]]) -> list[TreeNode]:
        return [self.load(row) for row in rows]

    def _fact(self, mapping: Any, option: ReadOption) -> int | None:
        label = self._schema.fact_label(option)
        if label not in mapping:
            return None
        return int(mapping[label])
