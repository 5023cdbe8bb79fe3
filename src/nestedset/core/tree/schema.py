# src/nestedset/core/tree/schema.py
"""SQLAlchemy table definition for a nested-set tree.

Uses SQLAlchemy Core (not ORM) for explicit control over the renumbering
statements and compatibility with multiple database backends. The table
is built from a TreeSchema, so column names are whatever the binding says.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

from nestedset.contracts.tree import TreeSchema


def build_tree_table(schema: TreeSchema, metadata: MetaData | None = None) -> Table:
    """Create the Table object for a schema binding.

    Layout: integer autoincrement key, two non-null integer bounds with
    left < right, then one nullable Text column per payload column.

    Bound uniqueness is NOT a database constraint: SQLite and PostgreSQL
    check UNIQUE per row, and the bulk "bound + 2" renumbering passes
    through transient duplicates. Uniqueness is an engine invariant,
    verified by invariants.check_tree().

    Args:
        schema: Schema binding
        metadata: MetaData to attach to (a fresh one if omitted)

    Returns:
        SQLAlchemy Table
    """
    metadata = metadata if metadata is not None else MetaData()
    left = Column(schema.left_column, Integer, nullable=False)
    right = Column(schema.right_column, Integer, nullable=False)

    return Table(
        schema.table,
        metadata,
        Column(schema.key_column, Integer, primary_key=True, autoincrement=True),
        left,
        right,
        *(Column(name, Text) for name in schema.payload_columns),
        # Expression form so reserved words like "left" get quoted
        CheckConstraint(left < right, name=f"ck_{schema.table}_bounds"),
        Index(f"ix_{schema.table}_{schema.left_column}_{schema.right_column}", left, right),
        Index(f"ix_{schema.table}_{schema.right_column}", right),
    )
