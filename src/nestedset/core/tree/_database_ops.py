"""Database operation helpers to reduce boilerplate in the tree mixins.

Consolidates the read-connection pattern and the rollback-then-report
handling every mutation shares.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import Connection, Executable
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError

from nestedset.contracts.errors import NestedSetError, TreePersistenceError

if TYPE_CHECKING:
    from nestedset.core.tree.database import TreeDB

slog = structlog.get_logger(__name__)


class DatabaseOps:
    """Helper for common database operations.

    Reads run on lock-free connections. Writes run inside a transaction
    that is rolled back on any exception; store failures are re-raised as
    TreePersistenceError once the rollback has happened.
    """

    def __init__(self, db: "TreeDB") -> None:
        self._db = db

    def execute_fetchone(self, query: Executable) -> Row[Any] | None:
        """Execute query and return single row or None."""
        try:
            with self._db.read_connection() as conn:
                return conn.execute(query).fetchone()
        except SQLAlchemyError as e:
            raise TreePersistenceError(f"Query failed: {e}") from e

    def execute_fetchall(self, query: Executable) -> list[Row[Any]]:
        """Execute query and return all rows."""
        try:
            with self._db.read_connection() as conn:
                return list(conn.execute(query).fetchall())
        except SQLAlchemyError as e:
            raise TreePersistenceError(f"Query failed: {e}") from e

    def execute_scalar(self, query: Executable) -> Any:
        """Execute query and return the first column of the first row."""
        try:
            with self._db.read_connection() as conn:
                return conn.execute(query).scalar()
        except SQLAlchemyError as e:
            raise TreePersistenceError(f"Query failed: {e}") from e

    @contextmanager
    def write(self, operation: str, *, lock: bool = True) -> Iterator[Connection]:
        """Run a block as one transaction, rolled back on any exception.

        Args:
            operation: Name used in log events and error messages
            lock: Take the whole-table write lock (structural mutations)

        Raises:
            TreePersistenceError: If the store rejected a statement
            NestedSetError: Re-raised unchanged (domain rejections)
        """
        transaction = self._db.write_transaction if lock else self._db.connection
        try:
            with transaction() as conn:
                yield conn
        except SQLAlchemyError as e:
            slog.warning(
                "mutation_rolled_back",
                operation=operation,
                table=self._db.schema.table,
                error=str(e),
            )
            raise TreePersistenceError(f"{operation} failed and was rolled back: {e}") from e
        except NestedSetError as e:
            slog.debug(
                "mutation_rejected",
                operation=operation,
                table=self._db.schema.table,
                reason=type(e).__name__,
            )
            raise
