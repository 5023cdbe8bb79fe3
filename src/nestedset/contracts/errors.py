"""Exception hierarchy for the nested-set engine.

Every error raised by the engine derives from NestedSetError, so callers can
catch the whole family in one place. The more specific classes also derive
from the closest builtin (ValueError, LookupError, KeyError) so that generic
handlers keep working.
"""

from __future__ import annotations

from typing import Any


class NestedSetError(Exception):
    """Base class for all nested-set engine errors."""


class ConfigurationError(NestedSetError, ValueError):
    """Raised when a table, column or prefix name is invalid at setup time."""


class SchemaCompatibilityError(ConfigurationError):
    """Raised when an existing table lacks columns the schema binding declares."""


class NodeNotFoundError(NestedSetError, LookupError):
    """Raised when an operation requires a node that does not exist.

    Attributes:
        key: The key that was looked up
    """

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"Node {key!r} does not exist")


class InvalidOperationError(NestedSetError):
    """Raised when a structural mutation is not allowed in the current tree state.

    Covers a second root, a second child via CHILD placement, and relative
    placements without a target.

    Attributes:
        placement: Placement mode that was attempted (None for non-insert operations)
    """

    def __init__(self, message: str, *, placement: str | None = None) -> None:
        self.placement = placement
        super().__init__(message)


class UnknownColumnError(NestedSetError, KeyError):
    """Raised when a payload references a column the schema binding does not declare.

    Attributes:
        column: The undeclared column name
    """

    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(column)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the argument
        return f"{self.column!r} is not a declared payload column"


class TreePersistenceError(NestedSetError):
    """Raised when the backing store rejects a statement or the connection fails.

    During a mutation the transaction has already been rolled back when this
    is raised; the caller can assume the tree is unchanged.
    """


class TreeIntegrityError(NestedSetError):
    """Raised when a stored tree violates the nested-set invariants.

    Attributes:
        violations: Human-readable description of each violation found
    """

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        summary = "; ".join(violations[:5])
        if len(violations) > 5:
            summary += f"; ... ({len(violations) - 5} more)"
        super().__init__(f"Tree violates nested-set invariants: {summary}")
