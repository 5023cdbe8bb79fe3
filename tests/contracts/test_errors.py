"""Tests for the nested-set exception hierarchy."""

import pytest

from nestedset.contracts import (
    ConfigurationError,
    InvalidOperationError,
    NestedSetError,
    NodeNotFoundError,
    SchemaCompatibilityError,
    TreeIntegrityError,
    TreePersistenceError,
    UnknownColumnError,
)


class TestHierarchy:
    """Every engine error is a NestedSetError and the closest builtin."""

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            SchemaCompatibilityError("bad"),
            NodeNotFoundError(1),
            InvalidOperationError("bad"),
            UnknownColumnError("x"),
            TreePersistenceError("bad"),
            TreeIntegrityError(["bad"]),
        ],
    )
    def test_all_derive_from_base(self, error: Exception) -> None:
        assert isinstance(error, NestedSetError)

    def test_builtin_bases(self) -> None:
        assert isinstance(ConfigurationError("bad"), ValueError)
        assert isinstance(SchemaCompatibilityError("bad"), ConfigurationError)
        assert isinstance(NodeNotFoundError(1), LookupError)
        assert isinstance(UnknownColumnError("x"), KeyError)


class TestAttributes:
    def test_node_not_found_carries_key(self) -> None:
        error = NodeNotFoundError(42)
        assert error.key == 42
        assert str(error) == "Node 42 does not exist"

    def test_invalid_operation_carries_placement(self) -> None:
        error = InvalidOperationError("nope", placement="child")
        assert error.placement == "child"
        assert str(error) == "nope"
        assert InvalidOperationError("nope").placement is None

    def test_unknown_column_message_is_readable(self) -> None:
        """KeyError would repr() the argument; the message names the column instead."""
        error = UnknownColumnError("colour")
        assert error.column == "colour"
        assert str(error) == "'colour' is not a declared payload column"

    def test_integrity_error_summarises_violations(self) -> None:
        violations = [f"violation {i}" for i in range(7)]
        error = TreeIntegrityError(violations)

        assert error.violations == violations
        message = str(error)
        assert message.startswith("Tree violates nested-set invariants: violation 0")
        assert "violation 4" in message
        assert "violation 5" not in message
        assert "(2 more)" in message
