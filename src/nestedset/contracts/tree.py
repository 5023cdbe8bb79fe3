"""Schema binding and node records for nested-set trees.

TreeSchema maps the logical roles (key, left bound, right bound, payload)
to physical names. It is constructed once, validated in __post_init__, and
passed to every component. There are no setters.

TreeNode is what every read returns: bounds, payload, and whichever derived
facts the caller asked for.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from nestedset.contracts.enums import ReadOption
from nestedset.contracts.errors import ConfigurationError, UnknownColumnError

# Names are interpolated into DDL and LOCK statements, so only plain
# identifiers are accepted.
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _require_identifier(role: str, value: object) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{role} is not a valid name: {value!r}")
    if not _IDENTIFIER_PATTERN.match(value):
        raise ConfigurationError(f"{role} must be a plain SQL identifier, got {value!r}")
    return value


@dataclass(frozen=True, slots=True)
class TreeSchema:
    """Immutable mapping from logical tree roles to physical column names.

    Attributes:
        table: Table holding the tree (one tree per table)
        key_column: Store-assigned primary key column
        left_column: Left bound column
        right_column: Right bound column
        payload_columns: Caller-defined columns, read and written verbatim
        prefix: Prepended to derived fact names when nodes are exported
    """

    table: str
    key_column: str = "id"
    left_column: str = "lft"
    right_column: str = "rgt"
    payload_columns: tuple[str, ...] = ()
    prefix: str = "ns_"

    def __post_init__(self) -> None:
        _require_identifier("table", self.table)
        bound = (
            _require_identifier("key_column", self.key_column),
            _require_identifier("left_column", self.left_column),
            _require_identifier("right_column", self.right_column),
        )
        if len(set(bound)) != len(bound):
            raise ConfigurationError(f"key, left and right columns must be distinct, got {bound}")

        if isinstance(self.payload_columns, str) or not isinstance(self.payload_columns, Iterable):
            raise ConfigurationError(f"payload_columns must be a sequence of names, got {self.payload_columns!r}")
        payload = tuple(self.payload_columns)
        seen: set[str] = set()
        for column in payload:
            _require_identifier("payload column", column)
            if column in bound:
                raise ConfigurationError(f"payload column {column!r} collides with a bound column")
            if column in seen:
                raise ConfigurationError(f"payload column {column!r} is declared twice")
            seen.add(column)
        # Frozen dataclass: normalise lists to tuples via object.__setattr__
        object.__setattr__(self, "payload_columns", payload)

        if not isinstance(self.prefix, str):
            raise ConfigurationError(f"prefix is not a valid prefix: {self.prefix!r}")
        # Derived facts are selected under these labels alongside the payload
        for option in ReadOption:
            label = self.fact_label(option)
            if label in payload or label in bound:
                raise ConfigurationError(f"column {label!r} collides with the derived fact label for {option.name}")

    @property
    def bound_columns(self) -> tuple[str, str, str]:
        """Key, left and right column names, in that order."""
        return (self.key_column, self.left_column, self.right_column)

    @property
    def all_columns(self) -> tuple[str, ...]:
        """Bound columns followed by payload columns."""
        return (*self.bound_columns, *self.payload_columns)

    def fact_label(self, option: ReadOption) -> str:
        """Exported name of a derived fact, e.g. "ns_level"."""
        return f"{self.prefix}{option.value}"

    def check_payload(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Return payload as a dict after checking every key is declared.

        Raises:
            UnknownColumnError: If a key is not a declared payload column
        """
        for column in payload:
            if column not in self.payload_columns:
                raise UnknownColumnError(column)
        return dict(payload)


@dataclass(frozen=True, slots=True)
class TreeNode:
    """One tree element as read from the store.

    Derived facts are None unless the corresponding ReadOption was
    requested.

    Note:
        ``children`` is the literal ``ROUND((right - left - 1) / 2)``: the
        number of descendants at any depth, not of immediate children. The
        sibling facts ``lower`` and ``upper`` are 0/1 flags, not counts.
    """

    key: Any
    left: int
    right: int
    payload: Mapping[str, Any] = field(default_factory=dict)
    depth: int | None = None
    children: int | None = None
    lower: int | None = None
    upper: int | None = None

    @property
    def is_root(self) -> bool:
        return self.left == 1

    @property
    def is_leaf(self) -> bool:
        return self.right == self.left + 1

    @property
    def width(self) -> int:
        """Number of bound values the subtree occupies (right - left + 1)."""
        return self.right - self.left + 1

    def contains(self, other: TreeNode) -> bool:
        """Whether this node is a proper ancestor of ``other``."""
        return self.left < other.left and other.right < self.right

    def facts(self, schema: TreeSchema) -> dict[str, int]:
        """Requested derived facts keyed by their prefixed export name."""
        values = {
            ReadOption.DEPTH: self.depth,
            ReadOption.CHILD_COUNT: self.children,
            ReadOption.LOWER_SIBLING_COUNT: self.lower,
            ReadOption.UPPER_SIBLING_COUNT: self.upper,
        }
        return {schema.fact_label(option): value for option, value in values.items() if value is not None}

    def to_dict(self, schema: TreeSchema) -> dict[str, Any]:
        """Flatten into a row-shaped mapping using the physical column names."""
        row: dict[str, Any] = {
            schema.key_column: self.key,
            schema.left_column: self.left,
            schema.right_column: self.right,
        }
        row.update(self.payload)
        row.update(self.facts(schema))
        return row
