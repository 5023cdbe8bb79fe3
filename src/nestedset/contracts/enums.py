"""Read options and placement modes used across subsystem boundaries."""

from enum import StrEnum


class ReadOption(StrEnum):
    """Derived facts that can be requested from the interval reader.

    Values double as the suffix of the exported fact name
    (prefix + value, e.g. "ns_level").
    """

    DEPTH = "level"
    CHILD_COUNT = "children"
    LOWER_SIBLING_COUNT = "lower"
    UPPER_SIBLING_COUNT = "upper"


class Placement(StrEnum):
    """Where a new node is placed relative to an existing one."""

    ROOT = "root"
    CHILD = "child"
    LEFT = "left"
    RIGHT = "right"

    @property
    def requires_target(self) -> bool:
        """Whether this placement is relative to an existing node."""
        return self is not Placement.ROOT
