"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core.
Settings classes are NOT re-exported here - import them from
nestedset.core.config.

Import patterns:
    # Contracts (lightweight, no heavy dependencies)
    from nestedset.contracts import Placement, TreeNode, TreeSchema

    # Settings classes (from core, pulls in pydantic/dynaconf)
    from nestedset.core.config import NestedSetSettings
"""

from nestedset.contracts.enums import Placement, ReadOption
from nestedset.contracts.errors import (
    ConfigurationError,
    InvalidOperationError,
    NestedSetError,
    NodeNotFoundError,
    SchemaCompatibilityError,
    TreeIntegrityError,
    TreePersistenceError,
    UnknownColumnError,
)
from nestedset.contracts.tree import TreeNode, TreeSchema

__all__ = [
    "ConfigurationError",
    "InvalidOperationError",
    "NestedSetError",
    "NodeNotFoundError",
    "Placement",
    "ReadOption",
    "SchemaCompatibilityError",
    "TreeIntegrityError",
    "TreeNode",
    "TreePersistenceError",
    "TreeSchema",
    "UnknownColumnError",
]
