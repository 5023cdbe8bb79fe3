# src/nestedset/core/__init__.py
"""Core infrastructure: Configuration, Logging, Tree engine."""

from nestedset.core.config import (
    DatabaseSettings,
    LoggingSettings,
    NestedSetSettings,
    TreeSettings,
    load_settings,
)
from nestedset.core.logging import (
    configure_logging,
    get_logger,
)
from nestedset.core.tree import (
    NestedSetTree,
    TreeDB,
    check_tree,
)

__all__ = [
    "DatabaseSettings",
    "LoggingSettings",
    "NestedSetSettings",
    "NestedSetTree",
    "TreeDB",
    "TreeSettings",
    "check_tree",
    "configure_logging",
    "get_logger",
    "load_settings",
]
