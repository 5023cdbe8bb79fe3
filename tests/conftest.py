# tests/conftest.py
"""Shared test fixtures and Hypothesis configuration.

Fixture Scoping Strategy
========================
Every fixture here is function-scoped. A table holds exactly one tree, so
tests cannot share a database the way row-partitioned stores can; an
in-memory SQLite tree costs well under a millisecond to create.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from nestedset.contracts import TreeSchema
from nestedset.core.tree import NestedSetTree, TreeDB

# =============================================================================
# Logging Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """configure_logging() rebinds the root logger to the current stderr.

    Under capsys or CliRunner that stream is closed after the test, so the
    previous handlers and level are put back.
    """
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


# =============================================================================
# Tree Fixtures
# =============================================================================


@pytest.fixture
def schema() -> TreeSchema:
    """Schema binding used by most tests: default bound columns plus a name."""
    return TreeSchema(table="categories", payload_columns=("name",))


@pytest.fixture
def tree_db(schema: TreeSchema) -> Iterator[TreeDB]:
    """Fresh in-memory database bound to the test schema."""
    db = TreeDB.in_memory(schema)
    yield db
    db.close()


@pytest.fixture
def tree(tree_db: TreeDB) -> NestedSetTree:
    """Empty tree over the in-memory database."""
    return NestedSetTree(tree_db)


@pytest.fixture
def file_url(tmp_path: Path) -> str:
    """URL of a file-backed SQLite database (WAL needs a real file)."""
    return f"sqlite:///{tmp_path / 'tree.db'}"


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
