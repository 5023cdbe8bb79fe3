"""Shared fixtures for CLI tests."""

from pathlib import Path
from typing import Any

import pytest

from nestedset.core.config import load_settings
from nestedset.core.tree import NestedSetTree
from tests.helpers.trees import build_sample_tree


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """Settings YAML pointing at a fresh file database."""
    path = tmp_path / "settings.yaml"
    path.write_text(
        f"""
tree:
  table: categories
  payload_columns: [name]
database:
  url: "sqlite:///{tmp_path / 'tree.db'}"
logging:
  level: WARNING
"""
    )
    return path


@pytest.fixture
def sample_keys(settings_file: Path) -> dict[str, Any]:
    """Populate the settings database with the four-node sample tree."""
    tree = NestedSetTree.from_settings(load_settings(settings_file))
    try:
        return build_sample_tree(tree)
    finally:
        tree.close()
