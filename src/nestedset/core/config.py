# src/nestedset/core/config.py
"""
Configuration schema and loading for nestedset.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction. The tree section is
converted into the runtime TreeSchema binding exactly once, by
TreeSettings.to_schema().
"""

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from nestedset.contracts.tree import TreeSchema


class TreeSettings(BaseModel):
    """Schema binding for the tree table.

    Example YAML:
        tree:
          table: categories
          key_column: id
          left_column: lft
          right_column: rgt
          payload_columns: [name, slug]
          prefix: "ns_"
    """

    model_config = {"frozen": True}

    table: str = Field(description="Table holding the tree (one tree per table)")
    key_column: str = Field(default="id", description="Store-assigned primary key column")
    left_column: str = Field(default="lft", description="Left bound column")
    right_column: str = Field(default="rgt", description="Right bound column")
    payload_columns: list[str] = Field(
        default_factory=list,
        description="Caller-defined columns read and written verbatim",
    )
    prefix: str = Field(default="ns_", description="Prefix for exported derived fact names")

    @model_validator(mode="after")
    def validate_binding(self) -> "TreeSettings":
        """Reject bindings TreeSchema would reject, at config time."""
        # ConfigurationError is a ValueError, so pydantic reports it as a
        # ValidationError alongside any other field problems.
        self.to_schema()
        return self

    def to_schema(self) -> TreeSchema:
        """Build the immutable runtime schema binding.

        Raises:
            ConfigurationError: If a name is empty, malformed or collides
        """
        return TreeSchema(
            table=self.table,
            key_column=self.key_column,
            left_column=self.left_column,
            right_column=self.right_column,
            payload_columns=tuple(self.payload_columns),
            prefix=self.prefix,
        )


class DatabaseSettings(BaseModel):
    """Database connection configuration."""

    model_config = {"frozen": True}

    # NOTE: str instead of Path - Path mangles PostgreSQL DSNs
    url: str = Field(
        default="sqlite:///./tree.db",
        description="Full SQLAlchemy database URL",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    busy_timeout_ms: int = Field(
        default=5000,
        gt=0,
        description="SQLite only: how long a writer waits for the table lock",
    )
    create_tables: bool = Field(
        default=True,
        description="Create the tree table on connect if it does not exist",
    )


class LoggingSettings(BaseModel):
    """Log output configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_output: bool = Field(default=False, description="Emit JSON lines instead of console format")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class NestedSetSettings(BaseModel):
    """Top-level configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    tree: TreeSettings = Field(description="Schema binding for the tree table")
    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings,
        description="Database connection configuration",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Log output configuration",
    )


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)  # None if no default specified
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original (will likely cause error)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def load_settings(config_path: Path) -> NestedSetSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (NESTEDSET_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: NESTEDSET_DATABASE__URL for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated NestedSetSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="NESTEDSET",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    # Also filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    raw_config = _expand_env_vars(raw_config)

    return NestedSetSettings(**raw_config)
