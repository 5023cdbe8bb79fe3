# src/nestedset/cli.py
"""nestedset Command Line Interface.

Entry point for the nestedset CLI tool. Every command reads the tree
binding and database URL from a settings YAML file (--settings/-s).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from nestedset import __version__
from nestedset.contracts import NestedSetError, Placement, ReadOption, TreeNode
from nestedset.core.config import NestedSetSettings, load_settings

if TYPE_CHECKING:
    from nestedset.core.tree import NestedSetTree

__all__ = [
    "app",
]


@dataclass
class _CliOptions:
    verbose: bool = False
    json_logs: bool = False


# Module-level options set by the main callback
_options = _CliOptions()


app = typer.Typer(
    name="nestedset",
    help="nestedset: nested-set trees in a relational table.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"nestedset version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """nestedset: nested-set trees in a relational table."""
    from nestedset.core.logging import configure_logging

    _options.verbose = verbose
    _options.json_logs = json_logs
    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_config(settings: Path) -> NestedSetSettings:
    """Load settings, reporting problems the way users can act on them."""
    from nestedset.core.logging import configure_logging

    settings_path = settings.expanduser()
    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings_path}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    # Settings file decides the level unless -v asked for DEBUG
    configure_logging(
        json_output=_options.json_logs or config.logging.json_output,
        level="DEBUG" if _options.verbose else config.logging.level,
    )
    return config


def _open_tree(settings: Path, *, create_tables: bool | None = None) -> NestedSetTree:
    from nestedset.core.tree import NestedSetTree, TreeDB

    config = _load_config(settings)
    try:
        db = TreeDB(
            config.database.url,
            config.tree.to_schema(),
            create_tables=config.database.create_tables if create_tables is None else create_tables,
            busy_timeout_ms=config.database.busy_timeout_ms,
            echo=config.database.echo,
        )
    except NestedSetError as e:
        typer.echo(f"Error opening tree: {e}", err=True)
        raise typer.Exit(1) from None
    return NestedSetTree(db)


def _parse_assignments(assignments: list[str]) -> dict[str, str]:
    """Parse repeated --set column=value options."""
    payload: dict[str, str] = {}
    for assignment in assignments:
        column, sep, value = assignment.partition("=")
        if not sep or not column:
            typer.echo(f"Error: expected column=value, got {assignment!r}", err=True)
            raise typer.Exit(1)
        payload[column.strip()] = value
    return payload


def _echo_nodes(tree: NestedSetTree, nodes: list[TreeNode], *, as_json: bool) -> None:
    from nestedset.core.tree import JSONLinesFormatter, OutlineFormatter

    if as_json:
        if nodes:
            typer.echo(JSONLinesFormatter(tree.schema).format(nodes))
        return
    typer.echo(OutlineFormatter(tree.schema).format(nodes))


_SETTINGS_OPTION = typer.Option(
    ...,
    "--settings",
    "-s",
    help="Path to settings YAML file.",
)
_JSON_OPTION = typer.Option(False, "--json", help="Output JSON lines instead of an outline.")


@app.command()
def init(settings: Path = _SETTINGS_OPTION) -> None:
    """Create the tree table if it does not exist."""
    tree = _open_tree(settings, create_tables=True)
    try:
        typer.echo(f"Table {tree.schema.table!r} ready ({tree.count_nodes()} nodes).")
    except NestedSetError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        tree.close()


@app.command()
def show(
    settings: Path = _SETTINGS_OPTION,
    key: int | None = typer.Option(None, "--key", "-k", help="Show a single node."),
    facts: bool = typer.Option(False, "--facts", help="Include child and sibling facts."),
    as_json: bool = _JSON_OPTION,
) -> None:
    """Print the whole tree, or one node, with derived facts."""
    options = list(ReadOption) if facts or key is not None else [ReadOption.DEPTH]
    tree = _open_tree(settings)
    try:
        if key is None:
            nodes = tree.read_all_nodes(options)
        else:
            node = tree.read_node(key, options)
            if node is None:
                typer.echo(f"Error: node {key} not found", err=True)
                raise typer.Exit(1)
            nodes = [node]
        _echo_nodes(tree, nodes, as_json=as_json)
    except NestedSetError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        tree.close()


@app.command()
def add(
    placement: Placement = typer.Argument(..., help="Where to place the node: root, child, left or right."),
    settings: Path = _SETTINGS_OPTION,
    target: int | None = typer.Option(None, "--target", "-t", help="Key of the node to place relative to."),
    assignments: list[str] = typer.Option([], "--set", help="Payload value as column=value (repeatable)."),
) -> None:
    """Insert a node and print its key."""
    payload = _parse_assignments(assignments)
    tree = _open_tree(settings)
    try:
        key = tree.insert_node(placement, target, payload)
    except NestedSetError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        tree.close()
    typer.echo(str(key))


@app.command()
def remove(
    key: int = typer.Argument(..., help="Key of the node to delete with its subtree."),
    settings: Path = _SETTINGS_OPTION,
) -> None:
    """Delete a node and all its descendants."""
    tree = _open_tree(settings)
    try:
        deleted = tree.delete_subtree(key)
    except NestedSetError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        tree.close()
    typer.echo(f"Deleted {deleted} node(s).")


@app.command()
def ancestors(
    key: int = typer.Argument(..., help="Key of the node."),
    settings: Path = _SETTINGS_OPTION,
    as_json: bool = _JSON_OPTION,
) -> None:
    """Print the chain from the root down to a node."""
    tree = _open_tree(settings)
    try:
        chain = tree.get_parent_chain(key)
        if not chain:
            typer.echo(f"Error: node {key} not found", err=True)
            raise typer.Exit(1)
        _echo_nodes(tree, chain, as_json=as_json)
    except NestedSetError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        tree.close()


@app.command()
def subtree(
    key: int = typer.Argument(..., help="Key of the node."),
    settings: Path = _SETTINGS_OPTION,
    as_json: bool = _JSON_OPTION,
) -> None:
    """Print a node and all its descendants."""
    tree = _open_tree(settings)
    try:
        nodes = tree.get_subtree(key)
        if not nodes:
            typer.echo(f"Error: node {key} not found", err=True)
            raise typer.Exit(1)
        _echo_nodes(tree, nodes, as_json=as_json)
    except NestedSetError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        tree.close()


@app.command()
def check(settings: Path = _SETTINGS_OPTION) -> None:
    """Verify the stored tree against the nested-set invariants."""
    tree = _open_tree(settings)
    try:
        violations = tree.check()
        count = tree.count_nodes()
    except NestedSetError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        tree.close()

    if violations:
        typer.echo(f"{len(violations)} invariant violation(s):", err=True)
        for violation in violations:
            typer.echo(f"  - {violation}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Tree is valid ({count} nodes).")
