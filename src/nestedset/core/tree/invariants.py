# src/nestedset/core/tree/invariants.py
"""Nested-set invariant checks.

Works on plain TreeNode lists, so it can validate a tree read from any
store (or a hand-built fixture) without touching the database.

Invariants:
- every node has 0 < left < right
- no bound value appears twice
- the table is empty or exactly one node has left = 1, and it encloses
  every other node
- any two intervals are strictly nested or disjoint (no partial overlap)
- bounds are dense: n nodes use exactly the values 1..2n
"""

from collections.abc import Iterable

from nestedset.contracts import TreeIntegrityError, TreeNode


def check_tree(nodes: Iterable[TreeNode], *, strict: bool = False) -> list[str]:
    """Check a whole tree against the nested-set invariants.

    Args:
        nodes: Every node of the tree, in any order
        strict: Raise instead of returning violations

    Returns:
        Human-readable violations; empty when the tree is valid

    Raises:
        TreeIntegrityError: If strict and any invariant is violated
    """
    ordered = sorted(nodes, key=lambda node: node.left)
    violations: list[str] = []

    for node in ordered:
        if node.left < 1:
            violations.append(f"node {node.key!r} has non-positive left bound {node.left}")
        if node.left >= node.right:
            violations.append(f"node {node.key!r} has left {node.left} >= right {node.right}")

    seen: dict[int, object] = {}
    for node in ordered:
        for bound in (node.left, node.right):
            if bound in seen:
                violations.append(f"bound {bound} is shared by nodes {seen[bound]!r} and {node.key!r}")
            else:
                seen[bound] = node.key

    if ordered:
        expected = set(range(1, 2 * len(ordered) + 1))
        if set(seen) != expected:
            missing = sorted(expected - set(seen))
            extra = sorted(set(seen) - expected)
            violations.append(f"bounds are not dense 1..{2 * len(ordered)}: missing {missing[:10]}, unexpected {extra[:10]}")

        roots = [node for node in ordered if node.left == 1]
        if len(roots) != 1:
            violations.append(f"expected exactly one root (left = 1), found {len(roots)}")

    violations.extend(_nesting_violations(ordered))

    if strict and violations:
        raise TreeIntegrityError(violations)
    return violations


def _nesting_violations(ordered: list[TreeNode]) -> list[str]:
    """Walk nodes in left order keeping the chain of open ancestors."""
    violations: list[str] = []
    open_chain: list[TreeNode] = []
    top_level = 0

    for node in ordered:
        while open_chain and open_chain[-1].right < node.left:
            open_chain.pop()
        if open_chain:
            parent = open_chain[-1]
            if node.right > parent.right:
                violations.append(
                    f"node {node.key!r} ({node.left}, {node.right}) partially overlaps "
                    f"node {parent.key!r} ({parent.left}, {parent.right})"
                )
        else:
            top_level += 1
            if top_level > 1:
                violations.append(f"node {node.key!r} ({node.left}, {node.right}) lies outside the root interval")
        open_chain.append(node)

    return violations
