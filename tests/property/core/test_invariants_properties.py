# tests/property/core/test_invariants_properties.py
"""Property-based tests for the invariant checker and depth derivation.

Trees are generated as parent index lists and numbered in preorder, so
every generated tree is a valid nested set by construction.
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from nestedset.contracts import TreeNode
from nestedset.core.tree.formatters import relative_depths
from nestedset.core.tree.invariants import check_tree
from tests.property.settings import STANDARD_SETTINGS

# =============================================================================
# Strategies
# =============================================================================


@st.composite
def tree_shapes(draw: st.DrawFn, max_size: int = 30) -> list[int | None]:
    """Parent index for each node; node 0 is the root."""
    size = draw(st.integers(min_value=1, max_value=max_size))
    parents: list[int | None] = [None]
    for i in range(1, size):
        parents.append(draw(st.integers(min_value=0, max_value=i - 1)))
    return parents


def number_tree(parents: list[int | None]) -> tuple[list[TreeNode], list[int]]:
    """Preorder-number a parent list. Returns nodes in left order and their depths."""
    children: dict[int, list[int]] = {i: [] for i in range(len(parents))}
    for i, parent in enumerate(parents):
        if parent is not None:
            children[parent].append(i)

    bounds: dict[int, tuple[int, int]] = {}
    depths: dict[int, int] = {}
    counter = 1
    # Iterative preorder: (node, depth, entering)
    stack: list[tuple[int, int, bool]] = [(0, 0, True)]
    lefts: dict[int, int] = {}
    while stack:
        node, depth, entering = stack.pop()
        if entering:
            lefts[node] = counter
            depths[node] = depth
            counter += 1
            stack.append((node, depth, False))
            stack.extend((child, depth + 1, True) for child in reversed(children[node]))
        else:
            bounds[node] = (lefts[node], counter)
            counter += 1

    nodes = sorted(
        (TreeNode(key=i, left=left, right=right) for i, (left, right) in bounds.items()),
        key=lambda n: n.left,
    )
    return nodes, [depths[n.key] for n in nodes]


# =============================================================================
# Properties
# =============================================================================


class TestInvariantProperties:
    @given(shape=tree_shapes())
    @STANDARD_SETTINGS
    def test_preorder_numbering_is_valid(self, shape: list[int | None]) -> None:
        nodes, _ = number_tree(shape)

        assert check_tree(nodes) == []

    @given(shape=tree_shapes(), data=st.data())
    @STANDARD_SETTINGS
    def test_any_single_bound_change_is_detected(self, shape: list[int | None], data: st.DataObject) -> None:
        """Bounds are a permutation of 1..2n, so moving one always breaks something."""
        nodes, _ = number_tree(shape)
        index = data.draw(st.integers(min_value=0, max_value=len(nodes) - 1), label="node")
        delta = data.draw(st.integers(min_value=-5, max_value=5).filter(lambda d: d != 0), label="delta")
        target = nodes[index]
        if data.draw(st.booleans(), label="left"):
            corrupted = TreeNode(key=target.key, left=target.left + delta, right=target.right)
        else:
            corrupted = TreeNode(key=target.key, left=target.left, right=target.right + delta)

        assert check_tree([*nodes[:index], corrupted, *nodes[index + 1 :]]) != []

    @given(shape=tree_shapes())
    @STANDARD_SETTINGS
    def test_relative_depths_match_structure(self, shape: list[int | None]) -> None:
        nodes, depths = number_tree(shape)

        assert relative_depths(nodes) == depths

    @given(shape=tree_shapes())
    @STANDARD_SETTINGS
    def test_root_width_covers_all_nodes(self, shape: list[int | None]) -> None:
        nodes, _ = number_tree(shape)

        assert nodes[0].is_root
        assert nodes[0].width == 2 * len(nodes)
        assert all(nodes[0].contains(node) for node in nodes[1:])
