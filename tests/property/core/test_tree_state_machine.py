# tests/property/core/test_tree_state_machine.py
"""Property-based stateful tests for nested-set mutations.

TREE STATE MACHINE:
A real in-memory tree is driven alongside a plain parent -> ordered
children model. Rules insert (ROOT, CHILD, LEFT, RIGHT) and delete
subtrees; rejected operations must be rejected by both and change
nothing.

Key Invariants:
- The stored tree always satisfies every nested-set invariant
- Stored bounds equal a preorder numbering of the model
- Depth facts equal the model depth
- Rejections (second root, second child, sibling of root) leave bounds untouched
"""

from __future__ import annotations

from typing import Any

import pytest
from hypothesis import strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, precondition, rule

from nestedset.contracts import InvalidOperationError, Placement, ReadOption, TreeSchema
from nestedset.core.tree import NestedSetTree, TreeDB
from tests.property.settings import STATE_MACHINE_SETTINGS

# =============================================================================
# Model
# =============================================================================


class TreeModel:
    """Ordered-children model of the tree."""

    def __init__(self) -> None:
        self.root: Any = None
        self.children: dict[Any, list[Any]] = {}
        self.parent: dict[Any, Any] = {}

    def clear(self) -> None:
        self.root = None
        self.children = {}
        self.parent = {}

    @property
    def keys(self) -> list[Any]:
        return sorted(self.children)

    def add_root(self, key: Any) -> None:
        self.root = key
        self.children[key] = []

    def add_child(self, parent: Any, key: Any) -> None:
        self.children[parent].append(key)
        self.children[key] = []
        self.parent[key] = parent

    def add_sibling(self, sibling: Any, key: Any, *, after: bool) -> None:
        parent = self.parent[sibling]
        siblings = self.children[parent]
        siblings.insert(siblings.index(sibling) + (1 if after else 0), key)
        self.children[key] = []
        self.parent[key] = parent

    def remove(self, key: Any) -> int:
        if key == self.root:
            removed = len(self.children)
            self.clear()
            return removed
        self.children[self.parent[key]].remove(key)
        stack = [key]
        removed = 0
        while stack:
            current = stack.pop()
            stack.extend(self.children.pop(current))
            self.parent.pop(current, None)
            removed += 1
        return removed

    def bounds(self) -> dict[Any, tuple[int, int]]:
        """Preorder numbering: the bounds a correct nested set must have."""
        result: dict[Any, tuple[int, int]] = {}
        if self.root is None:
            return result
        counter = 1

        def visit(key: Any) -> None:
            nonlocal counter
            left = counter
            counter += 1
            for child in self.children[key]:
                visit(child)
            result[key] = (left, counter)
            counter += 1

        visit(self.root)
        return result

    def depth(self, key: Any) -> int:
        depth = 0
        while key in self.parent:
            key = self.parent[key]
            depth += 1
        return depth


# =============================================================================
# State Machine
# =============================================================================


class NestedSetStateMachine(RuleBasedStateMachine):
    """Drive a tree through random mutation sequences."""

    def __init__(self) -> None:
        super().__init__()
        self.db = TreeDB.in_memory(TreeSchema(table="nodes", payload_columns=("name",)))
        self.tree = NestedSetTree(self.db)
        self.model = TreeModel()
        self.counter = 0

    def teardown(self) -> None:
        self.db.close()

    def _name(self) -> str:
        self.counter += 1
        return f"n{self.counter}"

    def _stored_bounds(self) -> dict[Any, tuple[int, int]]:
        return {node.key: (node.left, node.right) for node in self.tree.read_all_nodes()}

    # -------------------------------------------------------------------------
    # Rules: Insertion
    # -------------------------------------------------------------------------

    @rule()
    def insert_root(self) -> None:
        if self.model.root is not None:
            before = self._stored_bounds()
            with pytest.raises(InvalidOperationError):
                self.tree.insert_node(Placement.ROOT, payload={"name": self._name()})
            assert self._stored_bounds() == before
            return
        key = self.tree.insert_node(Placement.ROOT, payload={"name": self._name()})
        self.model.add_root(key)

    @precondition(lambda self: self.model.root is not None)
    @rule(data=st.data())
    def insert_child(self, data: st.DataObject) -> None:
        target = data.draw(st.sampled_from(self.model.keys), label="target")
        if self.model.children[target]:
            before = self._stored_bounds()
            with pytest.raises(InvalidOperationError):
                self.tree.insert_node(Placement.CHILD, target, {"name": self._name()})
            assert self._stored_bounds() == before
            return
        key = self.tree.insert_node(Placement.CHILD, target, {"name": self._name()})
        self.model.add_child(target, key)

    @precondition(lambda self: self.model.root is not None)
    @rule(data=st.data(), placement=st.sampled_from([Placement.LEFT, Placement.RIGHT]))
    def insert_sibling(self, data: st.DataObject, placement: Placement) -> None:
        target = data.draw(st.sampled_from(self.model.keys), label="target")
        if target == self.model.root:
            before = self._stored_bounds()
            with pytest.raises(InvalidOperationError):
                self.tree.insert_node(placement, target, {"name": self._name()})
            assert self._stored_bounds() == before
            return
        key = self.tree.insert_node(placement, target, {"name": self._name()})
        self.model.add_sibling(target, key, after=placement is Placement.RIGHT)

    # -------------------------------------------------------------------------
    # Rules: Deletion
    # -------------------------------------------------------------------------

    @precondition(lambda self: len(self.model.children) > 1)
    @rule(data=st.data())
    def delete_non_root(self, data: st.DataObject) -> None:
        target = data.draw(st.sampled_from([k for k in self.model.keys if k != self.model.root]), label="target")
        expected = self.model.remove(target)
        assert self.tree.delete_subtree(target) == expected

    @precondition(lambda self: self.model.root is not None)
    @rule()
    def delete_root(self) -> None:
        root = self.model.root
        expected = self.model.remove(root)
        assert self.tree.delete_subtree(root) == expected

    # -------------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------------

    @invariant()
    def tree_is_valid(self) -> None:
        violations = self.tree.check()
        assert violations == [], violations

    @invariant()
    def bounds_match_model(self) -> None:
        assert self._stored_bounds() == self.model.bounds()

    @invariant()
    def depths_match_model(self) -> None:
        for node in self.tree.read_all_nodes([ReadOption.DEPTH]):
            assert node.depth == self.model.depth(node.key)


# Create the test class that pytest will discover
TestNestedSetStateMachine = NestedSetStateMachine.TestCase
TestNestedSetStateMachine.settings = STATE_MACHINE_SETTINGS
