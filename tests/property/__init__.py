"""Property-based tests for nestedset.

Property-based testing validates invariants that must hold for ALL
operation sequences, not just the trees we think of. Every structural
mutation renumbers other rows, so a single off-by-one shift shows up as a
broken interval only several operations later.

Test categories:
- core/: Mutation sequences against an in-memory tree, invariant checker
"""
