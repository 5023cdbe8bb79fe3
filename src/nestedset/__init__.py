"""
nestedset: Hierarchical trees stored as nested-set intervals in a relational table.

Every node carries a left and right bound; ancestry, descent and sibling
relations are recovered from interval containment, so reads never recurse.
"""

__version__ = "0.1.0"
