"""Utility functions for testing implicit B-tree invariants."""

from implicit_btree.implicit_tree_base import (
    ImplicitBTreeBase,
    Stats
)

TREE_FLAGS = (
    "capacity_ok",
    "keys_in_order",
    "no_orphans",
    "levels_consistent",
)

def assert_tree_invariants_tc(tc, t: ImplicitBTreeBase, stats: Stats) -> None:
    """TestCase version: use inside unittest.TestCase methods."""
    for flag in TREE_FLAGS:
        tc.assertTrue(
            getattr(stats, flag),
            f"Invariant failed: {flag} is False\n{t.print_structure()}"
        )

    if not t.is_empty():
        tc.assertGreater(
            stats.node_count, 0,
            f"Invariant failed: node_count={stats.node_count} ≤ 0 for non-empty tree"
        )
        tc.assertEqual(
            stats.key_count, t.key_count(),
            f"Invariant failed: stored keys {stats.key_count} ≠ key_count() {t.key_count()}"
        )
        tc.assertIn(0, t, "Invariant failed: non-empty tree has no root at index 0")
        tc.assertLessEqual(
            stats.max_node_size, t.branching_factor,
            f"Invariant failed: max_node_size={stats.max_node_size} > B={t.branching_factor}"
        )

