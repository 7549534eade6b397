"""Tests for the implicit B-tree container, rendering and statistics"""
# pylint: skip-file

import io
import unittest
from contextlib import redirect_stdout

from implicit_btree.factory import make_implicit_btree_classes
from implicit_btree.implicit_tree_base import (
    tree_stats_,
    level_histogram,
    print_pretty,
)

K_VALUE = 3
KEYS_25 = list(range(1, 26))


class TestImplicitTreeAccessors(unittest.TestCase):
    def setUp(self):
        self.TreeClass, self.NodeClass, self.Indexer, _ = make_implicit_btree_classes(K_VALUE)
        self.tree = self.TreeClass.from_sorted(KEYS_25)
        self.empty = self.TreeClass.from_sorted([])

    def test_sizes(self):
        self.assertEqual(len(self.tree), 10)
        self.assertEqual(self.tree.key_count(), 25)
        self.assertEqual(self.tree.height, 3)
        self.assertEqual(self.tree.branching_factor, 3)
        self.assertEqual(len(self.empty), 0)
        self.assertEqual(self.empty.key_count(), 0)

    def test_getitem_and_get(self):
        self.assertEqual(self.tree[0], (16,))
        self.assertEqual(self.tree[11], (25,))
        with self.assertRaises(KeyError):
            self.tree[3]
        self.assertIsNone(self.tree.get(3))
        self.assertEqual(self.tree.get(3, ()), ())
        self.assertEqual(self.tree.get(1), (4, 8, 12))

    def test_contains(self):
        self.assertIn(0, self.tree)
        self.assertIn(9, self.tree)
        self.assertNotIn(3, self.tree)
        self.assertNotIn(0, self.empty)

    def test_indices_and_items_in_index_order(self):
        self.assertEqual(self.tree.indices(), [0, 1, 2, 5, 6, 7, 8, 9, 10, 11])
        items = list(self.tree.items())
        self.assertEqual(items[0], (0, (16,)))
        self.assertEqual(items[-1], (11, (25,)))

    def test_to_dict_is_a_copy(self):
        d = self.tree.to_dict()
        d[0].append(99)
        self.assertEqual(self.tree[0], (16,))

    def test_iter_level(self):
        self.assertEqual(list(self.tree.iter_level(0)), [(0, (16,))])
        self.assertEqual(
            list(self.tree.iter_level(1)),
            [(1, (4, 8, 12)), (2, (20, 24))]
        )
        self.assertEqual([i for i, _ in self.tree.iter_level(2)], [5, 6, 7, 8, 9, 10, 11])
        self.assertEqual(list(self.tree.iter_level(3)), [])

    def test_in_order_walk(self):
        self.assertEqual(list(self.tree.iter_keys()), KEYS_25)
        self.assertEqual(list(self.tree), KEYS_25)
        self.assertEqual(list(self.empty), [])

    def test_equality(self):
        self.assertEqual(self.tree, self.TreeClass.from_sorted(KEYS_25))
        self.assertNotEqual(self.tree, self.TreeClass.from_sorted(KEYS_25[:-1]))
        OtherTree, _, _, _ = make_implicit_btree_classes(4)
        self.assertNotEqual(self.tree, OtherTree.from_sorted(KEYS_25))

    def test_repr(self):
        self.assertIn("ImplicitBTree_B3", repr(self.tree))
        self.assertIn("height=3", repr(self.tree))


class TestRendering(unittest.TestCase):
    def setUp(self):
        self.TreeClass, self.NodeClass, _, _ = make_implicit_btree_classes(K_VALUE)

    def test_print_structure(self):
        tree = self.TreeClass.from_sorted(range(1, 8))
        text = tree.print_structure()
        lines = text.splitlines()
        self.assertIn("ImplicitBTree_B3(B=3, height=2, nodes=3, keys=7)", lines[0])
        self.assertEqual(lines[1].strip(), "[0] 4")
        self.assertEqual(lines[2].strip(), "[1] 1 | 2 | 3")
        self.assertEqual(lines[3].strip(), "[2] 5 | 6 | 7")
        self.assertEqual(str(tree), text)

    def test_print_structure_empty(self):
        tree = self.TreeClass.from_sorted([])
        self.assertEqual(tree.print_structure(), "Empty ImplicitBTree_B3")
        self.assertEqual(str(tree), "Empty ImplicitBTree_B3")

    def test_print_structure_max_depth(self):
        tree = self.TreeClass.from_sorted(KEYS_25)
        text = tree.print_structure(max_depth=0)
        self.assertIn("... (max depth reached)", text)
        self.assertNotIn("[5]", text)

    def test_print_structure_lists_unreachable_nodes(self):
        tree = self.TreeClass({0: self.NodeClass([4]), 6: self.NodeClass([1])}, 2)
        self.assertIn("Unreachable: [6] 1", tree.print_structure())

    def test_print_pretty(self):
        tree = self.TreeClass.from_sorted(range(1, 8))
        buf = io.StringIO()
        with redirect_stdout(buf):
            print_pretty(tree)
        lines = buf.getvalue().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("Level 0:"))
        self.assertIn("4", lines[0])
        self.assertIn("1 | 2 | 3", lines[1])
        self.assertIn("5 | 6 | 7", lines[1])

    def test_print_pretty_empty(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            print_pretty(self.TreeClass.from_sorted([]))
        self.assertEqual(buf.getvalue().strip(), "Empty ImplicitBTree_B3")


class TestTreeStats(unittest.TestCase):
    def setUp(self):
        self.TreeClass, self.NodeClass, _, _ = make_implicit_btree_classes(K_VALUE)

    def test_empty_tree_stats(self):
        stats = tree_stats_(self.TreeClass.from_sorted([]))
        self.assertEqual(stats.node_count, 0)
        self.assertEqual(stats.key_count, 0)
        self.assertEqual(stats.height, 0)
        self.assertTrue(stats.capacity_ok)
        self.assertTrue(stats.keys_in_order)
        self.assertTrue(stats.no_orphans)
        self.assertTrue(stats.levels_consistent)

    def test_three_level_stats(self):
        stats = tree_stats_(self.TreeClass.from_sorted(KEYS_25))
        self.assertEqual(stats.height, 3)
        self.assertEqual(stats.node_count, 10)
        self.assertEqual(stats.key_count, 25)
        self.assertEqual(stats.leaf_count, 7)
        self.assertEqual(stats.max_node_size, 3)
        self.assertEqual(stats.min_node_size, 1)
        self.assertAlmostEqual(stats.fill_ratio, 25 / 30)
        self.assertTrue(stats.capacity_ok)
        self.assertTrue(stats.keys_in_order)
        self.assertTrue(stats.no_orphans)
        self.assertTrue(stats.levels_consistent)

    def test_level_histogram(self):
        tree = self.TreeClass.from_sorted(KEYS_25)
        self.assertEqual(level_histogram(tree), {0: 1, 1: 5, 2: 19})

    def test_detects_orphans(self):
        tree = self.TreeClass({0: self.NodeClass([4]), 6: self.NodeClass([1])}, 2)
        stats = tree_stats_(tree)
        self.assertFalse(stats.no_orphans)
        self.assertFalse(stats.keys_in_order)
        self.assertTrue(stats.capacity_ok)

    def test_detects_out_of_order_keys(self):
        tree = self.TreeClass(
            {0: self.NodeClass([1]), 1: self.NodeClass([5, 6]), 2: self.NodeClass([7])}, 2
        )
        self.assertFalse(tree_stats_(tree).keys_in_order)

    def test_detects_nodes_below_height(self):
        tree = self.TreeClass({0: self.NodeClass([4]), 1: self.NodeClass([1])}, 1)
        self.assertFalse(tree_stats_(tree).levels_consistent)

    def test_detects_empty_nodes(self):
        tree = self.TreeClass({0: self.NodeClass([])}, 1)
        self.assertFalse(tree_stats_(tree).capacity_ok)


if __name__ == "__main__":
    unittest.main()
