# -*- coding: utf-8 -*-
# ------------------------------------------------------------------------------
#
#   Copyright 2025 Jannik Hehemann
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#
# ------------------------------------------------------------------------------

"""Bulk loader for implicit B-trees"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Type

from implicit_btree.base import Node, StructuralInconsistencyError
from implicit_btree.indexer import ImplicitIndexerBase
from implicit_btree.profiling import track_performance

if TYPE_CHECKING:
    from implicit_btree.implicit_tree_base import ImplicitBTreeBase

logger = logging.getLogger(__name__)


class BTreeBuilderBase:
    """
    Builds the implicit array of a B-tree from keys sorted in ascending order.

    The build is a single forward pass that alternates between two phases:
      - LeafFill: the next B keys become a leaf at the leaf-level cursor.
      - CarryUp: the following key is placed as a separator in the lowest
        ancestor on the cursor path that still has room.
    The pass ends when the input is exhausted. All cursors live in the build
    call, so one builder can run any number of independent builds.

    Factory will set:
      - IndexerClass : index arithmetic for the branching factor
      - NodeClass    : node class with CAPACITY == B
      - TreeClass    : container returned by build()
    """
    IndexerClass: Type[ImplicitIndexerBase]
    NodeClass: Type[Node]
    TreeClass: Type[ImplicitBTreeBase]

    @track_performance
    def build(self, keys: Iterable[Any]) -> ImplicitBTreeBase:
        """
        Build an implicit B-tree from sorted keys.

        The keys are assumed to be sorted ascending; this is not checked.

        Parameters:
            keys (Iterable): The sorted keys. Materialised into a list.

        Returns:
            ImplicitBTreeBase: The tree holding the sparse index -> node mapping.

        Raises:
            StructuralInconsistencyError: If a separator key finds no room on
                the walk up to the root.
        """
        source = list(keys)
        n = len(source)
        indexer = self.IndexerClass
        B = indexer.B
        h = indexer.height(n)
        nodes: Dict[int, Node] = {}

        if n == 0:
            logger.debug("build(): empty input, returning empty tree")
            return self.TreeClass(nodes, 0, 0)

        logger.debug(f"build(): n={n}, B={B}, height={h}")

        # next not-yet-closed node index per level
        cursors: List[int] = [indexer.first_node_index(p) for p in range(h)]
        leaf_level = h - 1
        pos = 0
        last_index = 0

        while pos < n:
            # LeafFill
            leaf_index = cursors[leaf_level]
            chunk = source[pos:pos + B]
            nodes[leaf_index] = self.NodeClass(chunk)
            pos += len(chunk)
            last_index = leaf_index

            if pos >= n:
                break

            cursors[leaf_level] += 1

            # CarryUp
            cur = leaf_level
            while True:
                cur -= 1
                if cur < 0:
                    logger.error(
                        f"build(): no room for separator {source[pos]!r} at "
                        f"position {pos} (n={n}, B={B}, height={h})"
                    )
                    raise StructuralInconsistencyError(
                        f"separator at position {pos} found every ancestor "
                        f"full; height {h} is too small for {n} keys"
                    )
                index = cursors[cur]
                node = nodes.get(index)
                if node is None:
                    nodes[index] = self.NodeClass((source[pos],))
                elif not node.is_full():
                    node.append_key(source[pos])
                else:
                    # closed, move on to the next sibling and try one level up
                    cursors[cur] += 1
                    continue
                pos += 1
                last_index = index
                break

        self._close_right_spine(nodes, last_index)
        return self.TreeClass(nodes, h, n)

    def _close_right_spine(self, nodes: Dict[int, Node], last_index: int) -> None:
        """
        Make the most recently written node reachable from the root.

        Walks up from last_index. Where an occupied node has an unoccupied
        parent slot, its subtree is lifted into the highest unoccupied
        ancestor. A single trailing leaf is simply moved into its parent slot.
        """
        indexer = self.IndexerClass
        j = last_index
        while j != 0:
            p = indexer.parent(j)
            if p in nodes:
                j = p
                continue
            target = p
            while target != 0 and indexer.parent(target) not in nodes:
                target = indexer.parent(target)
            self._lift_subtree(nodes, j, target)
            j = target

    def _lift_subtree(self, nodes: Dict[int, Node], root: int, target: int) -> None:
        """Move the subtree rooted at `root` so that it is rooted at `target`."""
        indexer = self.IndexerClass
        fanout = indexer.B + 1

        # (index, depth) of every populated node below root
        subtree = []
        frontier = [root]
        depth = 0
        while frontier:
            subtree.extend((i, depth) for i in frontier)
            frontier = [
                c
                for i in frontier
                for c in (indexer.child(i, k) for k in range(1, fanout + 1))
                if c in nodes
            ]
            depth += 1

        logger.debug(
            f"_close_right_spine(): lifting {len(subtree)} node(s) from "
            f"{root} (level {indexer.level_of(root)}) to {target} "
            f"(level {indexer.level_of(target)})"
        )

        moved = {}
        for i, d in subtree:
            offset = i - indexer.leftmost_descendant(root, d)
            moved[indexer.leftmost_descendant(target, d) + offset] = nodes.pop(i)
        nodes.update(moved)
