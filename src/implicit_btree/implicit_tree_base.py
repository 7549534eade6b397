"""Implicit B-tree container"""

from __future__ import annotations
import logging
import collections
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Type

from implicit_btree.base import Node
from implicit_btree.indexer import ImplicitIndexerBase

logger = logging.getLogger(__name__)

_MISSING = object()


class ImplicitBTreeBase:
    """
    The result of a bulk load: a sparse array of nodes addressed by index.

    Index 0 holds the root of a non-empty tree. The children of the node at
    index i live at IndexerClass.child(i, 1..B+1); no pointers are stored.
    The tree is read-only once built.

    Attributes:
        height (int): Number of levels provisioned for the input size.
    """
    __slots__ = ("_nodes", "height", "_key_count")

    # Will be set by the factory
    IndexerClass: Type[ImplicitIndexerBase]
    NodeClass: Type[Node]
    BuilderClass: Type

    def __init__(self, nodes: Optional[Dict[int, Node]] = None,
                 height: int = 0, key_count: Optional[int] = None):
        self._nodes: Dict[int, Node] = dict(nodes) if nodes else {}
        self.height = height
        if key_count is None:
            key_count = sum(len(node) for node in self._nodes.values())
        self._key_count = key_count

    @classmethod
    def from_sorted(cls, keys: Iterable[Any]) -> ImplicitBTreeBase:
        """
        Bulk load a tree from keys sorted in ascending order.

        Parameters:
            keys (Iterable): The sorted keys.

        Returns:
            ImplicitBTreeBase: A new tree of this class.
        """
        return cls.BuilderClass().build(keys)

    @property
    def branching_factor(self) -> int:
        return self.IndexerClass.B

    def is_empty(self) -> bool:
        return not self._nodes

    def key_count(self) -> int:
        return self._key_count

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, index) -> bool:
        return index in self._nodes

    def __getitem__(self, index: int) -> Tuple[Any, ...]:
        try:
            return self._nodes[index].as_tuple()
        except KeyError:
            raise KeyError(f"no node at index {index}") from None

    def get(self, index: int, default=None):
        node = self._nodes.get(index, _MISSING)
        if node is _MISSING:
            return default
        return node.as_tuple()

    def __eq__(self, other) -> bool:
        if not isinstance(other, ImplicitBTreeBase):
            return NotImplemented
        return (self.branching_factor == other.branching_factor
                and self._nodes == other._nodes)

    def indices(self) -> List[int]:
        return sorted(self._nodes)

    def items(self) -> Iterator[Tuple[int, Tuple[Any, ...]]]:
        """Yield (index, keys) pairs in ascending index order."""
        for index in sorted(self._nodes):
            yield index, self._nodes[index].as_tuple()

    def to_dict(self) -> Dict[int, List[Any]]:
        """Return a plain {index: [keys]} copy of the array."""
        return {index: list(keys) for index, keys in self.items()}

    def iter_level(self, p: int) -> Iterator[Tuple[int, Tuple[Any, ...]]]:
        """Yield the populated (index, keys) pairs on level p, left to right."""
        lo = self.IndexerClass.first_node_index(p)
        hi = self.IndexerClass.first_node_index(p + 1)
        for index, keys in self.items():
            if index >= hi:
                break
            if index >= lo:
                yield index, keys

    def iter_keys(self) -> Iterator[Any]:
        """
        Yield all keys by an in-order walk driven by the index arithmetic.

        For each node the walk visits child 1, key 1, child 2, ..., key m,
        child m+1, skipping child slots that are not populated. Nodes that
        cannot be reached from the root are not visited.
        """
        if 0 not in self._nodes:
            return
        child = self.IndexerClass.child
        nodes = self._nodes

        def _walk(i):
            keys = nodes[i].keys
            for k, key in enumerate(keys, start=1):
                c = child(i, k)
                if c in nodes:
                    yield from _walk(c)
                yield key
            c = child(i, len(keys) + 1)
            if c in nodes:
                yield from _walk(c)

        yield from _walk(0)

    def __iter__(self) -> Iterator[Any]:
        return self.iter_keys()

    def __str__(self):
        if self.is_empty():
            return f"Empty {self.__class__.__name__}"
        return self.print_structure()

    def __repr__(self):
        cls = self.__class__.__name__
        return f"{cls}(height={self.height}, nodes={self.to_dict()!r})"

    def print_structure(self, indent: int = 0, max_depth: Optional[int] = None) -> str:
        """
        Render the tree top-down, one node per line, children indented.

        Parameters:
            indent (int): Number of spaces before the root line.
            max_depth (int): Stop descending below this level. None for no limit.
        """
        prefix = ' ' * indent
        if self.is_empty():
            return f"{prefix}Empty {self.__class__.__name__}"

        lines = [f"{prefix}{self.__class__.__name__}(B={self.branching_factor}, "
                 f"height={self.height}, nodes={len(self)}, keys={self.key_count()})"]
        child = self.IndexerClass.child
        fanout = self.branching_factor + 1

        def _render(i, depth):
            pad = ' ' * (indent + 4 * (depth + 1))
            if max_depth is not None and depth > max_depth:
                lines.append(f"{pad}... (max depth reached)")
                return
            lines.append(f"{pad}[{i}] {self._nodes[i]}")
            for k in range(1, fanout + 1):
                c = child(i, k)
                if c in self._nodes:
                    _render(c, depth + 1)

        if 0 in self._nodes:
            _render(0, 0)
        reachable = self._reachable()
        for i in sorted(set(self._nodes) - reachable):
            lines.append(f"{prefix}    Unreachable: [{i}] {self._nodes[i]}")
        return "\n".join(lines)

    def _reachable(self) -> set:
        seen = set()
        if 0 not in self._nodes:
            return seen
        child = self.IndexerClass.child
        fanout = self.branching_factor + 1
        stack = [0]
        while stack:
            i = stack.pop()
            seen.add(i)
            for k in range(1, fanout + 1):
                c = child(i, k)
                if c in self._nodes:
                    stack.append(c)
        return seen


@dataclass
class Stats:
    height: int
    node_count: int
    key_count: int
    leaf_count: int
    max_node_size: int
    min_node_size: int
    fill_ratio: float
    capacity_ok: bool
    keys_in_order: bool
    no_orphans: bool
    levels_consistent: bool


def tree_stats_(tree: ImplicitBTreeBase) -> Stats:
    """
    Returns aggregated statistics and invariant flags for an implicit B-tree.

    keys_in_order is True when the in-order walk yields every stored key in
    ascending order. no_orphans is True when every non-root node's parent slot
    is populated.
    """
    if tree is None or tree.is_empty():
        return Stats(height            = 0,
                     node_count        = 0,
                     key_count         = 0,
                     leaf_count        = 0,
                     max_node_size     = 0,
                     min_node_size     = 0,
                     fill_ratio        = 0.0,
                     capacity_ok       = True,
                     keys_in_order     = True,
                     no_orphans        = True,
                     levels_consistent = True)

    indexer = tree.IndexerClass
    B = indexer.B
    fanout = B + 1
    sizes = [len(keys) for _, keys in tree.items()]
    key_count = sum(sizes)

    leaf_count = 0
    no_orphans = True
    levels_consistent = True
    for index in tree.indices():
        if not any(indexer.child(index, k) in tree for k in range(1, fanout + 1)):
            leaf_count += 1
        if index != 0 and indexer.parent(index) not in tree:
            no_orphans = False
        if indexer.level_of(index) >= tree.height:
            levels_consistent = False

    walked = list(tree.iter_keys())
    keys_in_order = (
        len(walked) == key_count
        and all(a <= b for a, b in zip(walked, walked[1:]))
    )
    if not keys_in_order:
        logger.debug(f"tree_stats_(): in-order walk yielded {len(walked)} of {key_count} keys")

    return Stats(height            = tree.height,
                 node_count        = len(sizes),
                 key_count         = key_count,
                 leaf_count        = leaf_count,
                 max_node_size     = max(sizes),
                 min_node_size     = min(sizes),
                 fill_ratio        = key_count / (len(sizes) * B),
                 capacity_ok       = all(1 <= s <= B for s in sizes),
                 keys_in_order     = keys_in_order,
                 no_orphans        = no_orphans,
                 levels_consistent = levels_consistent)


def level_histogram(tree: ImplicitBTreeBase) -> Dict[int, int]:
    """Return {level: number of keys on that level}."""
    hist = collections.Counter()
    for index, keys in tree.items():
        hist[tree.IndexerClass.level_of(index)] += len(keys)
    return dict(hist)


def print_pretty(tree: ImplicitBTreeBase) -> None:
    """
    Prints an implicit B-tree so that:
      • Lines go from the root level down to the leaves.
      • Every slot of a level gets a column, empty slots are left blank.
      • All columns have the same width.
    Only levels up to the deepest populated one are printed.
    """
    if tree.is_empty():
        print(f"Empty {tree.__class__.__name__}")
        return

    SEP = " | "
    indexer = tree.IndexerClass
    deepest = max(indexer.level_of(i) for i in tree.indices())

    layers_raw = {}
    max_len = 0
    for p in range(deepest + 1):
        texts = {}
        for index, keys in tree.iter_level(p):
            texts[index] = SEP.join(str(k) for k in keys)
            max_len = max(max_len, len(texts[index]))
        layers_raw[p] = texts

    column_width = max_len + 2
    for p in range(deepest + 1):
        first = indexer.first_node_index(p)
        last = max(layers_raw[p], default=first)
        line = "".join(
            layers_raw[p].get(i, "").center(column_width)
            for i in range(first, last + 1)
        )
        print(f"Level {p}: {line.rstrip()}")
