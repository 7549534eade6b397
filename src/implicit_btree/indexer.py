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

"""Index arithmetic for implicit B-trees"""

from implicit_btree.base import AbstractImplicitIndexer


def validate_branching_factor(B) -> int:
    """
    Check that B is usable as a branching factor.

    Parameters:
        B (int): The maximum number of keys per node.

    Returns:
        int: B unchanged.

    Raises:
        TypeError: If B is not an int.
        ValueError: If B is smaller than 1.
    """
    if isinstance(B, bool) or not isinstance(B, int):
        raise TypeError(f"branching factor must be an int, got {type(B).__name__}")
    if B < 1:
        raise ValueError(f"branching factor must be >= 1, got {B}")
    return B


def _check_index(i, name: str = "i") -> None:
    if isinstance(i, bool) or not isinstance(i, int) or i < 0:
        raise ValueError(f"{name} must be a non-negative int, got {i!r}")


class ImplicitIndexerBase(AbstractImplicitIndexer):
    """
    Index arithmetic of an implicit B-tree with branching factor B.

    Nodes are numbered level by level, left to right, starting with the root
    at index 0. Level p holds (B+1)^p nodes, so the children of node i are
    i*(B+1) + 1 .. i*(B+1) + B + 1.

    All methods are class-level and pure; the factory sets B.
    """
    # Will be set by the factory
    B: int = 3

    @classmethod
    def level_capacity(cls, p: int) -> int:
        """Number of keys that fit on level p."""
        _check_index(p, "p")
        return (cls.B + 1) ** p * cls.B

    @classmethod
    def capacity(cls, h: int) -> int:
        """Number of keys held by a full tree of height h."""
        _check_index(h, "h")
        return (cls.B + 1) ** h - 1

    @classmethod
    def height(cls, n: int) -> int:
        if isinstance(n, bool) or not isinstance(n, int):
            raise TypeError(f"height(): n must be an int, got {type(n).__name__}")
        if n < 0:
            raise ValueError(f"height(): n must be >= 0, got {n}")
        remaining, h = 0, 0
        while remaining < n:
            remaining += (cls.B + 1) ** h * cls.B
            h += 1
        return h

    @classmethod
    def first_node_index(cls, p: int) -> int:
        _check_index(p, "p")
        return ((cls.B + 1) ** p - 1) // cls.B

    @classmethod
    def level_of(cls, i: int) -> int:
        """Return the level of the node at index i."""
        _check_index(i)
        p = 0
        while cls.first_node_index(p + 1) <= i:
            p += 1
        return p

    @classmethod
    def child(cls, i: int, k: int) -> int:
        _check_index(i)
        if isinstance(k, bool) or not isinstance(k, int) or not 1 <= k <= cls.B + 1:
            raise ValueError(f"child(): k must be in 1..{cls.B + 1}, got {k!r}")
        return i * (cls.B + 1) + k

    @classmethod
    def first_child(cls, i: int) -> int:
        """
        Return the index of the leftmost sibling of the node at index i.

        Raises:
            ValueError: If i is the root, which has no siblings.
        """
        _check_index(i)
        if i == 0:
            raise ValueError("first_child(): the root has no parent")
        return i - ((i - 1) % (cls.B + 1))

    @classmethod
    def rank_of(cls, i: int) -> int:
        """Return k such that child(parent(i), k) == i."""
        return i - cls.first_child(i) + 1

    @classmethod
    def parent(cls, i: int) -> int:
        # Inverse of child(): first_child(i) == child(parent(i), 1)
        return (cls.first_child(i) - 1) // (cls.B + 1)

    @classmethod
    def leftmost_descendant(cls, i: int, d: int) -> int:
        """Return the index reached from i by taking the first child d times."""
        _check_index(d, "d")
        for _ in range(d):
            i = cls.child(i, 1)
        return i
