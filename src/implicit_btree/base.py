from abc import ABC, abstractmethod

from typing import Any, Iterable, Iterator, List, Tuple, TypeVar

Key = TypeVar("Key")


class StructuralInconsistencyError(RuntimeError):
    """
    Raised when a bulk load cannot place a separator key because every node on
    the walk up to the root is already full.

    The height computed for the input did not provide enough capacity, so the
    build is aborted rather than returning a malformed array.
    """
    pass


class Node:
    """
    A node of an implicit B-tree.

    Each node stores up to CAPACITY keys in ascending order. The node has no
    links to its parent or children; those follow from its array index.
    """
    __slots__ = ("keys",)

    # Overridden by factory-created subclasses
    CAPACITY: int = 3

    def __init__(self, keys: Iterable[Any] = ()):
        self.keys: List[Any] = list(keys)
        if len(self.keys) > self.__class__.CAPACITY:
            raise OverflowError(
                f"{self.__class__.__name__} holds at most "
                f"{self.__class__.CAPACITY} keys, got {len(self.keys)}"
            )

    def append_key(self, key: Any) -> None:
        """
        Append a key at the right end of the node.

        Parameters:
            key: The key to append. Must not be smaller than the node's last key.

        Raises:
            OverflowError: If the node is already full.
        """
        if len(self.keys) >= self.__class__.CAPACITY:
            raise OverflowError(
                f"cannot append {key!r}: node is closed at "
                f"{self.__class__.CAPACITY} keys"
            )
        self.keys.append(key)

    def is_full(self) -> bool:
        return len(self.keys) >= self.__class__.CAPACITY

    def key_count(self) -> int:
        return len(self.keys)

    def as_tuple(self) -> Tuple[Any, ...]:
        return tuple(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.keys == other.keys

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return f"{cls}(keys={self.keys!r})"

    def __str__(self):
        return " | ".join(str(k) for k in self.keys)


class AbstractImplicitIndexer(ABC):
    """
    Abstract base class for the index arithmetic of a pointer-free tree layout.

    Implementations map between levels, node indices and parent/child
    relationships of a flattened array. They know nothing about key values.
    """

    @classmethod
    @abstractmethod
    def height(cls, n: int) -> int:
        """
        Return the number of levels needed to hold n keys.

        Parameters:
            n (int): The total number of keys.

        Returns:
            int: The smallest height whose cumulative capacity is at least n.
        """
        pass

    @classmethod
    @abstractmethod
    def first_node_index(cls, p: int) -> int:
        """
        Return the array index of the leftmost node on level p.

        Parameters:
            p (int): The level, root is level 0.

        Returns:
            int: The number of nodes on all levels above p.
        """
        pass

    @classmethod
    @abstractmethod
    def child(cls, i: int, k: int) -> int:
        """
        Return the array index of the k-th child of the node at index i.

        Parameters:
            i (int): The index of the parent node.
            k (int): The 1-based child rank.

        Returns:
            int: The index of the child node.
        """
        pass

    @classmethod
    @abstractmethod
    def parent(cls, i: int) -> int:
        """
        Return the array index of the parent of the node at index i.

        Parameters:
            i (int): The index of a non-root node.

        Returns:
            int: The index of the parent node.
        """
        pass
