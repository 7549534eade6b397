"""Factory for implicit B-tree classes specialised by branching factor"""

from typing import Any, Dict, Iterable, Tuple, Type
import logging

from implicit_btree.base import Node
from implicit_btree.builder import BTreeBuilderBase
from implicit_btree.implicit_tree_base import ImplicitBTreeBase
from implicit_btree.indexer import ImplicitIndexerBase, validate_branching_factor

# Configure logging
logger = logging.getLogger("implicit_btree")
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

# Cache for previously created classes to avoid recreating them
_class_cache: Dict[int, Tuple[Type, Type, Type, Type]] = {}


def make_implicit_btree_classes(B: int) -> Tuple[
    Type[ImplicitBTreeBase],
    Type[Node],
    Type[ImplicitIndexerBase],
    Type[BTreeBuilderBase]
]:
    """
    Factory function to generate implicit B-tree classes for branching factor B.

    Returns:
        ImplicitBTreeB   – subclass of ImplicitBTreeBase wired to the classes below.
        NodeB            – subclass of Node with CAPACITY=B.
        IndexerB         – subclass of ImplicitIndexerBase with B=B.
        BuilderB         – subclass of BTreeBuilderBase producing ImplicitBTreeB.

    Raises:
        TypeError: If B is not an int.
        ValueError: If B < 1.
    """
    validate_branching_factor(B)
    if B in _class_cache:
        logger.debug(f"Using cached classes for B={B}")
        return _class_cache[B]

    logger.debug(f"Creating new classes for B={B}")

    # 1) Node: capacity B
    NodeB = type(
        f"Node_B{B}",
        (Node,),
        {"CAPACITY": B, "__slots__": ()}
    )
    logger.debug(f"Created {NodeB.__name__} with CAPACITY={B}")

    # 2) Indexer: index arithmetic for fanout B+1
    IndexerB = type(
        f"ImplicitIndexer_B{B}",
        (ImplicitIndexerBase,),
        {"B": B}
    )
    logger.debug(f"Created {IndexerB.__name__} with B={B}")

    # 3) Tree container, BuilderClass is set once the builder exists
    ImplicitBTreeB = type(
        f"ImplicitBTree_B{B}",
        (ImplicitBTreeBase,),
        {
            "IndexerClass": IndexerB,
            "NodeClass": NodeB,
            "__slots__": ()
        }
    )

    # 4) Builder references the three classes above
    BuilderB = type(
        f"BTreeBuilder_B{B}",
        (BTreeBuilderBase,),
        {
            "IndexerClass": IndexerB,
            "NodeClass": NodeB,
            "TreeClass": ImplicitBTreeB
        }
    )
    setattr(ImplicitBTreeB, "BuilderClass", BuilderB)
    logger.debug(f"Created {ImplicitBTreeB.__name__} and {BuilderB.__name__}")

    _class_cache[B] = (ImplicitBTreeB, NodeB, IndexerB, BuilderB)
    return ImplicitBTreeB, NodeB, IndexerB, BuilderB


def create_implicit_btree(keys: Iterable[Any], B: int) -> ImplicitBTreeBase:
    """
    Build an implicit B-tree from sorted keys with branching factor B.

    Args:
        keys (Iterable): Keys sorted in ascending order (not checked).
        B (int): Maximum number of keys per node.

    Returns:
        The built tree; empty for empty input.
    """
    ImplicitBTreeB, _, _, _ = make_implicit_btree_classes(B)
    tree = ImplicitBTreeB.from_sorted(keys)
    logger.debug(f"Built {type(tree).__name__} with {len(tree)} nodes, height {tree.height}")
    return tree
