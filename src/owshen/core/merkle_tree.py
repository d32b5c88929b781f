"""Sparse Merkle Tree over a 2^depth leaf index space."""

import logging
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Tuple

from owshen.crypto.field import FieldElement, FieldLike, to_field
from owshen.utils.hash import DEFAULT_TREE_DEPTH, hash_pair
from owshen.exceptions import InvalidIndexError, StaleRootError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _default_hashes(depth: int) -> Tuple[FieldElement, ...]:
    """Empty-subtree hash per level: level 0 is the zero leaf."""
    defaults = [FieldElement(0)]
    for _ in range(depth):
        defaults.append(hash_pair(defaults[-1], defaults[-1]))
    return tuple(defaults)


def empty_root(depth: int) -> FieldElement:
    """Root of a tree of the given depth with no leaves set."""
    return _default_hashes(depth)[depth]


@dataclass(frozen=True)
class MerkleProof:
    """Leaf value plus the sibling hashes from leaf to root."""

    index: int
    value: FieldElement
    siblings: Tuple[FieldElement, ...]

    @property
    def depth(self) -> int:
        return len(self.siblings)

    @property
    def path_bits(self) -> List[int]:
        """Bit i is 1 when the running node is a right child at level i."""
        return [(self.index >> level) & 1 for level in range(self.depth)]


class SparseMerkleTree:
    """
    Sparse Merkle tree keyed by leaf index.

    Only explicitly set leaves and their ancestors are stored; every other
    node is the cached empty-subtree hash of its level. Nodes live in a
    dictionary keyed by (level, prefix), where level 0 holds leaves, level
    ``depth`` holds the root and ``prefix`` is ``index >> level``.

    A single writer applies ``set`` calls in deposit order. Readers that
    need a root and a path that belong together use ``snapshot``.
    """

    DEFAULT_DEPTH = DEFAULT_TREE_DEPTH
    MAX_DEPTH = 256

    def __init__(self, depth: int = DEFAULT_DEPTH):
        """
        Initialize an empty tree.

        Args:
            depth: Number of levels below the root (default 32)

        Raises:
            ValueError: If depth is out of range
        """
        if isinstance(depth, bool) or not isinstance(depth, int) or not 1 <= depth <= self.MAX_DEPTH:
            raise ValueError(f"Tree depth must be between 1 and {self.MAX_DEPTH}")

        self.depth = depth
        self.capacity = 2**depth
        self.defaults = _default_hashes(depth)
        self.nodes: Dict[Tuple[int, int], FieldElement] = {}
        self._lock = threading.RLock()

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidIndexError(f"Leaf index must be an integer, got {type(index).__name__}")
        if not 0 <= index < self.capacity:
            raise InvalidIndexError(f"Leaf index {index} outside [0, 2^{self.depth})")

    def _node(self, level: int, prefix: int) -> FieldElement:
        return self.nodes.get((level, prefix), self.defaults[level])

    def set(self, index: int, value: FieldLike) -> FieldElement:
        """
        Set a leaf and rehash its ancestors.

        Args:
            index: Leaf index in [0, 2^depth)
            value: New leaf value

        Returns:
            FieldElement: The new root

        Raises:
            InvalidIndexError: If index is out of range
        """
        self._check_index(index)
        value = to_field(value)

        with self._lock:
            self.nodes[(0, index)] = value
            current = value
            prefix = index
            for level in range(self.depth):
                sibling = self._node(level, prefix ^ 1)
                if prefix & 1:
                    current = hash_pair(sibling, current)
                else:
                    current = hash_pair(current, sibling)
                prefix >>= 1
                self.nodes[(level + 1, prefix)] = current

        logger.debug(f"Leaf {index} set, root={current.hex()}")
        return current

    def get(self, index: int) -> MerkleProof:
        """
        Return the leaf value and its sibling path.

        Unset leaves read as the default zero leaf.

        Raises:
            InvalidIndexError: If index is out of range
        """
        self._check_index(index)

        with self._lock:
            siblings = []
            prefix = index
            for level in range(self.depth):
                siblings.append(self._node(level, prefix ^ 1))
                prefix >>= 1
            return MerkleProof(index=index, value=self._node(0, index), siblings=tuple(siblings))

    @property
    def root(self) -> FieldElement:
        """Get the current root."""
        with self._lock:
            return self._node(self.depth, 0)

    def snapshot(self, index: int) -> Tuple[FieldElement, MerkleProof]:
        """Read the root and the path for ``index`` under one lock."""
        with self._lock:
            return self.root, self.get(index)

    @staticmethod
    def compute_root(index: int, value: FieldLike, siblings) -> FieldElement:
        """Fold a leaf and its siblings up to a root."""
        current = to_field(value)
        for level, sibling in enumerate(siblings):
            if (index >> level) & 1:
                current = hash_pair(sibling, current)
            else:
                current = hash_pair(current, sibling)
        return current

    @staticmethod
    def verify(
        root: FieldLike, index: int, value: FieldLike, proof: MerkleProof, depth: int = DEFAULT_DEPTH
    ) -> bool:
        """
        Verify that ``value`` sits at ``index`` under ``root``.

        This is the same fold the withdrawal circuit performs over the
        witness. Malformed input returns False rather than raising.

        Args:
            root: Claimed root
            index: Leaf index
            value: Leaf value
            proof: Proof returned by ``get``
            depth: Depth of the tree ``root`` belongs to

        Returns:
            bool: True if the recomputed root equals ``root``
        """
        try:
            if isinstance(index, bool) or not isinstance(index, int):
                return False
            # A shorter path would let an inner node pass as a leaf.
            if len(proof.siblings) != depth:
                return False
            if not 0 <= index < 2**depth:
                return False
            return SparseMerkleTree.compute_root(index, value, proof.siblings) == to_field(root)
        except (AttributeError, TypeError, ValueError):
            return False

    @staticmethod
    def check(
        root: FieldLike, index: int, value: FieldLike, proof: MerkleProof, depth: int = DEFAULT_DEPTH
    ) -> None:
        """
        Like ``verify`` but raise on mismatch.

        Raises:
            StaleRootError: If the proof does not lead to ``root``
        """
        if not SparseMerkleTree.verify(root, index, value, proof, depth):
            raise StaleRootError(f"Proof for leaf {index} does not match root {to_field(root).hex()}")

    def get_state(self) -> dict:
        """
        Get a summary of the tree for logging or inspection.

        Returns:
            dict: Depth, number of set leaves and root
        """
        return {
            "depth": self.depth,
            "num_leaves": len(self),
            "root": self.root.hex(),
        }

    def __len__(self) -> int:
        """Return the number of explicitly set leaves."""
        with self._lock:
            return sum(1 for level, _ in self.nodes if level == 0)

    def __repr__(self) -> str:
        return (
            f"SparseMerkleTree(depth={self.depth}, "
            f"leaves={len(self)}, "
            f"root={self.root.hex()[:18]}...)"
        )
