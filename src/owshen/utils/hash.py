"""Field hash utilities shared by the tree, the keys and the witness."""

from typing import Iterable

from owshen.crypto.field import FieldElement, FieldLike, to_field
from owshen.crypto.poseidon import POSEIDON_T3, PoseidonParams, poseidon
from owshen.exceptions import InvalidIndexError

DEFAULT_TREE_DEPTH = 32


def hash_pair(left: FieldLike, right: FieldLike, params: PoseidonParams = POSEIDON_T3) -> FieldElement:
    """
    Compute Poseidon(left, right).

    Used for every Merkle node, so it must match the circuit's hasher
    exactly.

    Args:
        left: Left input
        right: Right input
        params: Poseidon instance (two-input)

    Returns:
        FieldElement: Hash output
    """
    return FieldElement(poseidon([to_field(left).n, to_field(right).n], params))


def hash_many(values: Iterable[FieldLike]) -> FieldElement:
    """
    Hash a sequence by left-folding ``hash_pair``.

    hash_many([x0, x1, x2]) == hash_pair(hash_pair(x0, x1), x2)

    A single element hashes to itself and an empty sequence to zero.
    """
    acc = None
    for value in values:
        acc = to_field(value) if acc is None else hash_pair(acc, value)
    return FieldElement(0) if acc is None else acc


def compute_commitment(point_x: FieldLike, point_y: FieldLike, timestamp: int) -> FieldElement:
    """
    Compute the deposit commitment H(H(x, y), timestamp).

    Args:
        point_x: Stealth public key x coordinate
        point_y: Stealth public key y coordinate
        timestamp: Deposit timestamp

    Returns:
        FieldElement: Leaf value for the deposit
    """
    return hash_many([point_x, point_y, timestamp])


def compute_nullifier(secret: FieldLike, index: int, depth: int = DEFAULT_TREE_DEPTH) -> FieldElement:
    """
    Compute nullifier nf = H(secret, index).

    Raises:
        InvalidIndexError: If index is not a leaf index of a ``depth`` tree
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidIndexError(f"Leaf index must be an integer, got {type(index).__name__}")
    if not 0 <= index < 2**depth:
        raise InvalidIndexError(f"Leaf index {index} outside [0, 2^{depth})")
    return hash_pair(secret, index)
