"""Deposit and withdrawal flows tying the tree, keys and prover together."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, TypeVar

from owshen.core.keys import PrivateKey, PublicKey
from owshen.core.merkle_tree import SparseMerkleTree
from owshen.core.zkproof import ProofAdapter
from owshen.crypto.field import FieldElement, FieldLike, to_field
from owshen.models.schemas import Proof, PublicInputs
from owshen.utils.hash import compute_commitment
from owshen.exceptions import MerkleTreeError, ProofGenerationError, WithdrawalError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WithdrawalStage(str, Enum):
    """Step of a withdrawal attempt, reported on failure."""
    TREE_LOOKUP = "tree_lookup"
    PROOF_GENERATION = "proof_generation"
    SUBMISSION = "submission"


@dataclass(frozen=True)
class Withdrawal:
    """Proof plus the public inputs it was generated against."""

    proof: Proof
    public_inputs: PublicInputs

    @property
    def root(self) -> FieldElement:
        return FieldElement(self.public_inputs.root)

    @property
    def nullifier(self) -> FieldElement:
        return FieldElement(self.public_inputs.nullifier)


def deposit_leaf(tree: SparseMerkleTree, index: int, public_key: PublicKey, timestamp: int) -> FieldElement:
    """
    Record a deposit event in the tree.

    Args:
        tree: Tree maintained by the indexer
        index: Leaf index assigned to the deposit
        public_key: Stealth public key the deposit was sent to
        timestamp: Deposit timestamp

    Returns:
        FieldElement: The commitment written at ``index``
    """
    commitment = compute_commitment(public_key.point.x, public_key.point.y, timestamp)
    tree.set(index, commitment)
    return commitment


def prepare_withdrawal(
    tree: SparseMerkleTree,
    private_key: PrivateKey,
    index: int,
    timestamp: int,
    fee_a: FieldLike,
    fee_b: FieldLike,
    adapter: ProofAdapter,
) -> Withdrawal:
    """
    Build the proof and public inputs for withdrawing the note at ``index``.

    The root and the path are read under one lock so the proof is built
    against the root it will be checked with.

    Raises:
        WithdrawalError: With ``stage`` set to the step that failed
    """
    try:
        root, merkle_proof = tree.snapshot(index)
        SparseMerkleTree.check(root, index, merkle_proof.value, merkle_proof, tree.depth)
    except MerkleTreeError as e:
        raise WithdrawalError(WithdrawalStage.TREE_LOOKUP, str(e)) from e

    nullifier = private_key.nullifier(index, tree.depth)

    try:
        fee_a, fee_b = to_field(fee_a), to_field(fee_b)
    except TypeError as e:
        raise WithdrawalError(WithdrawalStage.PROOF_GENERATION, f"Invalid fee: {e}") from e

    try:
        proof = adapter.prove(
            index,
            merkle_proof.value,
            timestamp,
            merkle_proof.siblings,
            fee_a,
            fee_b,
        )
    except ProofGenerationError as e:
        raise WithdrawalError(WithdrawalStage.PROOF_GENERATION, str(e)) from e

    public_inputs = PublicInputs(root=root.n, nullifier=nullifier.n, fee_a=fee_a.n, fee_b=fee_b.n)
    logger.info(f"Withdrawal of leaf {index} ready against root {root.hex()}")
    return Withdrawal(proof=proof, public_inputs=public_inputs)


def submit_withdrawal(withdrawal: Withdrawal, submitter: Callable[[Proof, List[int]], T]) -> T:
    """
    Hand a withdrawal to the chain-interaction layer.

    ``submitter`` receives the proof and the public inputs in verifier
    order and returns whatever the chain layer returns (e.g. a tx hash).

    Raises:
        WithdrawalError: With stage ``submission`` if the submitter fails
    """
    try:
        return submitter(withdrawal.proof, withdrawal.public_inputs.as_list())
    except Exception as e:
        raise WithdrawalError(WithdrawalStage.SUBMISSION, str(e)) from e
