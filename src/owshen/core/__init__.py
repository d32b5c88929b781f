"""Core wallet logic: tree, keys, proving and the withdrawal flow."""

from owshen.core.merkle_tree import MerkleProof, SparseMerkleTree, empty_root
from owshen.core.keys import (
    EphemeralKey,
    PrivateKey,
    PublicKey,
    info_response,
    stealth_address,
    stealth_response,
)
from owshen.core.zkproof import ProofAdapter, Prover, SnarkjsProver, Witness, prove
from owshen.core.withdrawal import (
    Withdrawal,
    WithdrawalStage,
    deposit_leaf,
    prepare_withdrawal,
    submit_withdrawal,
)

__all__ = [
    "MerkleProof",
    "SparseMerkleTree",
    "empty_root",
    "EphemeralKey",
    "PrivateKey",
    "PublicKey",
    "stealth_address",
    "stealth_response",
    "info_response",
    "ProofAdapter",
    "Prover",
    "SnarkjsProver",
    "Witness",
    "prove",
    "Withdrawal",
    "WithdrawalStage",
    "deposit_leaf",
    "prepare_withdrawal",
    "submit_withdrawal",
]
