"""Main package initialization."""

__version__ = "0.1.0"
__author__ = "Owshen Team"
__description__ = "Owshen: cryptographic core of a private value-transfer wallet"

from .core.merkle_tree import SparseMerkleTree, MerkleProof
from .core.keys import PrivateKey, PublicKey, EphemeralKey
from .core.zkproof import ProofAdapter, Witness, prove
from .models.schemas import Proof, PublicInputs

__all__ = [
    "SparseMerkleTree",
    "MerkleProof",
    "PrivateKey",
    "PublicKey",
    "EphemeralKey",
    "ProofAdapter",
    "Witness",
    "prove",
    "Proof",
    "PublicInputs",
]
