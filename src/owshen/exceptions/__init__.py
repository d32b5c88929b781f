"""Custom exceptions for the Owshen core."""


class OwshenError(Exception):
    """Base exception for all Owshen errors."""
    pass


# Cryptography Errors
class CryptoError(OwshenError):
    """Base exception for cryptographic errors."""
    pass


class DecodeError(CryptoError, ValueError):
    """Raised when an address or key cannot be decoded from text."""
    pass


# Merkle Tree Errors
class MerkleTreeError(OwshenError):
    """Base exception for Merkle tree errors."""
    pass


class InvalidIndexError(MerkleTreeError):
    """Raised when a leaf index is outside the tree's address space."""
    pass


class StaleRootError(MerkleTreeError):
    """Raised when a proof does not lead to the claimed root."""
    pass


# Proof Errors
class ProofError(OwshenError):
    """Base exception for proof-related errors."""
    pass


class ProofGenerationError(ProofError):
    """Raised when the external prover cannot produce a proof."""
    pass


# Withdrawal Errors
class WithdrawalError(OwshenError):
    """Raised when a withdrawal attempt fails.

    ``stage`` names the step that failed so the caller can tell a tree
    lookup problem from a proving or submission problem.
    """

    def __init__(self, stage, message: str):
        super().__init__(f"[{getattr(stage, 'value', stage)}] {message}")
        self.stage = stage
