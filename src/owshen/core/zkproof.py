"""Proof adapter: witness assembly and calls into the external prover.

The withdrawal circuit is compiled and set up outside this package. What
reaches us is a Groth16 proving key (the parameter artifact) and a witness
calculator; the adapter turns tree, key and fee data into the circuit's
input, hands it to a ``Prover`` and returns a verifier-ready ``Proof``.

Proving takes seconds. Run ``ProofAdapter.submit`` on a worker executor
rather than calling ``prove`` on a latency-critical path.
"""

import json
import logging
import os
import subprocess
import tempfile
import time
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Tuple, Union

from owshen.config import get_settings
from owshen.crypto.field import FieldElement, FieldLike, to_field
from owshen.models.schemas import Proof
from owshen.exceptions import ProofGenerationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class Witness:
    """
    Private input of one proving call.

    Exists only for the duration of ``ProofAdapter.prove``; never persisted.
    """

    leaf_index: int
    leaf_value: FieldElement
    timestamp: int
    merkle_path: Tuple[FieldElement, ...]
    fee_a: FieldElement
    fee_b: FieldElement

    def to_circuit_input(self) -> dict:
        """Map to the circuit's input signals as decimal strings."""
        return {
            "index": str(self.leaf_index),
            "value": str(self.leaf_value.n),
            "timestamp": str(self.timestamp),
            "proof": [str(sibling.n) for sibling in self.merkle_path],
            "fee_a": str(self.fee_a.n),
            "fee_b": str(self.fee_b.n),
        }


class Prover(Protocol):
    """Anything that can turn a witness and a proving key into a proof."""

    def prove(self, witness: Witness, params_path: Path) -> Proof:
        ...


class SnarkjsProver:
    """
    Prover backed by the ``snarkjs`` CLI.

    Runs ``snarkjs groth16 fullprove`` in a private temporary directory,
    which computes the witness from the wasm calculator and proves it with
    the zkey in one step.
    """

    def __init__(self, witness_wasm: PathLike, snarkjs_bin: str = "snarkjs", timeout: float = 300.0):
        self.witness_wasm = Path(witness_wasm)
        self.snarkjs_bin = snarkjs_bin
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings=None) -> "SnarkjsProver":
        settings = settings or get_settings()
        return cls(
            witness_wasm=settings.witness_wasm,
            snarkjs_bin=settings.snarkjs_bin,
            timeout=settings.prove_timeout,
        )

    def prove(self, witness: Witness, params_path: Path) -> Proof:
        if not self.witness_wasm.is_file():
            raise ProofGenerationError(f"Witness calculator not found: {self.witness_wasm}")

        with tempfile.TemporaryDirectory(prefix="owshen-prove-") as temp_dir:
            temp_path = Path(temp_dir)
            input_file = temp_path / "input.json"
            proof_file = temp_path / "proof.json"
            public_file = temp_path / "public.json"
            input_file.write_text(json.dumps(witness.to_circuit_input()))

            cmd = [
                self.snarkjs_bin, "groth16", "fullprove",
                str(input_file),
                str(self.witness_wasm),
                str(params_path),
                str(proof_file),
                str(public_file),
            ]

            try:
                result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
            except FileNotFoundError as e:
                raise ProofGenerationError(f"Prover executable not found: {self.snarkjs_bin}") from e
            except subprocess.TimeoutExpired as e:
                raise ProofGenerationError(f"Prover timed out after {self.timeout}s") from e

            if result.returncode != 0:
                raise ProofGenerationError(f"Proof generation failed: {result.stderr.strip()}")

            try:
                return Proof.from_snarkjs(json.loads(proof_file.read_text()))
            except (OSError, ValueError, KeyError, IndexError) as e:
                raise ProofGenerationError(f"Prover returned malformed proof: {e}") from e


class ProofAdapter:
    """
    Builds witnesses and drives a ``Prover`` against a fixed proving key.

    Either a complete ``Proof`` comes back or ``ProofGenerationError`` is
    raised; nothing partial escapes.
    """

    def __init__(self, prover: Prover, params_path: PathLike, depth: int = 32):
        self.prover = prover
        self.params_path = Path(params_path)
        self.depth = depth

    @classmethod
    def from_settings(cls, prover: Optional[Prover] = None, settings=None) -> "ProofAdapter":
        settings = settings or get_settings()
        return cls(
            prover=prover or SnarkjsProver.from_settings(settings),
            params_path=settings.params_file,
            depth=settings.tree_depth,
        )

    def _check_params(self) -> None:
        if not self.params_path.is_file():
            raise ProofGenerationError(f"Parameter artifact not found: {self.params_path}")
        if not os.access(self.params_path, os.R_OK):
            raise ProofGenerationError(f"Parameter artifact not readable: {self.params_path}")

    def build_witness(
        self,
        leaf_index: int,
        leaf_value: FieldLike,
        timestamp: int,
        merkle_path: Sequence[FieldLike],
        fee_a: FieldLike,
        fee_b: FieldLike,
    ) -> Witness:
        """
        Assemble and validate a witness for the circuit.

        Raises:
            ProofGenerationError: If the witness does not fit the circuit layout
        """
        if isinstance(leaf_index, bool) or not isinstance(leaf_index, int):
            raise ProofGenerationError("Leaf index must be an integer")
        if not 0 <= leaf_index < 2**self.depth:
            raise ProofGenerationError(f"Leaf index {leaf_index} outside circuit depth {self.depth}")
        if len(merkle_path) != self.depth:
            raise ProofGenerationError(
                f"Merkle path has {len(merkle_path)} siblings, circuit expects {self.depth}"
            )
        if isinstance(timestamp, bool) or not isinstance(timestamp, int) or timestamp < 0:
            raise ProofGenerationError("Timestamp must be a non-negative integer")

        try:
            return Witness(
                leaf_index=leaf_index,
                leaf_value=to_field(leaf_value),
                timestamp=timestamp,
                merkle_path=tuple(to_field(sibling) for sibling in merkle_path),
                fee_a=to_field(fee_a),
                fee_b=to_field(fee_b),
            )
        except TypeError as e:
            raise ProofGenerationError(f"Invalid witness value: {e}") from e

    def prove(
        self,
        leaf_index: int,
        leaf_value: FieldLike,
        timestamp: int,
        merkle_path: Sequence[FieldLike],
        fee_a: FieldLike,
        fee_b: FieldLike,
    ) -> Proof:
        """
        Generate a withdrawal proof.

        Args:
            leaf_index: Index of the note in the tree
            leaf_value: Commitment stored at that index
            timestamp: Deposit timestamp bound into the commitment
            merkle_path: Sibling hashes from leaf to root
            fee_a: First fee term (public input)
            fee_b: Second fee term (public input)

        Returns:
            Proof: Verifier-ready proof

        Raises:
            ProofGenerationError: On a missing artifact, a witness that does
                not fit the circuit or a prover failure
        """
        self._check_params()
        witness = self.build_witness(leaf_index, leaf_value, timestamp, merkle_path, fee_a, fee_b)

        logger.info(f"Proving withdrawal of leaf {leaf_index} with {self.params_path.name}")
        start = time.monotonic()
        try:
            proof = self.prover.prove(witness, self.params_path)
        except ProofGenerationError:
            logger.error(f"Proof generation failed for leaf {leaf_index}", exc_info=True)
            raise
        except Exception as e:
            logger.error(f"Prover raised for leaf {leaf_index}: {e}", exc_info=True)
            raise ProofGenerationError(f"Prover internal error: {e}") from e

        if not isinstance(proof, Proof):
            raise ProofGenerationError(f"Prover returned {type(proof).__name__}, expected Proof")

        logger.info(f"Proof for leaf {leaf_index} generated in {time.monotonic() - start:.2f}s")
        return proof

    def submit(self, executor: Executor, *args, **kwargs) -> "Future[Proof]":
        """Run ``prove`` on ``executor``; use ``Future.result(timeout)`` to bound it."""
        return executor.submit(self.prove, *args, **kwargs)


def prove(
    params_artifact_path: PathLike,
    leaf_index: int,
    leaf_value: FieldLike,
    timestamp: int,
    merkle_path: Sequence[FieldLike],
    fee_a: FieldLike,
    fee_b: FieldLike,
    prover: Optional[Prover] = None,
) -> Proof:
    """
    One-shot proving call with the configured snarkjs prover.

    The circuit depth comes from settings (``OWSHEN_TREE_DEPTH``).
    """
    settings = get_settings()
    adapter = ProofAdapter(
        prover=prover or SnarkjsProver.from_settings(settings),
        params_path=params_artifact_path,
        depth=settings.tree_depth,
    )
    return adapter.prove(leaf_index, leaf_value, timestamp, merkle_path, fee_a, fee_b)
