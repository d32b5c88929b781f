"""Pytest configuration and fixtures."""

import random
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from owshen.core.keys import PrivateKey  # noqa: E402
from owshen.models.schemas import Proof  # noqa: E402


class MockProver:
    """Prover that records the witness and returns a fixed proof."""

    def __init__(self, proof=None, error=None):
        self.proof = proof or Proof(a=(1, 2), b=((3, 4), (5, 6)), c=(7, 8))
        self.error = error
        self.calls = []

    def prove(self, witness, params_path):
        self.calls.append((witness, params_path))
        if self.error is not None:
            raise self.error
        return self.proof


@pytest.fixture
def rng():
    """Deterministic random source for reproducible key material."""
    return random.Random(1234)


@pytest.fixture
def private_key():
    """Fixed private key."""
    return PrivateKey(1234)


@pytest.fixture
def prover_factory():
    """Factory for mock provers with a chosen result or error."""
    return MockProver


@pytest.fixture
def mock_prover():
    return MockProver()


@pytest.fixture
def params_file(tmp_path):
    """Fixture providing a stand-in proving key file."""
    path = tmp_path / "coin_withdraw_0001.zkey"
    path.write_bytes(b"zkey")
    return path
