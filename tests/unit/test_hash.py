"""Tests for the field type and the Poseidon hash."""

import pytest

from owshen.crypto.field import FIELD_MODULUS, FieldElement, to_field
from owshen.crypto.poseidon import POSEIDON_T3, PoseidonParams, generate_constants, permute, poseidon
from owshen.utils.hash import compute_commitment, compute_nullifier, hash_many, hash_pair
from owshen.exceptions import InvalidIndexError


class TestFieldElement:
    """Tests for field element reduction and encoding."""

    def test_modulus_is_bn254_scalar_field(self):
        assert FIELD_MODULUS == 21888242871839275222246405745257275088548364400416034343698204186575808495617

    def test_reduces_on_construction(self):
        assert FieldElement(FIELD_MODULUS + 5) == 5
        assert FieldElement(-1) == FIELD_MODULUS - 1

    def test_arithmetic_stays_in_field(self):
        a = FieldElement(FIELD_MODULUS - 1)
        assert a + 2 == 1
        assert isinstance(a + 2, FieldElement)

    def test_hex_roundtrip(self):
        value = FieldElement(123456789)
        encoded = value.hex()
        assert encoded.startswith("0x")
        assert len(encoded) == 66
        assert FieldElement.from_hex(encoded) == value

    def test_from_hex_rejects_unreduced(self):
        with pytest.raises(ValueError):
            FieldElement.from_hex(hex(FIELD_MODULUS))

    def test_from_hex_rejects_loose_syntax(self):
        for text in ["0x0x1", "1_0", " 0x1", "0x1\n", "0x", "", "+1", "0xg1"]:
            with pytest.raises(ValueError):
                FieldElement.from_hex(text)

    def test_from_hex_accepts_bare_digits(self):
        assert FieldElement.from_hex("ff") == 255

    def test_hashable(self):
        assert len({FieldElement(1), FieldElement(1 + FIELD_MODULUS)}) == 1

    def test_to_field_rejects_other_types(self):
        with pytest.raises(TypeError):
            to_field("12")
        with pytest.raises(TypeError):
            to_field(True)


class TestPoseidonConstants:
    """Tests for generated Poseidon parameters."""

    def test_constant_shapes(self):
        round_constants, mds = generate_constants(POSEIDON_T3)
        assert len(round_constants) == (8 + 57) * 3
        assert len(mds) == 3
        assert all(len(row) == 3 for row in mds)
        assert all(0 <= c < FIELD_MODULUS for c in round_constants)

    def test_first_round_constant(self):
        round_constants, _ = generate_constants(POSEIDON_T3)
        assert round_constants[0] == 0x0EE9A592BA9A9518D05986D656F40C2114C4993C11BB29938D21D47304CD8E6E

    def test_constants_are_cached(self):
        assert generate_constants(POSEIDON_T3) is generate_constants(POSEIDON_T3)

    def test_params_change_constants(self):
        other = PoseidonParams(version="test-x5-3-56", t=3, full_rounds=8, partial_rounds=56)
        assert generate_constants(other)[0] != generate_constants(POSEIDON_T3)[0]

    def test_wrong_input_count(self):
        with pytest.raises(ValueError):
            poseidon([1, 2, 3])
        with pytest.raises(ValueError):
            permute([0, 1])


class TestHashVectors:
    """Regression vectors shared with the circuit's Poseidon."""

    def test_hash_1_2(self):
        assert hash_pair(1, 2) == 0x115CC0F5E7D690413DF64C6B9662E9CF2A3617F2743245519E19607A4417189A

    def test_hash_123_234(self):
        assert hash_pair(123, 234).hex() == (
            "0x0e331f99e024251a3a17152d7562d6257edc99595f9169b4e3b122d58a0e9d62"
        )

    def test_hash_zero_zero(self):
        assert hash_pair(0, 0) == 0x2098F5FB9E239EAB3CEAC3F27B81E481DC3124D55FFED523A839EE8446B64864

    def test_hash_is_order_sensitive(self):
        assert hash_pair(123, 234) != hash_pair(234, 123)

    def test_hash_accepts_field_elements(self):
        assert hash_pair(FieldElement(123), FieldElement(234)) == hash_pair(123, 234)


class TestHashMany:
    """Tests for the left-fold combination order."""

    def test_fold_order(self):
        assert hash_many([1, 2, 3]) == hash_pair(hash_pair(1, 2), 3)

    def test_two_elements(self):
        assert hash_many([5, 6]) == hash_pair(5, 6)

    def test_single_and_empty(self):
        assert hash_many([42]) == 42
        assert hash_many([]) == 0


class TestCommitmentAndNullifier:
    """Tests for derived hashes."""

    def test_commitment_layout(self):
        assert compute_commitment(10, 20, 123) == hash_pair(hash_pair(10, 20), 123)

    def test_nullifier_layout(self):
        assert compute_nullifier(1234, 2345) == hash_pair(1234, 2345)

    def test_nullifier_rejects_bad_index(self):
        for index in [-1, 2**32, FIELD_MODULUS - 1, True, 1.0, "5"]:
            with pytest.raises(InvalidIndexError):
                compute_nullifier(1234, index)

    def test_nullifier_index_bound_follows_depth(self):
        assert compute_nullifier(1234, 2**32, depth=33) == hash_pair(1234, 2**32)
        with pytest.raises(InvalidIndexError):
            compute_nullifier(1234, 16, depth=4)
