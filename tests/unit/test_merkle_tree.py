"""Tests for the Sparse Merkle Tree."""

import threading

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from owshen.core.merkle_tree import MerkleProof, SparseMerkleTree, empty_root
from owshen.crypto.field import FieldElement
from owshen.utils.hash import hash_pair
from owshen.exceptions import InvalidIndexError, StaleRootError


@pytest.fixture
def tree():
    """Create a small test tree."""
    return SparseMerkleTree(depth=8)


class TestTreeInitialization:
    """Tests for tree construction and defaults."""

    def test_default_depth(self):
        tree = SparseMerkleTree()
        assert tree.depth == 32
        assert tree.capacity == 2**32
        assert len(tree) == 0

    def test_invalid_depth(self):
        for depth in [0, -1, 257]:
            with pytest.raises(ValueError):
                SparseMerkleTree(depth=depth)
        with pytest.raises(ValueError):
            SparseMerkleTree(depth="8")

    def test_default_hashes_are_self_hashes(self, tree):
        assert tree.defaults[0] == 0
        for level in range(tree.depth):
            assert tree.defaults[level + 1] == hash_pair(tree.defaults[level], tree.defaults[level])

    def test_empty_root(self, tree):
        assert tree.root == empty_root(8)
        assert tree.root == tree.defaults[8]

    def test_unset_leaves_read_default(self, tree):
        for index in [0, 1, 77, 255]:
            assert tree.get(index).value == 0

    def test_no_dense_allocation(self):
        tree = SparseMerkleTree(depth=32)
        tree.set(12345678, 1)
        assert len(tree.nodes) == 33


class TestTreeSetGet:
    """Tests for leaf updates and proofs."""

    def test_set_returns_new_root(self, tree):
        root = tree.set(3, 99)
        assert root == tree.root
        assert root != empty_root(8)

    def test_get_returns_value_and_siblings(self, tree):
        tree.set(5, 42)
        proof = tree.get(5)
        assert isinstance(proof, MerkleProof)
        assert proof.index == 5
        assert proof.value == 42
        assert len(proof.siblings) == 8
        assert proof.path_bits == [1, 0, 1, 0, 0, 0, 0, 0]

    def test_verify_after_set(self, tree):
        tree.set(10, 1000)
        proof = tree.get(10)
        assert SparseMerkleTree.verify(tree.root, 10, proof.value, proof, depth=8)

    def test_verify_unset_leaf(self, tree):
        tree.set(10, 1000)
        proof = tree.get(11)
        assert SparseMerkleTree.verify(tree.root, 11, 0, proof, depth=8)

    def test_verify_wrong_value(self, tree):
        tree.set(10, 1000)
        proof = tree.get(10)
        assert not SparseMerkleTree.verify(tree.root, 10, 1001, proof, depth=8)

    def test_verify_wrong_index(self, tree):
        tree.set(10, 1000)
        proof = tree.get(10)
        assert not SparseMerkleTree.verify(tree.root, 11, 1000, proof, depth=8)
        assert not SparseMerkleTree.verify(tree.root, 256, 1000, proof, depth=8)
        assert not SparseMerkleTree.verify(tree.root, -1, 1000, proof, depth=8)

    def test_stale_root_after_update(self, tree):
        tree.set(10, 1000)
        old_root = tree.root
        proof = tree.get(10)
        tree.set(200, 7)
        assert not SparseMerkleTree.verify(tree.root, 10, 1000, proof, depth=8)
        assert SparseMerkleTree.verify(old_root, 10, 1000, proof, depth=8)
        assert SparseMerkleTree.verify(tree.root, 10, 1000, tree.get(10), depth=8)

    def test_check_raises_stale_root(self, tree):
        tree.set(10, 1000)
        proof = tree.get(10)
        tree.set(11, 1)
        with pytest.raises(StaleRootError):
            SparseMerkleTree.check(tree.root, 10, 1000, proof, depth=8)

    def test_verify_rejects_truncated_path(self, tree):
        tree.set(10, 1000)
        proof = tree.get(10)
        inner = hash_pair(1000, proof.siblings[0])
        shortened = MerkleProof(index=5, value=inner, siblings=proof.siblings[1:])
        assert not SparseMerkleTree.verify(tree.root, 5, inner, shortened, depth=8)
        with pytest.raises(StaleRootError):
            SparseMerkleTree.check(tree.root, 5, inner, shortened, depth=8)

    def test_verify_rejects_root_as_leaf(self, tree):
        tree.set(10, 1000)
        empty = MerkleProof(index=0, value=tree.root, siblings=())
        assert not SparseMerkleTree.verify(tree.root, 0, tree.root, empty, depth=8)
        assert not SparseMerkleTree.verify(tree.root, 0, tree.root, empty)

    def test_verify_rejects_depth_mismatch(self, tree):
        tree.set(10, 1000)
        proof = tree.get(10)
        assert not SparseMerkleTree.verify(tree.root, 10, 1000, proof)

    def test_overwrite_leaf(self, tree):
        tree.set(4, 1)
        tree.set(4, 2)
        assert tree.get(4).value == 2
        assert len(tree) == 1

    def test_set_back_to_default_restores_empty_root(self, tree):
        tree.set(4, 1)
        tree.set(4, 0)
        assert tree.root == empty_root(8)

    def test_idempotent_set(self, tree):
        tree.set(9, 555)
        root_once = tree.root
        tree.set(9, 555)
        assert tree.root == root_once

    def test_root_for_single_leaf(self):
        tree = SparseMerkleTree(depth=2)
        tree.set(2, 7)
        d0 = FieldElement(0)
        d1 = hash_pair(d0, d0)
        assert tree.root == hash_pair(d1, hash_pair(7, d0))


class TestInvalidIndex:
    """Out-of-range indices are rejected, never wrapped."""

    @pytest.mark.parametrize("index", [-1, 256, 2**40])
    def test_set_out_of_range(self, tree, index):
        with pytest.raises(InvalidIndexError):
            tree.set(index, 1)

    @pytest.mark.parametrize("index", [-1, 256, 2**40])
    def test_get_out_of_range(self, tree, index):
        with pytest.raises(InvalidIndexError):
            tree.get(index)

    def test_non_integer_index(self, tree):
        with pytest.raises(InvalidIndexError):
            tree.set(1.0, 1)
        with pytest.raises(InvalidIndexError):
            tree.get(True)

    def test_no_truncation_at_depth_32(self):
        tree = SparseMerkleTree(depth=32)
        with pytest.raises(InvalidIndexError):
            tree.set(2**32, 1)
        tree.set(2**32 - 1, 1)
        assert tree.get(0).value == 0


class TestTreeSnapshot:
    """Tests for consistent root/path reads."""

    def test_snapshot_matches(self, tree):
        tree.set(1, 11)
        root, proof = tree.snapshot(1)
        assert SparseMerkleTree.verify(root, 1, proof.value, proof, depth=8)

    def test_snapshot_with_concurrent_writer(self, tree):
        tree.set(0, 1)
        stop = threading.Event()

        def writer():
            value = 2
            while not stop.is_set():
                tree.set(value % 256, value)
                value += 1

        thread = threading.Thread(target=writer)
        thread.start()
        try:
            for _ in range(20):
                root, proof = tree.snapshot(0)
                assert SparseMerkleTree.verify(root, 0, proof.value, proof, depth=8)
        finally:
            stop.set()
            thread.join()


class TestTreeProperties:
    """Property-based tests for tree invariants."""

    @given(st.dictionaries(st.integers(0, 255), st.integers(0, 2**64), min_size=1, max_size=6))
    @settings(max_examples=15, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_order_independence(self, assignments):
        items = list(assignments.items())
        forward = SparseMerkleTree(depth=8)
        backward = SparseMerkleTree(depth=8)
        for index, value in items:
            forward.set(index, value)
        for index, value in reversed(items):
            backward.set(index, value)
        assert forward.root == backward.root

    @given(st.integers(0, 2**32 - 1), st.integers(0, 2**64))
    @settings(max_examples=10, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_membership_after_set(self, index, value):
        tree = SparseMerkleTree(depth=32)
        tree.set(index, value)
        proof = tree.get(index)
        assert proof.value == value
        assert SparseMerkleTree.verify(tree.root, index, value, proof)

    @given(st.integers(1, 16), st.data())
    @settings(max_examples=10, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_default_value_consistent(self, depth, data):
        tree = SparseMerkleTree(depth=depth)
        index = data.draw(st.integers(0, 2**depth - 1))
        proof = tree.get(index)
        assert proof.value == tree.defaults[0]
        assert SparseMerkleTree.verify(tree.root, index, 0, proof, depth=depth)
