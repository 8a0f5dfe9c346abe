"""
Unit tests for compact multiproof generation and root reconstruction.
"""

from itertools import combinations

import pytest

from bloomtree.core.errors import ProofError
from bloomtree.crypto.multiproof import (
    compute_root_from_multiproof,
    generate_compact_multiproof,
)
from bloomtree.crypto.tree import BloomTree


def _flip_bit(digest: bytes) -> bytes:
    return bytes([digest[0] ^ 0x01]) + digest[1:]


def _reconstruct(tree: BloomTree, indices: list[int], hashes: list[bytes]) -> bytes:
    digests = [tree.get_leaf_hash(i) for i in indices]
    return compute_root_from_multiproof(tree.leaf_count, indices, digests, hashes)


class TestGenerate:
    """Tests for the supplementary hash list."""

    def test_single_target_is_authentication_path(self, wide_tree: BloomTree) -> None:
        """Test one leaf yields its sibling at every layer."""
        nodes = wide_tree.nodes

        # leaf 5: sibling 4, then layer 1 sibling 3 (slot 11), layer 2 sibling 0 (slot 12)
        assert wide_tree.compact_proof([5]) == [nodes[4], nodes[11], nodes[12]]

    def test_adjacent_pair_is_resolved(self, wide_tree: BloomTree) -> None:
        """Test siblings proven together need no leaf-layer hash."""
        nodes = wide_tree.nodes
        assert wide_tree.compact_proof([0, 1]) == [nodes[9], nodes[13]]

    def test_distant_pair_resolves_higher_up(self, wide_tree: BloomTree) -> None:
        """Test leaves 0 and 7 share nothing until the top layer."""
        nodes = wide_tree.nodes

        # layer 0: siblings 1, 6; layer 1: siblings 1, 2 (slots 9, 10); layer 2 resolved
        assert wide_tree.compact_proof([7, 0]) == [nodes[1], nodes[6], nodes[9], nodes[10]]

    def test_all_leaves_is_empty(self, wide_tree: BloomTree) -> None:
        """Test proving every leaf needs no supplementary hashes."""
        assert wide_tree.compact_proof(range(8)) == []

    def test_duplicates_collapse(self, wide_tree: BloomTree) -> None:
        """Test repeated indices produce the same proof as unique ones."""
        assert wide_tree.compact_proof([2, 2, 5, 2]) == wide_tree.compact_proof([2, 5])

    def test_single_leaf_tree(self) -> None:
        """Test a one-leaf tree never needs supplementary hashes."""
        root = b"\x11" * 32
        assert generate_compact_multiproof([root], 1, [0]) == []

    def test_index_out_of_range_raises(self, wide_tree: BloomTree) -> None:
        """Test indices beyond the leaf layer are rejected."""
        with pytest.raises(ProofError, match="out of range"):
            wide_tree.compact_proof([8])

    def test_node_array_size_mismatch_raises(self, wide_tree: BloomTree) -> None:
        """Test the node array must match the leaf count."""
        with pytest.raises(ProofError):
            generate_compact_multiproof(wide_tree.nodes[:-1], 8, [0])

    def test_root_never_included(self, wide_tree: BloomTree) -> None:
        """Test the root is never part of a proof."""
        for index in range(8):
            assert wide_tree.root not in wide_tree.compact_proof([index])


class TestMinimality:
    """Tests for proof size."""

    def test_never_exceeds_independent_paths(self, wide_tree: BloomTree) -> None:
        """Test every subset costs at most one path per distinct leaf and reconstructs."""
        for size in range(1, 9):
            for indices in combinations(range(8), size):
                hashes = wide_tree.compact_proof(indices)

                assert len(hashes) <= len(indices) * wide_tree.height
                assert len(set(hashes)) == len(hashes)
                assert _reconstruct(wide_tree, list(indices), hashes) == wide_tree.root


class TestComputeRoot:
    """Tests for verifier-side reconstruction."""

    def test_reconstruct_with_duplicates(self, wide_tree: BloomTree) -> None:
        """Test repeated leaves with equal digests reconstruct the root."""
        indices = [3, 3, 6]
        hashes = wide_tree.compact_proof(indices)
        assert _reconstruct(wide_tree, indices, hashes) == wide_tree.root

    def test_tampered_hash_changes_root(self, wide_tree: BloomTree) -> None:
        """Test flipping one bit of any supplementary hash changes the root."""
        indices = [1, 4]
        hashes = wide_tree.compact_proof(indices)

        for i in range(len(hashes)):
            tampered = list(hashes)
            tampered[i] = _flip_bit(tampered[i])
            assert _reconstruct(wide_tree, indices, tampered) != wide_tree.root

    def test_tampered_leaf_changes_root(self, wide_tree: BloomTree) -> None:
        """Test flipping one bit of a leaf digest changes the root."""
        indices = [2]
        hashes = wide_tree.compact_proof(indices)
        digests = [_flip_bit(wide_tree.get_leaf_hash(2))]

        computed = compute_root_from_multiproof(8, indices, digests, hashes)
        assert computed != wide_tree.root

    def test_wrong_index_changes_root(self, wide_tree: BloomTree) -> None:
        """Test claiming the proof for a different leaf fails."""
        hashes = wide_tree.compact_proof([2])
        computed = compute_root_from_multiproof(
            8, [3], [wide_tree.get_leaf_hash(2)], hashes
        )
        assert computed != wide_tree.root

    def test_missing_hash_raises(self, wide_tree: BloomTree) -> None:
        """Test too few supplementary hashes are rejected."""
        hashes = wide_tree.compact_proof([5])

        with pytest.raises(ProofError, match="missing"):
            _reconstruct(wide_tree, [5], hashes[:-1])

    def test_extra_hash_raises(self, wide_tree: BloomTree) -> None:
        """Test leftover supplementary hashes are rejected."""
        hashes = wide_tree.compact_proof([5])

        with pytest.raises(ProofError, match="unused"):
            _reconstruct(wide_tree, [5], hashes + [b"\x00" * 32])

    def test_conflicting_duplicate_raises(self, wide_tree: BloomTree) -> None:
        """Test a repeated leaf with two different digests is rejected."""
        digest = wide_tree.get_leaf_hash(0)

        with pytest.raises(ProofError, match="Conflicting"):
            compute_root_from_multiproof(
                8, [0, 0], [digest, _flip_bit(digest)], wide_tree.compact_proof([0])
            )

    def test_length_mismatch_raises(self) -> None:
        """Test indices and digests must pair up."""
        with pytest.raises(ProofError):
            compute_root_from_multiproof(4, [0, 1], [b"\x00" * 32], [])

    def test_no_leaves_raises(self) -> None:
        """Test a proof without leaves is rejected."""
        with pytest.raises(ProofError):
            compute_root_from_multiproof(4, [], [], [])

    def test_short_digest_raises(self) -> None:
        """Test digests must be 32 bytes."""
        with pytest.raises(ProofError, match="32 bytes"):
            compute_root_from_multiproof(1, [0], [b"\x00" * 31], [])

    def test_non_power_of_two_leaf_count_raises(self) -> None:
        """Test leaf count must describe a complete tree."""
        with pytest.raises(ProofError, match="power of two"):
            compute_root_from_multiproof(3, [0], [b"\x00" * 32], [])
