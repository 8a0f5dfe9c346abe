"""
Bloom Tree - Compact Multiproofs

Derives, for a set of target leaves, the minimal list of sibling digests
needed to recompute the root, and the verifier-side reconstruction.

Nodes live in a flat array: leaves in [0, L), then each internal layer
breadth-first, root last. Siblings are adjacent pairs (2m, 2m + 1)
within a layer, so the sibling of v is v ^ 1 and its parent is v // 2.

Per layer, every known index is grouped by its canonical pair. A pair
with both members known is resolved and costs nothing; a pair with one
member known needs exactly one supplementary digest. Supplementary
digests are ordered layer by layer from the leaves upward, then by
position within the layer. The root is never part of a proof.
"""

from collections.abc import Iterable, Sequence

from bloomtree.core.errors import ProofError
from bloomtree.crypto.hashing import DIGEST_SIZE, hash_node

# Resolution state for a pair whose members are both known
RESOLVED = -1


def _order(a: int, b: int) -> tuple[int, int]:
    return (b, a) if a > b else (a, b)


def _check_leaf_count(leaf_count: int) -> None:
    if leaf_count < 1 or leaf_count & (leaf_count - 1):
        raise ProofError(f"Leaf count must be a power of two, got {leaf_count}")


def _check_indices(indices: Iterable[int], leaf_count: int) -> None:
    for index in indices:
        if index < 0 or index >= leaf_count:
            raise ProofError(f"Leaf index {index} out of range for {leaf_count} leaves")


def _pair_states(frontier: Iterable[int]) -> dict[tuple[int, int], int]:
    """Map each canonical pair to its single known member, or RESOLVED."""
    states: dict[tuple[int, int], int] = {}
    for index in frontier:
        pair = _order(index, index ^ 1)
        if pair in states and states[pair] != index:
            states[pair] = RESOLVED
        else:
            states[pair] = index
    return states


def generate_compact_multiproof(
    nodes: Sequence[bytes],
    leaf_count: int,
    leaf_indices: Iterable[int],
) -> list[bytes]:
    """
    Compute the supplementary digests proving a set of leaves.

    Repeated indices collapse to a single target.

    Args:
        nodes: Flat node array of a complete tree with leaf_count leaves
        leaf_count: Number of leaves (power of two)
        leaf_indices: Target leaf positions

    Returns:
        Deduplicated sibling digests, layer order then index order

    Raises:
        ProofError: If an index is outside the leaf layer
    """
    _check_leaf_count(leaf_count)
    frontier = set(leaf_indices)
    _check_indices(frontier, leaf_count)
    if len(nodes) != 2 * leaf_count - 1:
        raise ProofError(
            f"Node array of size {len(nodes)} does not match {leaf_count} leaves"
        )

    hashes: list[bytes] = []
    layer_offset = 0
    layer_size = leaf_count

    while layer_size > 1:
        states = _pair_states(frontier)

        siblings = sorted(known ^ 1 for known in states.values() if known != RESOLVED)
        hashes.extend(nodes[layer_offset + sibling] for sibling in siblings)

        frontier = {left // 2 for left, _ in states}
        layer_offset += layer_size
        layer_size //= 2

    return hashes


def compute_root_from_multiproof(
    leaf_count: int,
    leaf_indices: Sequence[int],
    leaf_digests: Sequence[bytes],
    hashes: Sequence[bytes],
) -> bytes:
    """
    Recompute the root from target leaves and supplementary digests.

    Args:
        leaf_count: Number of leaves in the committed tree
        leaf_indices: Target leaf positions, may repeat
        leaf_digests: Digest for each entry of leaf_indices
        hashes: Supplementary digests as produced by
            generate_compact_multiproof

    Returns:
        Computed root digest

    Raises:
        ProofError: If the proof material is malformed
    """
    _check_leaf_count(leaf_count)
    if len(leaf_indices) != len(leaf_digests):
        raise ProofError(
            f"Got {len(leaf_digests)} leaf digests for {len(leaf_indices)} indices"
        )
    if not leaf_indices:
        raise ProofError("Cannot compute a root from zero leaves")
    _check_indices(leaf_indices, leaf_count)
    for digest in (*leaf_digests, *hashes):
        if len(digest) != DIGEST_SIZE:
            raise ProofError(f"Digest must be {DIGEST_SIZE} bytes, got {len(digest)}")

    known: dict[int, bytes] = {}
    for index, digest in zip(leaf_indices, leaf_digests):
        if known.setdefault(index, digest) != digest:
            raise ProofError(f"Conflicting digests for leaf {index}")

    supply = iter(hashes)
    layer_size = leaf_count

    while layer_size > 1:
        parents: dict[int, bytes] = {}
        for left in sorted({index & ~1 for index in known}):
            left_digest = known.get(left)
            right_digest = known.get(left + 1)
            if left_digest is None:
                left_digest = next(supply, None)
            elif right_digest is None:
                right_digest = next(supply, None)
            if left_digest is None or right_digest is None:
                raise ProofError("Proof is missing supplementary hashes")
            parents[left // 2] = hash_node(left_digest, right_digest)
        known = parents
        layer_size //= 2

    if next(supply, None) is not None:
        raise ProofError("Proof carries unused supplementary hashes")

    return known[0]
