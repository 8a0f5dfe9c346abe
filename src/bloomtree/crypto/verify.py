"""
Bloom Tree - Proof Verification

Checks a compact multiproof against a root the verifier already holds.

The verifier knows the element's candidate bit positions (it can compute
them from the filter's public hashing scheme) and the tree geometry. The
proof type tells it which positions the chunk digests stand for: all of
them for presence, or the single candidate at the proof-type ordinal for
absence.
"""

from collections.abc import Sequence

import structlog

from bloomtree.core.errors import ProofError, VerificationError
from bloomtree.crypto.multiproof import compute_root_from_multiproof
from bloomtree.crypto.proof import CompactMultiProof
from bloomtree.metrics import get_tree_metrics, metrics_enabled

logger = structlog.get_logger(__name__)


def proven_positions(
    proof: CompactMultiProof, candidate_positions: Sequence[int]
) -> list[int]:
    """
    Bit positions a proof's chunk digests correspond to, in proof order.

    Raises:
        ProofError: If an absence proof type has no matching candidate
    """
    if proof.is_presence:
        return sorted(candidate_positions)
    if proof.proof_type >= len(candidate_positions):
        raise ProofError(
            f"Proof type {proof.proof_type} out of range for "
            f"{len(candidate_positions)} candidate positions"
        )
    return [candidate_positions[proof.proof_type]]


def compute_root_from_proof(
    proof: CompactMultiProof,
    candidate_positions: Sequence[int],
    leaf_count: int,
    chunk_bits: int,
) -> bytes:
    """
    Compute the root a proof commits to.

    Args:
        proof: Proof to evaluate
        candidate_positions: All k positions of the element, in
            hash-function order
        leaf_count: Number of leaves in the tree, including fillers
        chunk_bits: Bits per leaf

    Returns:
        Computed root digest

    Raises:
        ProofError: If the proof is malformed
    """
    positions = proven_positions(proof, candidate_positions)
    if len(positions) != len(proof.chunks):
        raise ProofError(
            f"Proof carries {len(proof.chunks)} chunk digests for {len(positions)} positions"
        )
    leaf_indices = [position // chunk_bits for position in positions]
    return compute_root_from_multiproof(
        leaf_count, leaf_indices, proof.chunks, proof.hashes
    )


def proof_matches_root(
    proof: CompactMultiProof,
    candidate_positions: Sequence[int],
    expected_root: bytes,
    leaf_count: int,
    chunk_bits: int,
) -> bool:
    """
    Verify a proof against a specific root hash.

    Malformed proofs are reported as not matching.

    Returns:
        True if the proof reconstructs to expected_root
    """
    try:
        computed = compute_root_from_proof(
            proof, candidate_positions, leaf_count, chunk_bits
        )
    except ProofError as e:
        logger.debug("Malformed proof", error=str(e))
        valid = False
    else:
        valid = computed == expected_root

    if metrics_enabled():
        get_tree_metrics().record_verification(valid)
    return valid


def verify_compact_multiproof(
    proof: CompactMultiProof,
    candidate_positions: Sequence[int],
    expected_root: bytes,
    *,
    leaf_count: int,
    chunk_bits: int,
) -> bool:
    """
    Verify a proof and report what it proves.

    Args:
        proof: Proof to verify
        candidate_positions: All k positions of the element, in
            hash-function order
        expected_root: Trusted root digest
        leaf_count: Number of leaves in the tree, including fillers
        chunk_bits: Bits per leaf

    Returns:
        True if the proof shows presence, False if it shows absence

    Raises:
        ProofError: If the proof is malformed
        VerificationError: If the proof does not reconstruct expected_root
    """
    try:
        computed = compute_root_from_proof(
            proof, candidate_positions, leaf_count, chunk_bits
        )
    except ProofError:
        if metrics_enabled():
            get_tree_metrics().record_verification(False)
        raise

    valid = computed == expected_root
    if metrics_enabled():
        get_tree_metrics().record_verification(valid)
    if not valid:
        raise VerificationError(
            f"Computed root {computed.hex()} does not match {expected_root.hex()}"
        )
    return proof.is_presence
