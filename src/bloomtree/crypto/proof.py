"""
Bloom Tree - Proof Assembly

Packages the chunk digests for an element's relevant bit positions, the
compact multiproof hashes and a proof-type marker.

Proof types:
- PRESENCE_PROOF_TYPE: every candidate bit of the element is set
- 0..k-1: absence, witnessed by the element's i-th candidate bit being unset
"""

import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from bloomtree.core.errors import ProofError
from bloomtree.crypto.hashing import hash_chunk
from bloomtree.metrics import get_tree_metrics, metrics_enabled

if TYPE_CHECKING:
    from bloomtree.crypto.tree import BloomTree

logger = structlog.get_logger(__name__)

# Reserved proof type for presence; hash function counts must stay below it
MAX_K = 255
PRESENCE_PROOF_TYPE = MAX_K


def is_presence_proof(proof_type: int) -> bool:
    """Check whether a proof type marks a presence proof."""
    return proof_type == PRESENCE_PROOF_TYPE


@dataclass(frozen=True)
class CompactMultiProof:
    """
    Compact multiproof of presence or absence.

    Attributes:
        chunks: Leaf digest for each sorted bit position, repeated when
            several positions fall in the same chunk
        hashes: Deduplicated supplementary digests, layer order then
            index order
        proof_type: PRESENCE_PROOF_TYPE, or the ordinal of the unset
            candidate bit for an absence proof
    """

    chunks: tuple[bytes, ...]
    hashes: tuple[bytes, ...]
    proof_type: int

    def __post_init__(self) -> None:
        if not 0 <= self.proof_type <= MAX_K:
            raise ProofError(f"Proof type {self.proof_type} does not fit in a byte")

    @property
    def is_presence(self) -> bool:
        """Check if this proof claims presence."""
        return is_presence_proof(self.proof_type)


def _bit(words: Sequence[int], position: int, word_bits: int) -> int:
    return (words[position // word_bits] >> (position % word_bits)) & 1


def _check_positions(
    positions: Sequence[int],
    present: bool,
    words: Sequence[int],
    word_bits: int,
) -> None:
    if not positions:
        raise ProofError("Bloom filter returned no bit positions")
    if not present and len(positions) != 1:
        raise ProofError(
            f"Absence answer must carry exactly one position, got {len(positions)}"
        )

    total_bits = len(words) * word_bits
    expected = 1 if present else 0
    for position in positions:
        if position < 0 or position >= total_bits:
            raise ProofError(
                f"Bit position {position} out of range for {total_bits} bits"
            )
        if _bit(words, position, word_bits) != expected:
            state = "unset" if present else "set"
            raise ProofError(
                f"Bit position {position} is {state}, contradicting the filter's answer"
            )


def _absence_ordinal(candidates: Sequence[int], position: int) -> int:
    # Last matching ordinal when hash functions collide on the same bit
    ordinal = None
    for i, candidate in enumerate(candidates):
        if candidate == position:
            ordinal = i
    if ordinal is None:
        raise ProofError(
            f"Unset position {position} is not among the element's candidate positions"
        )
    if ordinal >= MAX_K:
        raise ProofError(f"Candidate ordinal {ordinal} collides with the presence marker")
    return ordinal


def prove(tree: "BloomTree", element: bytes) -> CompactMultiProof:
    """
    Generate a compact multiproof of presence or absence for an element.

    Chunk digests are recomputed from the filter's current bit storage.
    If the filter changed since the tree was built, the proof will not
    verify against the tree's root.

    Args:
        tree: Tree committing to the element's filter
        element: Element to prove

    Returns:
        CompactMultiProof for the element

    Raises:
        ProofError: If the filter answers outside the expected domain
    """
    started = time.perf_counter()
    bloom_filter = tree.bloom_filter

    try:
        raw_positions, present = bloom_filter.test(element)
        positions = sorted(int(position) for position in raw_positions)
        words = list(bloom_filter.bit_storage())
        _check_positions(positions, present, words, tree.word_bits)

        chunk_indices = [tree.chunk_index(position) for position in positions]
        stale = [index for index in chunk_indices if index >= tree.chunk_count]
        if stale:
            raise ProofError(
                f"Chunk {stale[0]} is beyond the {tree.chunk_count} chunks committed by the tree"
            )

        try:
            digests = {
                index: hash_chunk(words, index, tree.chunk_bits, tree.word_bits)
                for index in set(chunk_indices)
            }
        except ValueError as e:
            raise ProofError(
                f"Bit storage does not fit {tree.word_bits}-bit words: {e}"
            ) from e
        chunks = tuple(digests[index] for index in chunk_indices)
        hashes = tuple(tree.compact_proof(chunk_indices))

        if present:
            proof_type = PRESENCE_PROOF_TYPE
        else:
            candidates = bloom_filter.candidate_positions(element)
            proof_type = _absence_ordinal(candidates, positions[0])
    except ProofError as e:
        logger.warning("Proof generation rejected", error=str(e))
        if metrics_enabled():
            get_tree_metrics().record_proof_error()
        raise

    if metrics_enabled():
        get_tree_metrics().record_proof(
            present, len(hashes), time.perf_counter() - started
        )
    logger.debug(
        "Compact multiproof generated",
        present=present,
        positions=len(positions),
        chunks=len(set(chunk_indices)),
        hashes=len(hashes),
        proof_type=proof_type,
    )

    return CompactMultiProof(chunks=chunks, hashes=hashes, proof_type=proof_type)
