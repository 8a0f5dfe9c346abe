"""
Bloom Tree - Tree Construction

A complete binary hash tree over a Bloom filter's bit array.

The bit array is split into fixed-size chunks, each hashed into a leaf
bound to its ordinal. The leaf layer is padded to a power of two with
filler leaves, then folded upward into a flat node array:

    [leaf 0 .. leaf L-1, layer 1 .., layer 2 .., ..., root]

Every internal slot i (i >= L) is hash_node(node[2*(i-L)], node[2*(i-L)+1]).
The array is built once and never mutated, so a tree can be shared by any
number of concurrent readers. If the filter changes, build a new tree.
"""

import time
from collections.abc import Iterable

import structlog

from bloomtree.core.config import settings
from bloomtree.core.errors import ConfigError, EmptyStructureError
from bloomtree.crypto.hashing import hash_chunks, hash_filler, hash_node
from bloomtree.crypto.multiproof import generate_compact_multiproof
from bloomtree.crypto.proof import MAX_K, CompactMultiProof
from bloomtree.crypto.proof import prove as prove_element
from bloomtree.filter import BloomFilterLike
from bloomtree.metrics import get_tree_metrics, metrics_enabled

logger = structlog.get_logger(__name__)


def _next_power_of_two(n: int) -> int:
    return 1 << (n - 1).bit_length()


def _check_geometry(chunk_bits: int, word_bits: int) -> None:
    if word_bits <= 0 or word_bits % 8:
        raise ConfigError(f"Word size must be a positive multiple of 8 bits, got {word_bits}")
    if chunk_bits <= 0 or chunk_bits & (chunk_bits - 1):
        raise ConfigError(f"Chunk size must be a power of two, got {chunk_bits}")
    if chunk_bits % word_bits:
        raise ConfigError(
            f"Chunk size {chunk_bits} is not a whole number of {word_bits}-bit words"
        )


class BloomTree:
    """
    Authenticated commitment to a Bloom filter.

    Features:
    - Deterministic construction from the filter's bit storage
    - Domain separation for leaf and internal nodes
    - Compact multiproofs of presence and absence
    - Immutable after construction

    Example:
        >>> tree = BloomTree.build(bloom_filter)
        >>> proof = tree.prove(b"element")
        >>> proof.is_presence
        True
    """

    def __init__(
        self,
        bloom_filter: BloomFilterLike,
        nodes: tuple[bytes, ...],
        chunk_count: int,
        chunk_bits: int,
        word_bits: int,
    ) -> None:
        """
        Initialize bloom tree (internal use).

        Use build() to construct trees.
        """
        self._bloom_filter = bloom_filter
        self._nodes = nodes
        self._chunk_count = chunk_count
        self._chunk_bits = chunk_bits
        self._word_bits = word_bits

    @classmethod
    def build(
        cls,
        bloom_filter: BloomFilterLike,
        chunk_bits: int | None = None,
        word_bits: int | None = None,
    ) -> "BloomTree":
        """
        Construct a bloom tree from a filter's current bit storage.

        Args:
            bloom_filter: Filter to commit to
            chunk_bits: Bits per leaf, defaults to settings.CHUNK_BITS
            word_bits: Bits per storage word, defaults to settings.WORD_BITS

        Returns:
            Constructed BloomTree

        Raises:
            ConfigError: If the filter uses MAX_K or more hash functions,
                the chunk geometry is invalid, or a storage word is
                wider than word_bits
            EmptyStructureError: If the bit storage has no words
        """
        started = time.perf_counter()
        chunk_bits = settings.CHUNK_BITS if chunk_bits is None else chunk_bits
        word_bits = settings.WORD_BITS if word_bits is None else word_bits

        k = bloom_filter.hash_function_count()
        if k >= MAX_K:
            raise ConfigError(
                f"Bloom filter hash function count must be smaller than {MAX_K}, got {k}"
            )
        _check_geometry(chunk_bits, word_bits)

        words = list(bloom_filter.bit_storage())
        if not words:
            raise EmptyStructureError("Tree must have at least 1 leaf")

        try:
            leaves = hash_chunks(words, chunk_bits, word_bits)
        except ValueError as e:
            raise ConfigError(f"Bit storage does not fit {word_bits}-bit words: {e}") from e
        chunk_count = len(leaves)
        leaf_count = _next_power_of_two(chunk_count)

        nodes = list(leaves)
        nodes.extend(hash_filler(i) for i in range(chunk_count, leaf_count))
        for i in range(leaf_count, 2 * leaf_count - 1):
            child = 2 * (i - leaf_count)
            nodes.append(hash_node(nodes[child], nodes[child + 1]))

        tree = cls(bloom_filter, tuple(nodes), chunk_count, chunk_bits, word_bits)

        if metrics_enabled():
            get_tree_metrics().record_build(time.perf_counter() - started, leaf_count)
        logger.info(
            "Bloom tree built",
            words=len(words),
            chunks=chunk_count,
            leaf_count=leaf_count,
            hash_functions=k,
            root=tree.root.hex(),
        )

        return tree

    @property
    def root(self) -> bytes:
        """Get the root digest (the commitment)."""
        return self._nodes[-1]

    @property
    def nodes(self) -> tuple[bytes, ...]:
        """Get the flat node array."""
        return self._nodes

    @property
    def bloom_filter(self) -> BloomFilterLike:
        """Get the committed filter."""
        return self._bloom_filter

    @property
    def leaf_count(self) -> int:
        """Get the number of leaves, including fillers."""
        return (len(self._nodes) + 1) // 2

    @property
    def chunk_count(self) -> int:
        """Get the number of leaves backed by filter chunks."""
        return self._chunk_count

    @property
    def height(self) -> int:
        """Get the number of layers above the leaves."""
        return self.leaf_count.bit_length() - 1

    @property
    def chunk_bits(self) -> int:
        return self._chunk_bits

    @property
    def word_bits(self) -> int:
        return self._word_bits

    def chunk_index(self, position: int) -> int:
        """Get the index of the chunk holding a bit position."""
        return position // self._chunk_bits

    def get_leaf_hash(self, index: int) -> bytes:
        """
        Get the digest of a leaf by index.

        Raises:
            IndexError: If index out of bounds
        """
        if index < 0 or index >= self.leaf_count:
            raise IndexError(f"Leaf index {index} out of bounds")
        return self._nodes[index]

    def compact_proof(self, leaf_indices: Iterable[int]) -> list[bytes]:
        """Supplementary digests proving a set of leaves against the root."""
        return generate_compact_multiproof(self._nodes, self.leaf_count, leaf_indices)

    def prove(self, element: bytes) -> CompactMultiProof:
        """Generate a compact multiproof of presence or absence for an element."""
        return prove_element(self, element)
