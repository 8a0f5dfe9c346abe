"""
Bloom Tree - Hashing Primitives

Domain-separated SHA-256 hashing for the tree:
- Leaf digests are prefixed with 0x00 and bind the chunk ordinal
- Internal node digests are prefixed with 0x01 and bind both children

The prefixes follow RFC 6962 so a leaf digest can never be replayed
as an internal node (second preimage resistance).
"""

import hashlib
from collections.abc import Sequence

# Prefix bytes for domain separation (RFC 6962)
LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"

DIGEST_SIZE = 32
ORDINAL_BITS = 64


def _to_bytes(value: int, bits: int) -> bytes:
    if value < 0 or value >> bits:
        raise ValueError(f"Value {value} does not fit in {bits} unsigned bits")
    return value.to_bytes(bits // 8, "big")


def hash_leaf(ordinal: int, *words: int, word_bits: int = 64) -> bytes:
    """
    Compute the digest of a leaf.

    The ordinal is encoded as a 64-bit big-endian integer, followed by
    each word big-endian in word_bits // 8 bytes.

    Args:
        ordinal: Chunk index (or 0 for filler leaves)
        words: Chunk content as unsigned words
        word_bits: Width of each word in bits

    Returns:
        32-byte SHA-256 digest

    Raises:
        ValueError: If the ordinal or a word is out of range
    """
    hasher = hashlib.sha256()
    hasher.update(LEAF_PREFIX)
    hasher.update(_to_bytes(ordinal, ORDINAL_BITS))
    for word in words:
        hasher.update(_to_bytes(word, word_bits))
    return hasher.digest()


def hash_node(left: bytes, right: bytes) -> bytes:
    """
    Compute the digest of an internal node.

    Args:
        left: Digest of the left child
        right: Digest of the right child

    Returns:
        32-byte SHA-256 digest

    Raises:
        ValueError: If either child is not a 32-byte digest
    """
    if len(left) != DIGEST_SIZE or len(right) != DIGEST_SIZE:
        raise ValueError(
            f"Child digests must be {DIGEST_SIZE} bytes, "
            f"got {len(left)} and {len(right)}"
        )
    hasher = hashlib.sha256()
    hasher.update(NODE_PREFIX)
    hasher.update(left)
    hasher.update(right)
    return hasher.digest()


def hash_filler(index: int) -> bytes:
    """Digest of the padding leaf at position index: zero content, tagged by index."""
    return hash_leaf(0, index, word_bits=ORDINAL_BITS)


def hash_chunk(
    words: Sequence[int], ordinal: int, chunk_bits: int, word_bits: int
) -> bytes:
    """Leaf digest of a single chunk; the final chunk may hold fewer words."""
    step = chunk_bits // word_bits
    start = ordinal * step
    return hash_leaf(ordinal, *words[start : start + step], word_bits=word_bits)


def hash_chunks(words: Sequence[int], chunk_bits: int, word_bits: int) -> list[bytes]:
    """
    Hash a word sequence into one leaf digest per chunk.

    Args:
        words: Bit storage as unsigned words
        chunk_bits: Chunk size in bits
        word_bits: Word size in bits

    Returns:
        Leaf digests in chunk order
    """
    step = chunk_bits // word_bits
    return [
        hash_chunk(words, ordinal, chunk_bits, word_bits)
        for ordinal in range(-(-len(words) // step))
    ]
