"""
Pytest configuration and shared fixtures for bloom tree tests.
"""

import hashlib
import struct
from collections.abc import Callable, Iterable, Sequence

import pytest

from bloomtree.crypto.tree import BloomTree

# Bits set in the reference scenario filter
SCENARIO_BITS = (0, 1, 8, 13, 18, 19, 20, 26, 28, 32, 33, 37)


def _words_from_bits(bits: Iterable[int], size: int, word_bits: int) -> list[int]:
    words = [0] * -(-size // word_bits)
    for bit in bits:
        words[bit // word_bits] |= 1 << (bit % word_bits)
    return words


class StaticBloomFilter:
    """
    Filter over a fixed bit set with an explicit element to candidates map.
    """

    def __init__(
        self,
        bits: Iterable[int],
        size: int,
        candidates: dict[bytes, Sequence[int]],
        word_bits: int = 64,
        k: int | None = None,
    ) -> None:
        self.bits = set(bits)
        self.size = size
        self.candidates = candidates
        self.word_bits = word_bits
        self.k = k if k is not None else max((len(c) for c in candidates.values()), default=1)

    def set_bit(self, bit: int) -> None:
        self.bits.add(bit)

    def bit_storage(self) -> list[int]:
        return _words_from_bits(self.bits, self.size, self.word_bits)

    def test(self, element: bytes) -> tuple[list[int], bool]:
        positions = list(self.candidates[element])
        for position in positions:
            if position not in self.bits:
                return [position], False
        return positions, True

    def hash_function_count(self) -> int:
        return self.k

    def candidate_positions(self, element: bytes) -> list[int]:
        return list(self.candidates[element])


class SeededBloomFilter:
    """
    Bloom filter keyed by a secret seed, using double hashing over BLAKE2b.
    """

    def __init__(self, size: int, k: int, seed: bytes) -> None:
        self.size = size
        self.k = k
        self.seed = seed
        self.words = [0] * -(-size // 64)

    def add(self, element: bytes) -> None:
        for position in self.candidate_positions(element):
            self.words[position // 64] |= 1 << (position % 64)

    def _is_set(self, position: int) -> bool:
        return bool((self.words[position // 64] >> (position % 64)) & 1)

    def bit_storage(self) -> list[int]:
        return list(self.words)

    def test(self, element: bytes) -> tuple[list[int], bool]:
        positions = self.candidate_positions(element)
        for position in positions:
            if not self._is_set(position):
                return [position], False
        return positions, True

    def hash_function_count(self) -> int:
        return self.k

    def candidate_positions(self, element: bytes) -> list[int]:
        digest = hashlib.blake2b(element, key=self.seed, digest_size=16).digest()
        h1, h2 = struct.unpack("<QQ", digest)
        return [(h1 + i * h2) % self.size for i in range(self.k)]


@pytest.fixture
def scenario_filter() -> StaticBloomFilter:
    """Create the 38-bit scenario filter with 8-bit words."""
    return StaticBloomFilter(
        bits=SCENARIO_BITS,
        size=38,
        word_bits=8,
        candidates={
            b"thirteen": [13],
            b"sixteen": [16],
            b"spread": [33, 8, 19],
            b"partial": [1, 22, 16],
            b"same-chunk": [19, 18, 20],
            b"repeated": [16, 3, 16],
            b"grown": [50],
        },
        k=3,
    )


@pytest.fixture
def scenario_tree(scenario_filter: StaticBloomFilter) -> BloomTree:
    """Create a tree over the scenario filter with 16-bit chunks (3 chunks, 4 leaves)."""
    return BloomTree.build(scenario_filter, chunk_bits=16, word_bits=8)


@pytest.fixture
def static_filter_factory() -> Callable[..., StaticBloomFilter]:
    """Create static filters on demand."""
    return StaticBloomFilter


@pytest.fixture
def seeded_filter() -> SeededBloomFilter:
    """Create a seeded 4096-bit filter holding element-0 .. element-19."""
    bloom = SeededBloomFilter(size=4096, k=5, seed=b"secret seed")
    for i in range(20):
        bloom.add(f"element-{i}".encode())
    return bloom


@pytest.fixture
def seeded_tree(seeded_filter: SeededBloomFilter) -> BloomTree:
    """Create a tree over the seeded filter with 256-bit chunks (16 leaves)."""
    return BloomTree.build(seeded_filter, chunk_bits=256, word_bits=64)


@pytest.fixture
def wide_tree(static_filter_factory: Callable[..., StaticBloomFilter]) -> BloomTree:
    """Create an 8-leaf tree, one 64-bit word per leaf."""
    bloom = static_filter_factory(
        bits=range(0, 512, 7), size=512, candidates={}, word_bits=64, k=1
    )
    return BloomTree.build(bloom, chunk_bits=64, word_bits=64)
