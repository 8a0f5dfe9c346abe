"""
Bloom Tree - Bloom Filter Collaborator

The tree never depends on a concrete filter. Any object providing these
four operations can be committed to.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class BloomFilterLike(Protocol):
    """
    Narrow interface consumed from a Bloom filter.

    Bit positions index the bit array; bit p lives in word
    p // word_bits at offset p % word_bits, least significant bit first.
    """

    def bit_storage(self) -> Sequence[int]:
        """Snapshot of the bit array as fixed-width unsigned words."""
        ...

    def test(self, element: bytes) -> tuple[Sequence[int], bool]:
        """
        Check membership of an element.

        Returns:
            (all k positions, True) if present, or
            (one unset candidate position, False) if absent
        """
        ...

    def hash_function_count(self) -> int:
        """Number of hash functions k."""
        ...

    def candidate_positions(self, element: bytes) -> Sequence[int]:
        """All k positions the element maps to, in hash-function order."""
        ...
