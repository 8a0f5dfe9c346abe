"""
Bloom Tree

Authenticated Bloom filters: a hash tree over the filter's bit array with
compact multiproofs of presence and absence.
"""

from bloomtree.core.errors import (
    BloomTreeError,
    ConfigError,
    EmptyStructureError,
    ProofError,
    VerificationError,
)
from bloomtree.crypto import (
    MAX_K,
    PRESENCE_PROOF_TYPE,
    BloomTree,
    CompactMultiProof,
    is_presence_proof,
    proof_matches_root,
    verify_compact_multiproof,
)
from bloomtree.filter import BloomFilterLike

__version__ = "1.0.0"

__all__ = [
    "BloomFilterLike",
    "BloomTree",
    "BloomTreeError",
    "CompactMultiProof",
    "ConfigError",
    "EmptyStructureError",
    "MAX_K",
    "PRESENCE_PROOF_TYPE",
    "ProofError",
    "VerificationError",
    "is_presence_proof",
    "proof_matches_root",
    "verify_compact_multiproof",
]
