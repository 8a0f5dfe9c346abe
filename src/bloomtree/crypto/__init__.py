"""
Bloom Tree - Cryptographic Core

Hash primitives, tree construction, compact multiproofs and verification.
"""

from bloomtree.crypto.hashing import hash_leaf, hash_node
from bloomtree.crypto.multiproof import (
    compute_root_from_multiproof,
    generate_compact_multiproof,
)
from bloomtree.crypto.proof import (
    MAX_K,
    PRESENCE_PROOF_TYPE,
    CompactMultiProof,
    is_presence_proof,
)
from bloomtree.crypto.tree import BloomTree
from bloomtree.crypto.verify import proof_matches_root, verify_compact_multiproof

__all__ = [
    "BloomTree",
    "CompactMultiProof",
    "MAX_K",
    "PRESENCE_PROOF_TYPE",
    "compute_root_from_multiproof",
    "generate_compact_multiproof",
    "hash_leaf",
    "hash_node",
    "is_presence_proof",
    "proof_matches_root",
    "verify_compact_multiproof",
]
