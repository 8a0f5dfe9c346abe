"""
Bloom Tree - Exceptions

All errors are raised from construction and proof calls; nothing is
retried internally since no operation performs I/O.
"""


class BloomTreeError(Exception):
    """Base exception for bloom tree errors."""

    pass


class ConfigError(BloomTreeError):
    """Filter or chunk geometry is incompatible with the tree."""

    pass


class EmptyStructureError(BloomTreeError):
    """Bit storage yields no words to build leaves from."""

    pass


class ProofError(BloomTreeError):
    """Proof material or collaborator output is outside the expected domain."""

    pass


class VerificationError(ProofError):
    """Reconstructed root does not match the expected root."""

    pass
