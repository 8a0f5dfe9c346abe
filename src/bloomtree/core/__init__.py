"""
Bloom Tree - Core

Configuration, logging and the exception hierarchy.
"""

from bloomtree.core.config import Settings, get_settings, settings
from bloomtree.core.errors import (
    BloomTreeError,
    ConfigError,
    EmptyStructureError,
    ProofError,
    VerificationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "BloomTreeError",
    "ConfigError",
    "EmptyStructureError",
    "ProofError",
    "VerificationError",
]
