"""
Bloom Tree - Metrics

Prometheus metrics for tree construction, proof generation and
verification.

Metrics Categories:
- Tree building
- Proof generation
- Proof verification
"""

import threading

from prometheus_client import Counter, Histogram, Info

import structlog

from bloomtree.core.config import settings

logger = structlog.get_logger(__name__)


class TreeMetrics:
    """
    Centralized metrics for bloom tree operations.

    Provides visibility into:
    - Tree build time and size
    - Proof counts by kind and proof size
    - Verification outcomes
    """

    def __init__(self) -> None:
        """Initialize all tree metrics."""
        self._init_build_metrics()
        self._init_proof_metrics()
        self._init_verification_metrics()
        self._init_info_metrics()

    def _init_build_metrics(self) -> None:
        """Initialize tree build metrics."""
        self.build_duration = Histogram(
            "bloomtree_build_duration_seconds",
            "Bloom tree build time",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
        )

        self.tree_leaves = Histogram(
            "bloomtree_leaves",
            "Number of leaves (after padding) in a bloom tree",
            buckets=[1, 16, 256, 1024, 4096, 16384, 65536, 262144],
        )

    def _init_proof_metrics(self) -> None:
        """Initialize proof generation metrics."""
        self.proofs_generated = Counter(
            "bloomtree_proofs_generated_total",
            "Compact multiproofs generated",
            ["kind"],
        )

        self.proof_hashes = Histogram(
            "bloomtree_proof_supplementary_hashes",
            "Supplementary hashes per compact multiproof",
            buckets=[0, 1, 2, 4, 8, 16, 32, 64, 128],
        )

        self.proof_duration = Histogram(
            "bloomtree_proof_duration_seconds",
            "Compact multiproof generation time",
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05],
        )

        self.proof_errors = Counter(
            "bloomtree_proof_errors_total",
            "Proof requests rejected",
        )

    def _init_verification_metrics(self) -> None:
        """Initialize verification metrics."""
        self.verifications = Counter(
            "bloomtree_verifications_total",
            "Compact multiproof verifications",
            ["result"],
        )

    def _init_info_metrics(self) -> None:
        """Initialize info metrics."""
        self.library_info = Info(
            "bloomtree_library",
            "Bloom tree library information",
        )

    # Convenience methods

    def record_build(self, duration: float, leaf_count: int) -> None:
        """Record tree build."""
        self.build_duration.observe(duration)
        self.tree_leaves.observe(leaf_count)

    def record_proof(self, presence: bool, hash_count: int, duration: float) -> None:
        """Record proof generation."""
        kind = "presence" if presence else "absence"
        self.proofs_generated.labels(kind=kind).inc()
        self.proof_hashes.observe(hash_count)
        self.proof_duration.observe(duration)

    def record_proof_error(self) -> None:
        """Record rejected proof request."""
        self.proof_errors.inc()

    def record_verification(self, valid: bool) -> None:
        """Record proof verification."""
        result = "valid" if valid else "invalid"
        self.verifications.labels(result=result).inc()

    def set_library_info(self, version: str, chunk_bits: int, word_bits: int) -> None:
        """Set library information."""
        self.library_info.info(
            {
                "version": version,
                "chunk_bits": str(chunk_bits),
                "word_bits": str(word_bits),
            }
        )


# Global metrics instance
_tree_metrics: TreeMetrics | None = None
_tree_metrics_lock = threading.Lock()


def get_tree_metrics() -> TreeMetrics:
    """Get global tree metrics instance."""
    global _tree_metrics
    if _tree_metrics is None:
        with _tree_metrics_lock:
            if _tree_metrics is None:
                metrics = TreeMetrics()
                metrics.set_library_info(
                    settings.VERSION, settings.CHUNK_BITS, settings.WORD_BITS
                )
                _tree_metrics = metrics
                logger.debug("Tree metrics initialized")
    return _tree_metrics


def metrics_enabled() -> bool:
    return settings.METRICS_ENABLED
