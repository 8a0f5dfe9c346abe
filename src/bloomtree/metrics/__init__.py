"""
Bloom Tree - Metrics Module

Prometheus metrics for tree builds, proofs and verifications.
"""

from bloomtree.metrics.tree_metrics import (
    TreeMetrics,
    get_tree_metrics,
    metrics_enabled,
)

__all__ = [
    "TreeMetrics",
    "get_tree_metrics",
    "metrics_enabled",
]
