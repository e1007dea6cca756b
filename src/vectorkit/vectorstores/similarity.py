"""
Metric-aware conversion of backend distances into relevance scores.

Relevance is higher-is-better. For ``IP`` the backend score already grows with
similarity and is used as is; for ``L2`` (squared Euclidean) it is
``1 - distance``. This is a sign convention, not a normalization to ``[0, 1]``:
thresholds are expressed on the same scale.
"""

from __future__ import annotations

from vectorkit.config.schema import MetricType


def to_relevance(distance: float, metric_type: MetricType) -> float:
    """Convert a native backend distance into a relevance score."""
    if MetricType(metric_type) is MetricType.IP:
        return float(distance)
    return 1.0 - float(distance)


def to_stored_distance(relevance: float) -> float:
    """Distance reported in result metadata: ``0`` means identical."""
    return 1.0 - relevance


class SimilarityNormalizer:
    """Relevance scoring and threshold filtering bound to one metric."""

    def __init__(self, metric_type: MetricType) -> None:
        self.metric_type = MetricType(metric_type)

    def relevance(self, distance: float) -> float:
        return to_relevance(distance, self.metric_type)

    @staticmethod
    def stored_distance(relevance: float) -> float:
        return to_stored_distance(relevance)

    @staticmethod
    def passes(relevance: float, threshold: float) -> bool:
        return relevance >= threshold
