"""Tests for vectorkit.vectorstores.similarity: metric sign convention."""

import pytest

from vectorkit.config.schema import MetricType
from vectorkit.vectorstores.similarity import SimilarityNormalizer, to_relevance, to_stored_distance


class TestRelevance:
    @pytest.mark.parametrize("score", [-0.5, 0.0, 0.3, 1.7])
    def test_inner_product_is_unchanged(self, score):
        assert to_relevance(score, MetricType.IP) == pytest.approx(score)

    @pytest.mark.parametrize("distance", [0.0, 0.4, 1.0, 2.5])
    def test_l2_is_one_minus_distance(self, distance):
        assert to_relevance(distance, MetricType.L2) == pytest.approx(1 - distance)

    def test_accepts_metric_names(self):
        assert to_relevance(0.25, "IP") == pytest.approx(0.25)

    @pytest.mark.parametrize("metric", [MetricType.IP, MetricType.L2])
    def test_stored_distance_is_one_minus_relevance(self, metric):
        normalizer = SimilarityNormalizer(metric)
        relevance = normalizer.relevance(0.3)

        assert normalizer.stored_distance(relevance) == pytest.approx(1 - relevance)
        assert to_stored_distance(relevance) == normalizer.stored_distance(relevance)

    def test_identical_vectors_report_zero_distance_under_l2(self):
        normalizer = SimilarityNormalizer(MetricType.L2)
        assert normalizer.stored_distance(normalizer.relevance(0.0)) == 0.0


class TestThreshold:
    def test_threshold_is_inclusive(self):
        assert SimilarityNormalizer.passes(0.5, 0.5)
        assert not SimilarityNormalizer.passes(0.49, 0.5)

    def test_default_threshold_drops_negative_relevance(self):
        assert not SimilarityNormalizer.passes(-0.1, 0.0)
