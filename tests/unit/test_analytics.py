"""
Field statistics and classification break tests.
"""

import math

import pytest

from ingestion.analytics import classification_breaks, field_statistics
from tests.factories.model_factories import make_feature_collection


class TestFieldStatistics:

    def test_basic_statistics(self):
        stats = field_statistics(make_feature_collection([4, 1, 3, 2]), "value")
        assert stats.count == 4
        assert stats.min == 1.0
        assert stats.max == 4.0
        assert stats.mean == pytest.approx(2.5)
        # Upper-middle element for even counts
        assert stats.median == 3.0
        assert stats.std == pytest.approx(math.sqrt(1.25))

    def test_non_numeric_values_skipped(self):
        collection = make_feature_collection([10, "n/a", None, True, float("nan"), 20])
        stats = field_statistics(collection, "value")
        assert stats.count == 2
        assert stats.mean == pytest.approx(15.0)

    def test_no_values(self):
        assert field_statistics(make_feature_collection(["a", "b"]), "value") is None
        assert field_statistics(make_feature_collection([1, 2]), "missing") is None

    def test_to_dict_keys(self):
        data = field_statistics(make_feature_collection([5]), "value").to_dict()
        assert set(data) == {"count", "min", "max", "mean", "median", "stdDev"}
        assert data["stdDev"] == 0.0


class TestClassificationBreaks:

    def test_quantile_positions(self):
        collection = make_feature_collection(list(range(10, 0, -1)))
        # sorted 1..10; positions floor(i/4*10) = 2, 5, 7
        assert classification_breaks(collection, "value", 4) == [3.0, 6.0, 8.0]

    def test_breaks_count(self):
        collection = make_feature_collection(list(range(100)))
        assert len(classification_breaks(collection, "value", 5)) == 4

    @pytest.mark.parametrize("num_classes", [0, 1])
    def test_too_few_classes(self, num_classes):
        assert classification_breaks(make_feature_collection([1, 2, 3]), "value", num_classes) == []

    def test_no_values(self):
        assert classification_breaks(make_feature_collection([]), "value", 5) == []
