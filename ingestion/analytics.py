# ============================================================================
# DATASET ANALYTICS
# ============================================================================
# STATUS: Ingestion - field statistics for map styling
# PURPOSE: Summary statistics and classification breaks of a numeric property
# EXPORTS: FieldStatistics, field_statistics, classification_breaks
# DEPENDENCIES: numpy
# ============================================================================
"""
Dataset Analytics.

Both functions read one property across the features of a normalized
FeatureCollection and only consider real numbers: bools, strings, None
and NaN are skipped.

classification_breaks uses quantile partitioning of the sorted values. It
stands in for Jenks natural breaks and is not a Jenks implementation: the
cut points are the values at positions floor(i / n * len) for i = 1..n-1.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np


@dataclass(frozen=True)
class FieldStatistics:
    count: int
    min: float
    max: float
    mean: float
    median: float
    std: float  # Population standard deviation

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'min': self.min,
            'max': self.max,
            'mean': self.mean,
            'median': self.median,
            'stdDev': self.std,
        }


def _numeric_values(collection: Dict[str, Any], field: str) -> np.ndarray:
    values = []
    for feature in collection.get('features') or []:
        value = (feature.get('properties') or {}).get(field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if math.isnan(value):
            continue
        values.append(value)
    return np.sort(np.asarray(values, dtype='float64'))


def field_statistics(collection: Dict[str, Any], field: str) -> Optional[FieldStatistics]:
    """
    count/min/max/mean/median/std of a numeric property.

    The median is the upper-middle element for an even count.

    Returns:
        None when no feature has a numeric value for the field
    """
    values = _numeric_values(collection, field)
    if values.size == 0:
        return None

    return FieldStatistics(
        count=int(values.size),
        min=float(values[0]),
        max=float(values[-1]),
        mean=float(values.mean()),
        median=float(values[values.size // 2]),
        std=float(values.std()),
    )


def classification_breaks(collection: Dict[str, Any], field: str, num_classes: int) -> List[float]:
    """
    num_classes - 1 quantile cut points of a numeric property.

    Returns:
        [] when there are no numeric values or fewer than two classes
    """
    values = _numeric_values(collection, field)
    if values.size == 0 or num_classes < 2:
        return []

    return [
        float(values[math.floor(i / num_classes * values.size)])
        for i in range(1, num_classes)
    ]
