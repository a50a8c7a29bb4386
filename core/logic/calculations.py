# ============================================================================
# GEOSPATIAL CALCULATIONS FOR BLOCKS
# ============================================================================
# STATUS: Core - Pure calculation functions
# PURPOSE: Geodesic block area and farm-level area rollup
# ============================================================================
"""
Geospatial Calculations for Blocks.

All functions are pure and operate on GeoJSON dicts.

Exports:
    geodesic_area: Area in square meters of a GeoJSON geometry on the WGS84 ellipsoid
    total_block_area: Sum of stored block areas over a feature list
"""

from typing import Any, Dict, Iterable, Optional

from pyproj import Geod
from shapely.geometry import shape

_GEOD = Geod(ellps="WGS84")


def geodesic_area(geometry: Optional[Dict[str, Any]]) -> float:
    """
    Geodesic area of a GeoJSON geometry in square meters.

    Args:
        geometry: GeoJSON geometry dict (lon/lat, EPSG:4326)

    Returns:
        Unsigned area; 0.0 for missing or non-areal geometry
    """
    if not geometry:
        return 0.0
    area, _perimeter = _GEOD.geometry_area_perimeter(shape(geometry))
    # Sign depends on ring orientation
    return abs(area)


def total_block_area(features: Iterable[Dict[str, Any]]) -> float:
    """
    Sum the stored `area` property of block features.

    Args:
        features: GeoJSON features from the farm blocks collection

    Returns:
        Total area in square meters (missing areas count as 0)
    """
    total = 0.0
    for feature in features:
        properties = feature.get("properties") or {}
        total += float(properties.get("area") or 0)
    return total
