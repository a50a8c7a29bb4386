# ============================================================================
# INGESTION PIPELINE
# ============================================================================
# STATUS: Ingestion - normalization entry point
# PURPOSE: Convert a detected upload into the canonical FeatureCollection
# EXPORTS: IngestResult, normalize
# DEPENDENCIES: geopandas, pandas, numpy
# ============================================================================
"""
Ingestion Pipeline.

normalize() dispatches to the registered converter for the format tag and
turns the resulting GeoDataFrame into the canonical shape stored as
processed.geojson:

    feature_collection  {"type": "FeatureCollection", "features": [...]} in EPSG:4326
    record_count        number of features
    bounds              [minLon, minLat, maxLon, maxLat] over all geometries
    fields              property keys of the first feature

TIFF uploads are rasters and go through raster_transcoder instead.
"""

import json
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Dict, List, Optional, Union

import numpy as np
from geopandas import GeoDataFrame
from pandas import notna
from pandas.api.types import is_datetime64_any_dtype

from exceptions import ContractViolationError, ValidationError
from util_logger import LoggerFactory, ComponentType
from core.models import FormatTag
from config.defaults import IngestDefaults
from .converter_registry import ConverterRegistry

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "IngestPipeline")


@dataclass
class IngestResult:
    feature_collection: Dict[str, Any]
    record_count: int
    bounds: Optional[List[float]]
    fields: List[str] = field(default_factory=list)


def _serializable(gdf: GeoDataFrame) -> GeoDataFrame:
    """Datetime columns as ISO strings (GeoJSON has no date type)."""
    datetime_columns = [
        c for c in gdf.columns
        if c != gdf.geometry.name and is_datetime64_any_dtype(gdf[c])
    ]
    if not datetime_columns:
        return gdf
    gdf = gdf.copy()
    for column in datetime_columns:
        gdf[column] = gdf[column].map(lambda v: v.isoformat() if notna(v) else None).astype(object)
    return gdf


def _bounds(gdf: GeoDataFrame) -> Optional[List[float]]:
    bounds = gdf.total_bounds
    if not np.all(np.isfinite(bounds)):
        return None
    return [float(b) for b in bounds]


def to_result(gdf: GeoDataFrame) -> IngestResult:
    """Canonical IngestResult of a converted GeoDataFrame."""
    if len(gdf) == 0:
        raise ValidationError("No features found in upload")

    if gdf.crs is not None and gdf.crs.to_epsg() != 4326:
        gdf = gdf.to_crs(IngestDefaults.TARGET_CRS)

    collection = json.loads(_serializable(gdf).to_json(na='null', drop_id=True))
    features = collection.get('features', [])
    fields = list((features[0].get('properties') or {}).keys()) if features else []

    return IngestResult(
        feature_collection={'type': 'FeatureCollection', 'features': features},
        record_count=len(features),
        bounds=_bounds(gdf),
        fields=fields,
    )


def normalize(data: bytes, tag: Union[FormatTag, str], **options: Any) -> IngestResult:
    """
    Normalize a vector upload.

    Args:
        data: Upload payload
        tag: Format from detection.detect_format
        **options: Converter options (e.g. projected_x_column for CSV)

    Raises:
        ValidationError: unsupported format or unreadable payload
    """
    try:
        tag = FormatTag(tag)
    except ValueError as e:
        raise ValidationError(f"Unsupported file type: {tag}") from e

    if tag == FormatTag.TIFF:
        raise ValidationError(
            "TIFF files are raster images and cannot be converted to GeoJSON; use transcode_raster"
        )

    converter = ConverterRegistry.instance().get_converter(tag)
    gdf = converter.convert(BytesIO(data), **options)
    if not isinstance(gdf, GeoDataFrame):
        raise ContractViolationError(
            f"{type(converter).__name__}.convert returned {type(gdf).__name__}, expected GeoDataFrame"
        )
    result = to_result(gdf)

    logger.info(
        f"Normalized {tag.value} upload: {result.record_count} features, fields={result.fields}"
    )
    return result
