# ============================================================================
# GEOJSON CONVERTER
# ============================================================================
# STATUS: Ingestion - GeoJSON uploads
# PURPOSE: Feature or FeatureCollection to GeoDataFrame
# EXPORTS: GeoJSONConverter
# DEPENDENCIES: geopandas, shapely
# ============================================================================
"""
GeoJSON to GeoDataFrame Converter.

A lone Feature is wrapped into a one-feature collection. Any other
top-level type is rejected.
"""

import json
from io import BytesIO
from typing import List

from geopandas import GeoDataFrame
from shapely.errors import ShapelyError

from exceptions import ValidationError
from util_logger import LoggerFactory, ComponentType
from core.models import FormatTag
from config.defaults import IngestDefaults
from .converter_registry import ConverterRegistry

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "GeoJSONConverter")


@ConverterRegistry.instance().register(FormatTag.GEOJSON)
class GeoJSONConverter:
    """Converts GeoJSON documents to GeoDataFrame (coordinates taken as WGS84)."""

    @property
    def supported_formats(self) -> List[str]:
        return [FormatTag.GEOJSON.value]

    def convert(self, data: BytesIO, **kwargs) -> GeoDataFrame:
        try:
            document = json.loads(data.read().decode('utf-8-sig'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValidationError(f"GeoJSON processing error: {e}") from e

        if not isinstance(document, dict) or not document.get('type'):
            raise ValidationError("Invalid GeoJSON: missing type property")

        if document['type'] == 'Feature':
            features = [document]
        elif document['type'] == 'FeatureCollection':
            features = document.get('features')
            if not isinstance(features, list):
                raise ValidationError("Invalid GeoJSON: FeatureCollection without features array")
        else:
            raise ValidationError(
                "GeoJSON must be a Feature or FeatureCollection",
                details={'type': document['type']}
            )

        if not features:
            raise ValidationError("No features in GeoJSON")
        if not all(isinstance(f, dict) for f in features):
            raise ValidationError("Invalid GeoJSON: features must be objects")
        features = [
            {'type': 'Feature', 'geometry': f.get('geometry'), 'properties': f.get('properties') or {}}
            for f in features
        ]

        try:
            gdf = GeoDataFrame.from_features(features, crs=IngestDefaults.TARGET_CRS)
        except (ShapelyError, ValueError, TypeError, KeyError, AttributeError) as e:
            raise ValidationError(f"GeoJSON processing error: {e}") from e

        logger.info(f"GeoJSON converted to GeoDataFrame: {len(gdf)} features")
        return gdf
