"""
Ingestion Pipeline - upload detection, normalization and analytics.

Converters are registered via decorators when this package is imported and
retrieved by format tag.

Supported Formats:
- CSV (lat/lon columns, or Lambert-93 X-Lamb/Y-Lamb)
- GeoJSON (Feature or FeatureCollection)
- KML / KMZ
- Shapefile (.shp bundle in .zip)
- TIFF (transcoded to JPEG, not normalized)

Usage:
    from ingestion import detect_format, normalize

    tag = detect_format(payload, filename)
    result = normalize(payload, tag)
"""

# Import registry first
from .converter_registry import ConverterRegistry
from .converter_base import VectorConverter

from .converter_helpers import xy_frame_to_gdf, extract_zip_file

# Import all converters - this triggers registration via decorators
from .csv_converter import CSVConverter
from .geojson_converter import GeoJSONConverter
from .kml_converter import KMLConverter
from .kmz_converter import KMZConverter
from .shapefile_converter import ShapefileConverter

from .detection import detect_format, EXTENSION_FORMATS
from .pipeline import IngestResult, normalize, to_result
from .raster_transcoder import transcode_raster
from .analytics import FieldStatistics, field_statistics, classification_breaks


__all__ = [
    'ConverterRegistry',
    'VectorConverter',
    'xy_frame_to_gdf',
    'extract_zip_file',
    'CSVConverter',
    'GeoJSONConverter',
    'KMLConverter',
    'KMZConverter',
    'ShapefileConverter',
    'detect_format',
    'EXTENSION_FORMATS',
    'IngestResult',
    'normalize',
    'to_result',
    'transcode_raster',
    'FieldStatistics',
    'field_statistics',
    'classification_breaks',
]
