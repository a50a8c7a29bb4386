# ============================================================================
# FORMAT DETECTION
# ============================================================================
# STATUS: Ingestion - upload classification
# PURPOSE: Pick the format tag of an upload from its filename and content
# EXPORTS: detect_format, EXTENSION_FORMATS
# DEPENDENCIES: core.models.enums
# ============================================================================
"""
Upload Format Detection.

The filename extension decides first. Without a known extension, the
first SNIFF_BYTES bytes are decoded and treated as GeoJSON when they start
with '{' or '['. Anything else is FormatTag.UNKNOWN.
"""

from typing import Dict, Optional

from core.models import FormatTag
from config.defaults import IngestDefaults

EXTENSION_FORMATS: Dict[str, FormatTag] = {
    'geojson': FormatTag.GEOJSON,
    'json': FormatTag.GEOJSON,
    'csv': FormatTag.CSV,
    'txt': FormatTag.CSV,
    'kml': FormatTag.KML,
    'kmz': FormatTag.KMZ,
    'zip': FormatTag.SHAPEFILE,
    'tif': FormatTag.TIFF,
    'tiff': FormatTag.TIFF,
}


def detect_format(data: bytes, filename: Optional[str]) -> FormatTag:
    """
    Classify an upload.

    >>> detect_format(b'lat,lon', 'points.CSV')
    <FormatTag.CSV: 'csv'>
    >>> detect_format(b'  {"type": "Feature"}', 'upload')
    <FormatTag.GEOJSON: 'geojson'>
    """
    if filename and '.' in filename:
        ext = filename.rsplit('.', 1)[-1].lower()
        if ext in EXTENSION_FORMATS:
            return EXTENSION_FORMATS[ext]

    head = (data or b'')[:IngestDefaults.SNIFF_BYTES].decode('utf-8', errors='ignore').strip()
    if head.startswith(('{', '[')):
        return FormatTag.GEOJSON
    return FormatTag.UNKNOWN
