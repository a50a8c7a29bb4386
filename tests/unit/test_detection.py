"""
Upload format detection tests.
"""

import pytest

from core.models import FormatTag
from ingestion.detection import detect_format


@pytest.mark.parametrize("filename,expected", [
    ("points.csv", FormatTag.CSV),
    ("POINTS.TXT", FormatTag.CSV),
    ("parcels.geojson", FormatTag.GEOJSON),
    ("parcels.json", FormatTag.GEOJSON),
    ("rows.kml", FormatTag.KML),
    ("rows.kmz", FormatTag.KMZ),
    ("cadastre.zip", FormatTag.SHAPEFILE),
    ("ndvi.tif", FormatTag.TIFF),
    ("ndvi.TIFF", FormatTag.TIFF),
])
def test_extension_wins(filename, expected):
    assert detect_format(b'{"type": "FeatureCollection"}', filename) == expected


@pytest.mark.parametrize("payload", [
    b'{"type": "Feature"}',
    b'\n\n  [1, 2]',
])
def test_sniffs_json_without_extension(payload):
    assert detect_format(payload, "upload") == FormatTag.GEOJSON


@pytest.mark.parametrize("payload,filename", [
    (b"lat,lon\n1,2\n", "upload"),
    (b"", None),
    (b"\x89PNG\r\n", "image.png"),
])
def test_unknown(payload, filename):
    assert detect_format(payload, filename) == FormatTag.UNKNOWN


def test_sniff_window_is_bounded():
    payload = b" " * 2000 + b"{}"
    assert detect_format(payload, None) == FormatTag.UNKNOWN
