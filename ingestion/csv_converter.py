# ============================================================================
# CSV CONVERTER
# ============================================================================
# STATUS: Ingestion - tabular point uploads
# PURPOSE: CSV with coordinate columns to point GeoDataFrame
# EXPORTS: CSVConverter, find_coordinate_columns
# DEPENDENCIES: pandas, geopandas
# ============================================================================
"""
CSV to GeoDataFrame Converter.

Coordinate columns are found by header name (case-insensitive):

    latitude | lat | y      and      longitude | lon | x

When neither is present, the regional projected pair X-Lamb / Y-Lamb
(Lambert-93, EPSG:2154) is accepted and reprojected to EPSG:4326.
"""

from io import BytesIO
from typing import List, Optional, Tuple

from geopandas import GeoDataFrame
from pandas import read_csv
from pandas.errors import EmptyDataError, ParserError

from exceptions import ValidationError
from util_logger import LoggerFactory, ComponentType
from core.models import FormatTag
from config.defaults import IngestDefaults
from .converter_registry import ConverterRegistry
from .converter_helpers import xy_frame_to_gdf

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "CSVConverter")

LATITUDE_HEADERS = ('latitude', 'lat', 'y')
LONGITUDE_HEADERS = ('longitude', 'lon', 'x')


def _find_header(headers: List[str], candidates: Tuple[str, ...]) -> Optional[str]:
    for header in headers:
        if str(header).strip().lower() in candidates:
            return header
    return None


def find_coordinate_columns(
    headers: List[str],
    projected_x_column: str = IngestDefaults.PROJECTED_X_COLUMN,
    projected_y_column: str = IngestDefaults.PROJECTED_Y_COLUMN
) -> Tuple[str, str, bool]:
    """
    Pick the (x, y) coordinate columns of a CSV header.

    Returns:
        (x_column, y_column, is_projected)

    Raises:
        ValidationError: no usable coordinate pair
    """
    lat = _find_header(headers, LATITUDE_HEADERS)
    lon = _find_header(headers, LONGITUDE_HEADERS)

    if lat is None and lon is None and projected_x_column in headers and projected_y_column in headers:
        return projected_x_column, projected_y_column, True

    if lat is None or lon is None:
        raise ValidationError(
            "CSV must contain latitude/longitude columns "
            f"(lat/lon, latitude/longitude, x/y, or {projected_x_column}/{projected_y_column})",
            details={'headers': [str(h) for h in headers]}
        )
    return lon, lat, False


@ConverterRegistry.instance().register(FormatTag.CSV)
class CSVConverter:
    """
    Converts CSV files to a point GeoDataFrame.

    All non-coordinate columns become feature properties, with pandas type
    inference (numbers stay numbers).
    """

    @property
    def supported_formats(self) -> List[str]:
        return [FormatTag.CSV.value]

    def convert(
        self,
        data: BytesIO,
        projected_x_column: str = IngestDefaults.PROJECTED_X_COLUMN,
        projected_y_column: str = IngestDefaults.PROJECTED_Y_COLUMN,
        projected_crs: str = IngestDefaults.PROJECTED_CRS,
        encoding: str = IngestDefaults.CSV_ENCODING,
        **kwargs
    ) -> GeoDataFrame:
        try:
            df = read_csv(data, encoding=encoding, skip_blank_lines=True)
        except (EmptyDataError, ParserError, UnicodeDecodeError) as e:
            raise ValidationError(f"CSV parsing error: {e}") from e

        headers = list(df.columns)
        x_column, y_column, is_projected = find_coordinate_columns(
            headers, projected_x_column, projected_y_column
        )
        if is_projected:
            logger.info(f"Projected coordinates detected ({projected_crs}), reprojecting to {IngestDefaults.TARGET_CRS}")

        gdf = xy_frame_to_gdf(
            df,
            x_column,
            y_column,
            source_crs=projected_crs if is_projected else IngestDefaults.TARGET_CRS
        )
        logger.info(f"CSV converted to GeoDataFrame: {len(gdf)} of {len(df)} rows")
        return gdf
