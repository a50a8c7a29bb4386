# ============================================================================
# CONVERTER HELPERS
# ============================================================================
# STATUS: Ingestion - shared converter utilities
# PURPOSE: Coordinate-column to point conversion and archive extraction
# EXPORTS: xy_frame_to_gdf, extract_zip_file
# DEPENDENCIES: geopandas, pandas, zipfile
# ============================================================================
"""
Converter Helper Functions.

Pure utility functions used by the converter classes.
"""

import os
import tempfile
import zipfile
from io import BytesIO
from typing import Tuple

from geopandas import GeoDataFrame, points_from_xy
from pandas import DataFrame, to_numeric

from exceptions import ValidationError
from util_logger import LoggerFactory, ComponentType
from config.defaults import IngestDefaults

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "ConverterHelpers")


def xy_frame_to_gdf(
    df: DataFrame,
    x_column: str,
    y_column: str,
    source_crs: str = IngestDefaults.TARGET_CRS
) -> GeoDataFrame:
    """
    Build a point GeoDataFrame in EPSG:4326 from two coordinate columns.

    Rows whose coordinates are missing, non-numeric or outside the WGS84
    range after reprojection are dropped. The coordinate columns are not
    carried over as attributes.

    Args:
        df: Parsed table
        x_column: Longitude / easting column
        y_column: Latitude / northing column
        source_crs: CRS of the coordinate columns

    Raises:
        ValidationError: no row has usable coordinates
    """
    xs = to_numeric(df[x_column], errors='coerce')
    ys = to_numeric(df[y_column], errors='coerce')
    usable = xs.notna() & ys.notna()

    attributes = df.loc[usable].drop(columns=[x_column, y_column])
    gdf = GeoDataFrame(
        attributes,
        geometry=points_from_xy(xs[usable], ys[usable]),
        crs=source_crs
    )
    if source_crs != IngestDefaults.TARGET_CRS and len(gdf) > 0:
        gdf = gdf.to_crs(IngestDefaults.TARGET_CRS)

    in_range = (
        gdf.geometry.x.between(-180, 180) &
        gdf.geometry.y.between(-90, 90)
    )
    gdf = gdf.loc[in_range].reset_index(drop=True)

    dropped = len(df) - len(gdf)
    if dropped:
        logger.warning(f"Dropped {dropped} of {len(df)} rows with missing or invalid coordinates")

    if len(gdf) == 0:
        raise ValidationError(
            "No valid coordinates found in CSV",
            details={'rows': len(df), 'x_column': x_column, 'y_column': y_column}
        )
    return gdf


def extract_zip_file(
    zip_data: BytesIO,
    target_extension: str
) -> Tuple[tempfile.TemporaryDirectory, str]:
    """
    Extract an archive into a temporary directory and locate a member.

    The first member (archive order) with the target extension is returned.
    Caller must keep the TemporaryDirectory alive while using the path and
    clean it up afterwards.

    Raises:
        ValidationError: not a zip archive, or no member with the extension
    """
    target_ext = target_extension.lower().lstrip('.')
    temp_dir = tempfile.TemporaryDirectory()

    try:
        with zipfile.ZipFile(zip_data) as z:
            z.extractall(temp_dir.name)
            file_names = [n for n in z.namelist() if not n.endswith('/')]
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
        temp_dir.cleanup()
        raise ValidationError(f"Invalid zip archive: {e}") from e

    matching = [n for n in file_names if n.lower().endswith(f'.{target_ext}')]
    if not matching:
        temp_dir.cleanup()
        raise ValidationError(
            f"No .{target_ext} file found in archive",
            details={'files': file_names}
        )

    logger.debug(f"Extracted {len(file_names)} files, using {matching[0]}")
    return temp_dir, os.path.join(temp_dir.name, matching[0])
