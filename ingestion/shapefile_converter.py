# ============================================================================
# SHAPEFILE CONVERTER
# ============================================================================
# STATUS: Ingestion - zipped shapefile uploads
# PURPOSE: .shp bundle inside a zip archive to GeoDataFrame
# EXPORTS: ShapefileConverter
# DEPENDENCIES: geopandas, pyogrio
# ============================================================================
"""
Shapefile to GeoDataFrame Converter.

Shapefiles are multi-file formats (.shp, .shx, .dbf, .prj) distributed as
zip archives. The archive is extracted to a temporary directory and the
first .shp read with geopandas; companion files are picked up by the
driver. Data with a .prj in another CRS is reprojected to EPSG:4326.
"""

from io import BytesIO
from typing import List

from geopandas import GeoDataFrame
from geopandas import read_file as gpd_read_file
from pyogrio.errors import DataLayerError, DataSourceError

from exceptions import ValidationError
from util_logger import LoggerFactory, ComponentType
from core.models import FormatTag
from config.defaults import IngestDefaults
from .converter_registry import ConverterRegistry
from .converter_helpers import extract_zip_file

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "ShapefileConverter")


@ConverterRegistry.instance().register(FormatTag.SHAPEFILE)
class ShapefileConverter:
    """
    Converts a zipped shapefile to GeoDataFrame.

    Raises ValidationError for an invalid archive, an archive without a
    .shp member, or a shapefile without features.
    """

    @property
    def supported_formats(self) -> List[str]:
        return [FormatTag.SHAPEFILE.value]

    def convert(self, data: BytesIO, **kwargs) -> GeoDataFrame:
        temp_dir, shp_path = extract_zip_file(data, target_extension='shp')
        try:
            gdf = gpd_read_file(shp_path, engine='pyogrio')
        except (DataSourceError, DataLayerError, ValueError) as e:
            raise ValidationError(f"Shapefile processing error: {e}") from e
        finally:
            temp_dir.cleanup()

        if len(gdf) == 0:
            raise ValidationError("No valid features in Shapefile")

        if gdf.crs is None:
            gdf = gdf.set_crs(IngestDefaults.TARGET_CRS)
        elif gdf.crs.to_epsg() != 4326:
            logger.info(f"Reprojecting shapefile from {gdf.crs.to_string()} to {IngestDefaults.TARGET_CRS}")
            gdf = gdf.to_crs(IngestDefaults.TARGET_CRS)

        logger.info(
            f"Shapefile converted to GeoDataFrame: {len(gdf)} rows, "
            f"geometry type: {gdf.geometry.type.unique().tolist()}"
        )
        return gdf
