# ============================================================================
# KML CONVERTER
# ============================================================================
# STATUS: Ingestion - KML uploads
# PURPOSE: KML Placemarks to GeoDataFrame
# EXPORTS: KMLConverter
# DEPENDENCIES: geopandas, pyogrio, pandas
# ============================================================================
"""
KML to GeoDataFrame Converter.

KML is read through GDAL (geopandas + pyogrio). The driver exposes each
Folder as a separate layer, so every layer is read and concatenated.
Every Placemark becomes one feature with `name` and `description`
properties plus the ExtendedData fields the driver reports. Altitudes
are discarded.
"""

from io import BytesIO
from typing import List

import pandas as pd
import pyogrio
from geopandas import GeoDataFrame
from geopandas import read_file as gpd_read_file
from pyogrio.errors import DataLayerError, DataSourceError

from exceptions import ValidationError
from util_logger import LoggerFactory, ComponentType
from core.models import FormatTag
from config.defaults import IngestDefaults
from .converter_registry import ConverterRegistry

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "KMLConverter")

# Per-placemark attributes added by the LIBKML driver, not user data
KML_DRIVER_COLUMNS = (
    "timestamp", "begin", "end", "altitudeMode", "tessellate",
    "extrude", "visibility", "drawOrder", "icon", "snippet",
)


def _normalize_columns(gdf: GeoDataFrame) -> GeoDataFrame:
    gdf = gdf.rename(columns={"Name": "name", "Description": "description"})
    return gdf.drop(columns=[c for c in KML_DRIVER_COLUMNS if c in gdf.columns])


@ConverterRegistry.instance().register(FormatTag.KML)
class KMLConverter:
    """
    Converts KML documents to GeoDataFrame.

    Raises ValidationError for documents GDAL cannot open and for
    documents without placemarks.
    """

    @property
    def supported_formats(self) -> List[str]:
        return [FormatTag.KML.value]

    def convert(self, data: BytesIO, **kwargs) -> GeoDataFrame:
        payload = data.read()
        try:
            layers = [name for name, _geom_type in pyogrio.list_layers(payload)]
            frames = [gpd_read_file(payload, layer=layer, engine='pyogrio', **kwargs) for layer in layers]
        except (DataSourceError, DataLayerError, ValueError) as e:
            raise ValidationError(f"KML processing error: {e}") from e

        frames = [f for f in frames if len(f) > 0]
        if not frames:
            raise ValidationError("No valid features in KML file")

        gdf = GeoDataFrame(pd.concat(frames, ignore_index=True), geometry="geometry")
        if gdf.crs is None:
            gdf = gdf.set_crs(IngestDefaults.TARGET_CRS)
        gdf = gdf.set_geometry(gdf.geometry.force_2d())
        gdf = _normalize_columns(gdf)

        logger.info(
            f"KML converted to GeoDataFrame: {len(gdf)} rows from {len(layers)} layer(s), "
            f"geometry type: {gdf.geometry.type.unique().tolist()}"
        )
        return gdf
