# ============================================================================
# KMZ CONVERTER
# ============================================================================
# STATUS: Ingestion - zipped KML uploads
# PURPOSE: First KML document of a KMZ archive to GeoDataFrame
# EXPORTS: KMZConverter
# DEPENDENCIES: geopandas
# ============================================================================
"""
KMZ to GeoDataFrame Converter.

KMZ is a zipped archive with one or more KML documents; the first .kml
member in archive order is converted.
"""

from io import BytesIO
from typing import List

from geopandas import GeoDataFrame

from util_logger import LoggerFactory, ComponentType
from core.models import FormatTag
from .converter_registry import ConverterRegistry
from .converter_helpers import extract_zip_file
from .kml_converter import KMLConverter

logger = LoggerFactory.create_logger(ComponentType.CONVERTER, "KMZConverter")


@ConverterRegistry.instance().register(FormatTag.KMZ)
class KMZConverter:

    @property
    def supported_formats(self) -> List[str]:
        return [FormatTag.KMZ.value]

    def convert(self, data: BytesIO, **kwargs) -> GeoDataFrame:
        temp_dir, kml_path = extract_zip_file(data, target_extension='kml')
        try:
            with open(kml_path, 'rb') as f:
                kml = BytesIO(f.read())
        finally:
            temp_dir.cleanup()

        logger.debug(f"Converting KML extracted from KMZ ({len(kml.getvalue())} bytes)")
        return KMLConverter().convert(kml, **kwargs)
