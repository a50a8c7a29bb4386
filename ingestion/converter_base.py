# ============================================================================
# CONVERTER PROTOCOL
# ============================================================================
# STATUS: Ingestion - converter interface
# PURPOSE: Structural type every format converter satisfies
# EXPORTS: VectorConverter
# DEPENDENCIES: geopandas
# ============================================================================
"""
Base Protocol for Vector Converters.

It's a Protocol (not a base class): converters don't inherit from it, it
only documents and type-checks the interface the registry hands out.
"""

from io import BytesIO
from typing import List, Protocol, runtime_checkable

from geopandas import GeoDataFrame


@runtime_checkable
class VectorConverter(Protocol):
    """
    Interface of a format converter.

    Example:
        @ConverterRegistry.instance().register(FormatTag.CSV)
        class CSVConverter:  # No inheritance!

            @property
            def supported_formats(self) -> List[str]:
                return ['csv']

            def convert(self, data: BytesIO, **kwargs) -> GeoDataFrame:
                ...
    """

    @property
    def supported_formats(self) -> List[str]:
        """Format tags handled by this converter."""
        ...

    def convert(self, data: BytesIO, **kwargs) -> GeoDataFrame:
        """
        Convert upload bytes to a GeoDataFrame in EPSG:4326.

        Raises:
            ValidationError: payload cannot be read or holds no features
        """
        ...
