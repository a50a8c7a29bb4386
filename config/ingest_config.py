"""
Ingestion Pipeline Configuration.

Upload ceiling, raster transcoding parameters and the regional projected
coordinate pair recognised in CSV uploads.

Exports:
    IngestConfig: Ingestion configuration model
"""

import os
from pydantic import BaseModel, Field

from .defaults import IngestDefaults


class IngestConfig(BaseModel):
    """
    Ingestion pipeline configuration.

    Controls dataset upload limits and how TIFF rasters and projected
    CSV coordinates are handled.
    """

    max_upload_mb: int = Field(
        default=IngestDefaults.MAX_UPLOAD_MB,
        ge=1,
        description="Maximum accepted upload size in MiB"
    )

    raster_max_width: int = Field(
        default=IngestDefaults.RASTER_MAX_WIDTH,
        ge=16,
        description="Transcoded rasters are shrunk to at most this width (never enlarged)"
    )

    raster_jpeg_quality: int = Field(
        default=IngestDefaults.RASTER_JPEG_QUALITY,
        ge=1,
        le=100,
        description="JPEG quality for transcoded rasters"
    )

    projected_x_column: str = Field(
        default=IngestDefaults.PROJECTED_X_COLUMN,
        description="CSV header holding projected easting"
    )

    projected_y_column: str = Field(
        default=IngestDefaults.PROJECTED_Y_COLUMN,
        description="CSV header holding projected northing"
    )

    projected_crs: str = Field(
        default=IngestDefaults.PROJECTED_CRS,
        description="CRS of the projected CSV pair"
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            max_upload_mb=int(os.environ.get("INGEST_MAX_UPLOAD_MB", str(IngestDefaults.MAX_UPLOAD_MB))),
            raster_max_width=int(os.environ.get("RASTER_MAX_WIDTH", str(IngestDefaults.RASTER_MAX_WIDTH))),
            raster_jpeg_quality=int(os.environ.get("RASTER_JPEG_QUALITY", str(IngestDefaults.RASTER_JPEG_QUALITY))),
            projected_x_column=os.environ.get("INGEST_PROJECTED_X_COLUMN", IngestDefaults.PROJECTED_X_COLUMN),
            projected_y_column=os.environ.get("INGEST_PROJECTED_Y_COLUMN", IngestDefaults.PROJECTED_Y_COLUMN),
            projected_crs=os.environ.get("INGEST_PROJECTED_CRS", IngestDefaults.PROJECTED_CRS),
        )
