"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - StorageDefaults: Document store backend and container naming
    - IngestDefaults: Upload ceiling, raster transcoding, projected CSV pair
    - RevisionDefaults: Revision log caps per entity type
    - AppDefaults: Environment, debug mode, log level

Usage:
    from config.defaults import IngestDefaults

    # In Pydantic Field definitions:
    max_upload_mb: int = Field(default=IngestDefaults.MAX_UPLOAD_MB, ...)
"""


# =============================================================================
# STORAGE DEFAULTS
# =============================================================================

class StorageDefaults:
    """
    Document store defaults.

    The memory backend needs no credentials and is what tests and local
    runs use. The azure backend requires STORAGE_ACCOUNT_NAME or
    STORAGE_CONNECTION_STRING.
    """

    BACKEND = "memory"
    CONTAINER = "farm-data"
    ACCOUNT_URL_TEMPLATE = "https://{account_name}.blob.core.windows.net"

    JSON_CONTENT_TYPE = "application/json"
    GEOJSON_CONTENT_TYPE = "application/geo+json"
    JPEG_CONTENT_TYPE = "image/jpeg"
    OCTET_CONTENT_TYPE = "application/octet-stream"


# =============================================================================
# INGESTION DEFAULTS
# =============================================================================

class IngestDefaults:
    """Upload and normalization defaults."""

    MAX_UPLOAD_MB = 50

    # Raster transcoding (TIFF -> displayable JPEG)
    RASTER_MAX_WIDTH = 1000
    RASTER_JPEG_QUALITY = 80

    # Content sniffing window for extension-less uploads
    SNIFF_BYTES = 1000

    # Regional projected pair recognised in CSV headers (French Lambert-93)
    PROJECTED_X_COLUMN = "X-Lamb"
    PROJECTED_Y_COLUMN = "Y-Lamb"
    PROJECTED_CRS = "EPSG:2154"
    TARGET_CRS = "EPSG:4326"

    CSV_ENCODING = "utf-8"


# =============================================================================
# REVISION DEFAULTS
# =============================================================================

class RevisionDefaults:
    """Revision log caps (newest entries kept, oldest evicted)."""

    BLOCK_REVISION_CAP = 100
    DATASET_REVISION_CAP = 50


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Core application defaults."""

    ENVIRONMENT = "dev"
    DEBUG_MODE = False
    LOG_LEVEL = "INFO"
