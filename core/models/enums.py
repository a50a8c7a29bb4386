"""
Pure Enumeration Types for the Farm Document Core.

No business logic - pure type definitions only.

Exports:
    FarmRole: Normalized principal role on a farm
    DatasetStatus: Dataset processing state enumeration
    DatasetType: Dataset type tag
    FormatTag: Detected upload format
"""

from enum import Enum


class FarmRole(str, Enum):
    """
    Normalized role of a principal on a farm.

    Stored farms carry roles in several legacy shapes (collaborator entries,
    member list, permission map with capitalized role strings). Every shape
    is resolved into one of these values by core.logic.access.normalize_role.
    """
    OWNER = "owner"
    ADMINISTRATOR = "administrator"
    EDITOR = "editor"
    VIEWER = "viewer"
    MEMBER = "member"  # Legacy member list entry (read-only)

    @property
    def can_write(self) -> bool:
        return self in (FarmRole.OWNER, FarmRole.ADMINISTRATOR, FarmRole.EDITOR)


class DatasetStatus(str, Enum):
    """
    Processing state of a dataset upload attempt.

    State transitions:
    - UPLOADING -> PROCESSING -> COMPLETED (payload normalized)
    - UPLOADING -> PROCESSING -> FAILED (ingestion error, dataset kept)
    - COMPLETED | FAILED -> PROCESSING (re-upload starts a new attempt)
    """
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class DatasetType(str, Enum):
    """Dataset type tag stored on the dataset document."""
    GEOJSON = "geojson"
    CSV = "csv"
    SHAPEFILE = "shapefile"
    KML = "kml"
    KMZ = "kmz"
    TIFF = "tiff"
    RASTER = "raster"  # Transcoded TIFF, served as processed.jpg
    IMAGE = "image"


class FormatTag(str, Enum):
    """Upload format detected by ingestion.detection.detect_format."""
    CSV = "csv"
    GEOJSON = "geojson"
    KML = "kml"
    KMZ = "kmz"
    SHAPEFILE = "shapefile"
    TIFF = "tiff"
    UNKNOWN = "unknown"
