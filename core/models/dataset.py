# ============================================================================
# DATASET MODELS
# ============================================================================
# STATUS: Core - uploaded and ingested data artifacts
# PURPOSE: Dataset metadata, dataset revisions and dataset folders
# EXPORTS: VizSettings, Dataset, DatasetRevision, DatasetFolder, ROOT_FOLDER_ID
# DEPENDENCIES: pydantic
# ============================================================================
"""
Dataset Models.

Dataset metadata lives at farms/{farmId}/datasets/{datasetId}/metadata.json
next to its raw upload and processed payload. status=completed implies
geojson_path or raster_path points at an existing processed payload.

Folders are a flat grouping tag kept in farms/{farmId}/dataset-folders.json;
parent_id is the "root" sentinel or another folder id, never a real tree.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import DocumentModel, utc_now
from .enums import DatasetStatus, DatasetType


ROOT_FOLDER_ID = "root"


class VizSettings(DocumentModel):
    """Map visualization settings chosen in the UI."""
    enabled: bool = False
    type: str = "none"  # heatmap | zones | points | none
    field: Optional[str] = None
    color_scale: Optional[str] = None
    opacity: Optional[float] = None
    num_classes: Optional[int] = None
    class_breaks: Optional[List[float]] = None
    colors: Optional[List[str]] = None


class Dataset(DocumentModel):
    """
    Dataset metadata document.

    Invariants:
        - id and farm_id never change after creation
        - status follows core.logic.transitions
    """
    id: str
    farm_id: str
    name: str
    type: DatasetType
    description: Optional[str] = None
    status: DatasetStatus = DatasetStatus.UPLOADING
    uploaded_by: str
    collected_at: datetime = Field(default_factory=utc_now)
    collector_id: Optional[str] = None
    folder_id: Optional[str] = None
    viz_settings: Optional[VizSettings] = None
    file_size: int = 0
    original_filename: Optional[str] = None

    # Ingestion results
    record_count: Optional[int] = None
    bounds: Optional[List[float]] = Field(default=None, description="[minLon, minLat, maxLon, maxLat]")
    fields: Optional[List[str]] = None
    column_mapping: Optional[Dict[str, str]] = None
    original_headers: Optional[List[str]] = None
    raw_path: Optional[str] = None
    geojson_path: Optional[str] = None
    raster_path: Optional[str] = None
    error: Optional[str] = None
    processed_at: Optional[datetime] = None

    # Audit
    updated_by: Optional[str] = None
    updated_by_name: Optional[str] = None
    revision_message: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class DatasetRevision(DocumentModel):
    """
    Snapshot of a dataset taken before a mutation.

    Stored newest-first in farms/{farmId}/datasets/{datasetId}/revisions.json.
    """
    id: str
    dataset_id: str
    farm_id: str
    created_at: datetime = Field(default_factory=utc_now)
    snapshot: Dict[str, Any] = Field(default_factory=dict)
    revision_message: Optional[str] = None
    updated_by: Optional[str] = None
    updated_by_name: Optional[str] = None


class DatasetFolder(DocumentModel):
    id: str
    farm_id: str
    name: str
    description: Optional[str] = None
    parent_id: str = ROOT_FOLDER_ID
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
