# ============================================================================
# BLOCK MODELS
# ============================================================================
# STATUS: Core - geometry-bearing farm subdivision
# PURPOSE: Block feature properties, custom fields and block revisions
# EXPORTS: BlockField, Block, BlockRevision
# DEPENDENCIES: pydantic
# ============================================================================
"""
Block Models.

All blocks of a farm live as GeoJSON features in one FeatureCollection
document (farms/{farmId}/blocks.json):

    {"type": "Feature", "id": <blockId>,
     "properties": {<Block fields>}, "geometry": {Polygon | MultiPolygon}}

Block holds the properties plus the geometry; to_feature / from_feature
convert between the model and the stored feature.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from .base import DocumentModel, utc_now


BLOCK_GEOMETRY_TYPES = ("Polygon", "MultiPolygon")


class BlockField(DocumentModel):
    """User-defined field shown on the block details panel."""
    key: str
    label: str
    value: Union[bool, int, float, str, None] = None
    data_type: str = Field(default='string', description="string | number | boolean | date")


class Block(DocumentModel):
    """
    Block feature properties plus geometry.

    Invariants:
        - id and farm_id never change after creation
        - area (square meters, geodesic) is recomputed whenever geometry changes
    """
    id: str
    farm_id: str
    name: str
    variety: Optional[str] = None
    planting_year: Optional[int] = None
    row_spacing: Optional[float] = None
    vine_spacing: Optional[float] = None
    area: float = 0.0
    custom_fields: Optional[List[BlockField]] = None
    revision_message: Optional[str] = None
    updated_by: Optional[str] = None
    updated_by_name: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    geometry: Optional[Dict[str, Any]] = Field(default=None, exclude=True)

    def to_feature(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "id": self.id,
            "properties": self.to_document(),
            "geometry": self.geometry,
        }

    @classmethod
    def from_feature(cls, feature: Dict[str, Any]) -> 'Block':
        properties = dict(feature.get("properties") or {})
        properties.pop("geometry", None)
        if feature.get("id") is not None:
            properties["id"] = feature["id"]
        return cls.model_validate({**properties, "geometry": feature.get("geometry")})


class BlockRevision(DocumentModel):
    """
    Snapshot of a block taken before a mutation.

    Stored newest-first in farms/{farmId}/blocks/{blockId}/revisions.json.
    """
    id: str
    farm_id: str
    block_id: str
    created_at: datetime = Field(default_factory=utc_now)
    geometry: Optional[Dict[str, Any]] = None
    properties: Dict[str, Any] = Field(default_factory=dict)
    revision_message: Optional[str] = None
    updated_by: Optional[str] = None
    updated_by_name: Optional[str] = None
