# ============================================================================
# FARM MODELS
# ============================================================================
# STATUS: Core - tenant entity owning blocks and datasets
# PURPOSE: Farm document, collaborator entries and the request principal
# EXPORTS: FarmLocation, Collaborator, FarmMember, Farm, Principal
# DEPENDENCIES: pydantic
# ============================================================================
"""
Farm Models.

A farm carries permissions in three parallel shapes that all remain in
use by stored data:

    collaborators  [{userId, email, role, addedAt}]   current shape
    users          [{id}]                             legacy member list
    permissions    {userId: "Editor" | "Viewer" ...}  legacy permission map

Access decisions OR across all three (see core.logic.access).

blockCount, datasetCount and totalArea are rollups recomputed by
services.aggregate_service; they are never authoritative on their own.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .base import DocumentModel, utc_now


class FarmLocation(DocumentModel):
    latitude: float
    longitude: float
    address: Optional[str] = None


class Collaborator(DocumentModel):
    """Collaborator entry. Role strings are normalized at access time."""
    user_id: str
    email: Optional[str] = None
    role: str = "viewer"
    added_at: Optional[datetime] = None


class FarmMember(DocumentModel):
    """Legacy member list entry. Grants read-only access."""
    id: str


class Farm(DocumentModel):
    """
    Farm metadata document stored at farms/{farmId}/metadata.json.

    Invariants:
        - id and owner never change after creation
        - block_count, dataset_count, total_area are derived rollups
    """
    id: str
    name: str
    location: Optional[FarmLocation] = None
    owner: str
    collaborators: List[Collaborator] = Field(default_factory=list)
    users: Optional[List[FarmMember]] = None
    permissions: Optional[Dict[str, str]] = None
    block_count: int = 0
    dataset_count: int = 0
    total_area: float = Field(default=0.0, description="Sum of block areas in square meters")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Principal(BaseModel):
    """
    Resolved identity handed in by the request boundary.

    Token verification happens upstream; the core trusts these values.
    """
    id: str
    email: Optional[str] = None
