# ============================================================================
# FARM REPOSITORY
# ============================================================================
# STATUS: Infrastructure - farm metadata persistence
# PURPOSE: Farm CRUD plus authorized loading for the entity repositories
# EXPORTS: FarmRepository
# DEPENDENCIES: pydantic, core.models.farm, core.logic.access, infrastructure.document_store
# ============================================================================
"""
Farm Repository.

Farm metadata lives at farms/{farmId}/metadata.json. Creating a farm also
initializes an empty blocks FeatureCollection so block operations never
have to special-case a missing collection.

The load_for_read / load_for_write helpers are what the block, dataset and
folder repositories call before touching anything farm-scoped.

Exports:
    FarmRepository: Farm CRUD operations
"""

import uuid
from typing import Any, Dict, List, Optional, Tuple

import pydantic

from exceptions import NotFoundError, StorageError, ValidationError
from util_logger import LoggerFactory, ComponentType, LogContext
from core.models import Farm, Principal, utc_now
from core.logic.access import (
    FarmAccess,
    FARM_ACCESS_DENIED_MESSAGE,
    require_owner,
    require_read,
    require_write,
    resolve_access,
)
from . import paths
from .document_store import DocumentStore

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "FarmRepository")

# Never taken from a client patch
PROTECTED_FARM_FIELDS = ("id", "owner", "createdAt", "blockCount", "datasetCount", "totalArea")


class FarmRepository:
    """
    Farm metadata CRUD over a document store.

    Rollup fields (blockCount, datasetCount, totalArea) are written only by
    services.aggregate_service.AggregateMaintainer through save().
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    # =========================================================================
    # LOAD / SAVE (no authorization)
    # =========================================================================

    def find(self, farm_id: str) -> Optional[Farm]:
        """Farm document or None when absent."""
        data = self.store.read_json_or_default(paths.farm_metadata_key(farm_id), None)
        if data is None:
            return None
        return Farm.from_document(data)

    def load(self, farm_id: str) -> Farm:
        """
        Raises:
            NotFoundError: farm metadata missing
        """
        farm = self.find(farm_id)
        if farm is None:
            raise NotFoundError("Farm not found", details={'farm_id': farm_id})
        return farm

    def save(self, farm: Farm) -> Farm:
        self.store.write_json(paths.farm_metadata_key(farm.id), farm.to_document())
        return farm

    def load_for_read(self, farm_id: str, principal: Principal) -> Tuple[Farm, FarmAccess]:
        """
        Load a farm the principal can see.

        Raises:
            NotFoundError: farm missing or invisible to the principal
        """
        farm = self.find(farm_id)
        access = require_read(farm, principal.id)
        return farm, access

    def load_for_write(self, farm_id: str, principal: Principal) -> Tuple[Farm, FarmAccess]:
        """
        Load a farm the principal can modify.

        Raises:
            NotFoundError: farm missing or invisible to the principal
            ForbiddenError: farm visible but role does not allow writes
        """
        farm = self.find(farm_id)
        access = require_write(farm, principal.id)
        return farm, access

    # =========================================================================
    # CRUD
    # =========================================================================

    def create_farm(self, principal: Principal, data: Dict[str, Any]) -> Farm:
        """
        Create a farm owned by the principal.

        Args:
            principal: Creating user (becomes owner)
            data: {"name": str, "location": {"latitude", "longitude", "address"?}, ...}

        Raises:
            ValidationError: name or location missing/invalid
        """
        if not data.get("name") or not data.get("location"):
            raise ValidationError("Farm name and location are required")

        now = utc_now()
        document = {
            **Farm.normalize_patch(data),
            "id": str(uuid.uuid4()),
            "owner": principal.id,
            "collaborators": data.get("collaborators") or [],
            "blockCount": 0,
            "datasetCount": 0,
            "totalArea": 0.0,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            farm = Farm.model_validate(document)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid farm: {e.error_count()} field error(s)", details={'errors': e.errors()}) from e

        self.save(farm)
        self.store.write_json(paths.blocks_key(farm.id), {"type": "FeatureCollection", "features": []})

        logger.info(
            f"Created farm {farm.id}",
            extra={'custom_dimensions': LogContext(farm_id=farm.id, principal_id=principal.id).to_dict()}
        )
        return farm

    def get_farm(self, farm_id: str, principal: Principal) -> Farm:
        farm, _access = self.load_for_read(farm_id, principal)
        return farm

    def list_farms(self, principal: Principal) -> List[Farm]:
        """
        Every farm the principal can see.

        Full scan of farm metadata documents (no secondary index). A farm
        document that cannot be read is logged and skipped.
        """
        farms = []
        for key in self.store.list(paths.FARMS_PREFIX):
            if not paths.is_farm_metadata_key(key):
                continue
            try:
                farm = Farm.from_document(self.store.read_json(key))
            except (NotFoundError, StorageError, pydantic.ValidationError) as e:
                logger.error(f"Error reading farm {key}: {e}")
                continue
            if resolve_access(farm, principal.id).has_read:
                farms.append(farm)
        return farms

    def update_farm(self, farm_id: str, principal: Principal, patch: Dict[str, Any]) -> Farm:
        """
        Merge a patch into the farm.

        id, owner, createdAt and the rollups are forced back to their stored
        values whatever the patch contains.
        """
        farm, _access = self.load_for_write(farm_id, principal)
        current = farm.to_document()
        merged = {**current, **Farm.normalize_patch(patch)}
        for field in PROTECTED_FARM_FIELDS:
            if field in current:
                merged[field] = current[field]
        merged["updatedAt"] = utc_now()

        try:
            updated = Farm.model_validate(merged)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid farm update: {e.error_count()} field error(s)", details={'errors': e.errors()}) from e

        if not updated.name:
            raise ValidationError("Farm name cannot be empty")

        self.save(updated)
        logger.info(
            f"Updated farm {farm_id}",
            extra={'custom_dimensions': LogContext(farm_id=farm_id, principal_id=principal.id).to_dict()}
        )
        return updated

    def delete_farm(self, farm_id: str, principal: Principal) -> List[str]:
        """
        Delete the farm and every document under farms/{farmId}/.

        Only the owner may delete a farm.

        Returns:
            Keys deleted
        """
        farm = self.find(farm_id)
        if farm is None:
            raise NotFoundError(FARM_ACCESS_DENIED_MESSAGE, details={'farm_id': farm_id})
        require_owner(farm, principal.id)

        deleted = self.store.delete_prefix(paths.farm_prefix(farm_id))
        logger.info(
            f"Deleted farm {farm_id} ({len(deleted)} documents)",
            extra={'custom_dimensions': LogContext(farm_id=farm_id, principal_id=principal.id).to_dict()}
        )
        return deleted
