# ============================================================================
# BLOCK REPOSITORY
# ============================================================================
# STATUS: Infrastructure - block CRUD with revision history
# PURPOSE: Blocks stored as features of one per-farm FeatureCollection document
# EXPORTS: BlockRepository, read_block_collection
# DEPENDENCIES: pydantic, shapely, core.models.block, infrastructure.revision_repository
# ============================================================================
"""
Block Repository.

All blocks of a farm live in farms/{farmId}/blocks.json. Every mutation is
a read-modify-write of that whole document:

    [authorize] -> [read blocks.json] -> [append revision] -> [write blocks.json]
                -> [recompute farm rollups]

Each step is an independent store call. There is no lock and no
conditional write: two concurrent mutations of the same farm both read the
same collection and the later write wins.

Identity fields (id, farmId, createdAt) are forced back after every merge;
area is re-derived whenever geometry changes.

Exports:
    BlockRepository: Block CRUD operations
    read_block_collection: Load a farm's block FeatureCollection (empty if absent)
"""

import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import pydantic
from shapely.geometry import shape
from shapely.errors import GeometryTypeError, ShapelyError

from exceptions import NotFoundError, ValidationError
from util_logger import LoggerFactory, ComponentType, LogContext
from core.models import BLOCK_GEOMETRY_TYPES, Block, BlockRevision, Principal, utc_now
from core.logic.calculations import geodesic_area
from . import paths
from .document_store import DocumentStore
from .farm_repository import FarmRepository
from .revision_repository import RevisionLog

if TYPE_CHECKING:
    from services.aggregate_service import AggregateMaintainer

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "BlockRepository")

PROTECTED_BLOCK_FIELDS = ("id", "farmId", "createdAt")


def read_block_collection(store: DocumentStore, farm_id: str) -> Dict[str, Any]:
    """Farm blocks FeatureCollection; empty collection if the document is absent."""
    collection = store.read_json_or_default(paths.blocks_key(farm_id), None)
    if not isinstance(collection, dict) or not isinstance(collection.get("features"), list):
        return {"type": "FeatureCollection", "features": []}
    return collection


def validate_block_geometry(geometry: Any) -> Dict[str, Any]:
    """
    Require a well-formed GeoJSON Polygon or MultiPolygon.

    Raises:
        ValidationError: missing, wrong type or unparseable coordinates
    """
    if not isinstance(geometry, dict) or geometry.get("type") not in BLOCK_GEOMETRY_TYPES:
        raise ValidationError("Block geometry must be a GeoJSON Polygon or MultiPolygon")
    try:
        geom = shape(geometry)
    except (GeometryTypeError, ShapelyError, ValueError, TypeError, KeyError, IndexError) as e:
        raise ValidationError(f"Invalid block geometry: {e}") from e
    if geom.is_empty:
        raise ValidationError("Block geometry is empty")
    return geometry


def _find_feature_index(collection: Dict[str, Any], block_id: str) -> int:
    for index, feature in enumerate(collection["features"]):
        if feature.get("id") == block_id:
            return index
    raise NotFoundError("Block not found", details={'block_id': block_id})


class BlockRepository:
    """
    Block CRUD with snapshot-before-mutate revision history.

    Args:
        store: Document store
        farms: Farm repository (authorization)
        revisions: Block revision log (cap 100 by default)
        aggregates: Aggregate maintainer refreshed after every mutation
    """

    def __init__(
        self,
        store: DocumentStore,
        farms: FarmRepository,
        revisions: RevisionLog,
        aggregates: 'AggregateMaintainer'
    ):
        self.store = store
        self.farms = farms
        self.revisions = revisions
        self.aggregates = aggregates

    # =========================================================================
    # READ
    # =========================================================================

    def list_blocks(self, farm_id: str, principal: Principal) -> Dict[str, Any]:
        """All blocks of the farm as a GeoJSON FeatureCollection."""
        self.farms.load_for_read(farm_id, principal)
        return read_block_collection(self.store, farm_id)

    def get_block(self, farm_id: str, block_id: str, principal: Principal) -> Block:
        self.farms.load_for_read(farm_id, principal)
        collection = read_block_collection(self.store, farm_id)
        feature = collection["features"][_find_feature_index(collection, block_id)]
        return Block.from_feature(feature)

    def list_revisions(self, farm_id: str, block_id: str, principal: Principal) -> List[BlockRevision]:
        """Block revisions, newest first."""
        self.farms.load_for_read(farm_id, principal)
        return self.revisions.list(paths.block_revisions_key(farm_id, block_id))

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_block(self, farm_id: str, principal: Principal, data: Dict[str, Any]) -> Block:
        """
        Create a block.

        Args:
            farm_id: Owning farm
            principal: Acting user
            data: {"name": str, "geometry": Polygon|MultiPolygon, ...optional properties}

        Raises:
            ValidationError: name or geometry missing/invalid
        """
        self.farms.load_for_write(farm_id, principal)

        data = Block.normalize_patch(data)
        if not data.get("name"):
            raise ValidationError("Block name and geometry are required")
        geometry = validate_block_geometry(data.get("geometry"))

        now = utc_now()
        properties = {
            **{k: v for k, v in data.items() if k not in ("geometry", "area")},
            "id": str(uuid.uuid4()),
            "farmId": farm_id,
            "area": geodesic_area(geometry),
            "createdAt": now,
            "updatedAt": now,
            "updatedBy": principal.id,
            "updatedByName": principal.email,
        }
        block = self._validate(properties, geometry)

        collection = read_block_collection(self.store, farm_id)
        collection["features"].append(block.to_feature())
        self.store.write_json(paths.blocks_key(farm_id), collection)

        logger.info(
            f"Created block {block.id} ({block.area:.1f} m2)",
            extra={'custom_dimensions': self._context(farm_id, block.id, principal)}
        )
        self.aggregates.refresh_after_mutation(farm_id)
        return block

    # =========================================================================
    # UPDATE
    # =========================================================================

    def update_block(
        self,
        farm_id: str,
        block_id: str,
        patch: Dict[str, Any],
        principal: Principal,
        revision_message: Optional[str] = None
    ) -> Block:
        """
        Merge a patch into a block.

        The pre-patch state is recorded as the newest revision before the
        block is written. A `geometry` key replaces the geometry and
        re-derives area; a `revisionMessage` key (or revision_message)
        labels the new state.

        Raises:
            NotFoundError: farm invisible or block missing
            ForbiddenError: role does not allow writes
            ValidationError: patch produces an invalid block
        """
        self.farms.load_for_write(farm_id, principal)
        collection = read_block_collection(self.store, farm_id)
        index = _find_feature_index(collection, block_id)
        original = Block.from_feature(collection["features"][index])

        patch = Block.normalize_patch(dict(patch))
        geometry_update = patch.pop("geometry", None)
        message = patch.pop("revisionMessage", None)
        if revision_message is not None:
            message = revision_message
        patch.pop("area", None)

        geometry = original.geometry
        properties = original.to_document()
        if geometry_update is not None:
            geometry = validate_block_geometry(geometry_update)
            properties["area"] = geodesic_area(geometry)

        now = utc_now()
        merged = {**properties, **patch}
        for field in PROTECTED_BLOCK_FIELDS:
            merged[field] = properties[field]
        merged.update({
            "updatedAt": now,
            "updatedBy": principal.id,
            "updatedByName": principal.email,
        })
        if message is not None:
            merged["revisionMessage"] = message
        if not merged.get("name"):
            raise ValidationError("Block name cannot be empty")

        updated = self._validate(merged, geometry)

        self._snapshot(original, principal)

        collection["features"][index] = updated.to_feature()
        self.store.write_json(paths.blocks_key(farm_id), collection)

        logger.info(
            f"Updated block {block_id}",
            extra={'custom_dimensions': self._context(farm_id, block_id, principal)}
        )
        self.aggregates.refresh_after_mutation(farm_id)
        return updated

    # =========================================================================
    # REVERT
    # =========================================================================

    def revert_block(
        self,
        farm_id: str,
        block_id: str,
        revision_id: str,
        principal: Principal,
        revision_message: Optional[str] = None
    ) -> Block:
        """
        Restore a block to a revision.

        The current state is recorded first, labelled "Reverted to {revisionId}"
        (": {message}" appended when given), so the revert itself can be undone.

        Raises:
            NotFoundError: farm invisible, block or revision missing
        """
        self.farms.load_for_write(farm_id, principal)
        collection = read_block_collection(self.store, farm_id)
        index = _find_feature_index(collection, block_id)
        current = Block.from_feature(collection["features"][index])

        revision = self.revisions.get(paths.block_revisions_key(farm_id, block_id), revision_id)

        label = f"Reverted to {revision_id}"
        if revision_message:
            label = f"{label}: {revision_message}"
        self._snapshot(current, principal, message=label, actor_is_principal=True)

        restored = dict(revision.properties)
        restored.pop("geometry", None)
        restored.update({
            "id": block_id,
            "farmId": farm_id,
            "createdAt": current.created_at,
            "updatedAt": utc_now(),
            "updatedBy": principal.id,
            "updatedByName": principal.email,
            "revisionMessage": revision_message or revision.revision_message,
        })
        geometry = revision.geometry or current.geometry
        if geometry:
            restored["area"] = geodesic_area(geometry)

        reverted = self._validate(restored, geometry)
        collection["features"][index] = reverted.to_feature()
        self.store.write_json(paths.blocks_key(farm_id), collection)

        logger.info(
            f"Reverted block {block_id} to revision {revision_id}",
            extra={'custom_dimensions': self._context(farm_id, block_id, principal)}
        )
        self.aggregates.refresh_after_mutation(farm_id)
        return reverted

    # =========================================================================
    # DELETE
    # =========================================================================

    def delete_block(self, farm_id: str, block_id: str, principal: Principal) -> None:
        """
        Remove a block from the farm collection and drop its revision log.

        Raises:
            NotFoundError: farm invisible or block missing
        """
        self.farms.load_for_write(farm_id, principal)
        collection = read_block_collection(self.store, farm_id)

        original_length = len(collection["features"])
        collection["features"] = [f for f in collection["features"] if f.get("id") != block_id]
        if len(collection["features"]) == original_length:
            raise NotFoundError("Block not found", details={'block_id': block_id})

        self.store.write_json(paths.blocks_key(farm_id), collection)
        self.revisions.delete(paths.block_revisions_key(farm_id, block_id))

        logger.info(
            f"Deleted block {block_id}",
            extra={'custom_dimensions': self._context(farm_id, block_id, principal)}
        )
        self.aggregates.refresh_after_mutation(farm_id)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _snapshot(
        self,
        block: Block,
        principal: Principal,
        message: Optional[str] = None,
        actor_is_principal: bool = False
    ) -> bool:
        """Record the given block state as the newest revision (best-effort)."""
        properties = block.to_document()
        if actor_is_principal:
            updated_by, updated_by_name = principal.id, principal.email
        else:
            # Attribute the snapshot to whoever produced that state
            updated_by = block.updated_by or principal.id
            updated_by_name = block.updated_by_name or principal.email

        revision = BlockRevision(
            id=str(uuid.uuid4()),
            farm_id=block.farm_id,
            block_id=block.id,
            created_at=utc_now(),
            geometry=block.geometry,
            properties=properties,
            revision_message=message if message is not None else block.revision_message,
            updated_by=updated_by,
            updated_by_name=updated_by_name,
        )
        return self.revisions.append(paths.block_revisions_key(block.farm_id, block.id), revision)

    @staticmethod
    def _validate(properties: Dict[str, Any], geometry: Optional[Dict[str, Any]]) -> Block:
        try:
            return Block.model_validate({**properties, "geometry": geometry})
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid block: {e.error_count()} field error(s)",
                details={'errors': e.errors(include_url=False)}
            ) from e

    @staticmethod
    def _context(farm_id: str, block_id: str, principal: Principal) -> Dict[str, Any]:
        return LogContext(
            farm_id=farm_id,
            entity_id=block_id,
            entity_type="block",
            principal_id=principal.id
        ).to_dict()
