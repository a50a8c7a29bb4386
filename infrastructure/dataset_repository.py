# ============================================================================
# DATASET REPOSITORY
# ============================================================================
# STATUS: Infrastructure - dataset CRUD with revision history
# PURPOSE: Dataset metadata, raw/processed payloads and status transitions
# EXPORTS: DatasetRepository
# DEPENDENCIES: pydantic, core.models.dataset, core.logic.transitions,
#               infrastructure.revision_repository
# ============================================================================
"""
Dataset Repository.

Each dataset owns the prefix farms/{farmId}/datasets/{datasetId}/:

    metadata.json        Dataset document
    revisions.json       Dataset revisions (newest first, cap 50)
    raw.{ext}            Raw upload
    processed.geojson    Normalized FeatureCollection (vector uploads)
    processed.jpg        Transcoded raster (TIFF uploads)

Deleting a dataset deletes the whole prefix.

Client-facing operations (list/get/create/update/revert/delete) authorize
against the farm. Pipeline-facing operations (transition_status,
store_raw, store_processed_*) are called by services.dataset_ingest_service
after it has authorized the upload, and do not re-check access.

Exports:
    DatasetRepository: Dataset CRUD operations
"""

import json
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import pydantic

from exceptions import NotFoundError, StorageError, ValidationError
from util_logger import LoggerFactory, ComponentType, LogContext
from core.models import Dataset, DatasetRevision, DatasetStatus, DatasetType, Principal, utc_now
from core.logic.transitions import validate_dataset_transition
from . import paths
from .document_store import DocumentStore
from .farm_repository import FarmRepository
from .revision_repository import RevisionLog

if TYPE_CHECKING:
    from services.aggregate_service import AggregateMaintainer

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "DatasetRepository")

PROTECTED_DATASET_FIELDS = ("id", "farmId", "createdAt", "uploadedBy")

# Written only by the ingestion pipeline through transition_status()
PIPELINE_DATASET_FIELDS = (
    "status", "rawPath", "geojsonPath", "rasterPath",
    "recordCount", "bounds", "fields", "processedAt", "error",
)

# Describe the current upload attempt; a revert keeps them with the payload
ATTEMPT_DATASET_FIELDS = PIPELINE_DATASET_FIELDS + ("type", "fileSize", "originalFilename")

GEOJSON_CONTENT_TYPE = "application/geo+json"
JPEG_CONTENT_TYPE = "image/jpeg"


def raw_extension(filename: Optional[str]) -> str:
    """Extension used for the raw payload key (`dat` when the name has none)."""
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].strip().lower()
        if ext and "/" not in ext:
            return ext
    return "dat"


class DatasetRepository:
    """
    Dataset CRUD with snapshot-before-mutate revision history.

    Args:
        store: Document store
        farms: Farm repository (authorization)
        revisions: Dataset revision log (cap 50 by default)
        aggregates: Aggregate maintainer refreshed after create/delete
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

    def find(self, farm_id: str, dataset_id: str) -> Optional[Dataset]:
        """Dataset document or None (no authorization)."""
        data = self.store.read_json_or_default(paths.dataset_metadata_key(farm_id, dataset_id), None)
        if data is None:
            return None
        return Dataset.from_document(data)

    def load(self, farm_id: str, dataset_id: str) -> Dataset:
        dataset = self.find(farm_id, dataset_id)
        if dataset is None:
            raise NotFoundError("Dataset not found", details={'farm_id': farm_id, 'dataset_id': dataset_id})
        return dataset

    def list_datasets(self, farm_id: str, principal: Principal) -> List[Dataset]:
        """All datasets of the farm, newest first. Unreadable documents are skipped."""
        self.farms.load_for_read(farm_id, principal)

        datasets = []
        for key in self.store.list(paths.datasets_prefix(farm_id)):
            if not paths.is_dataset_metadata_key(farm_id, key):
                continue
            try:
                datasets.append(Dataset.from_document(self.store.read_json(key)))
            except (NotFoundError, StorageError, pydantic.ValidationError) as e:
                logger.error(f"Error reading dataset {key}: {e}")

        datasets.sort(key=lambda d: d.created_at, reverse=True)
        return datasets

    def get_dataset(self, farm_id: str, dataset_id: str, principal: Principal) -> Dataset:
        self.farms.load_for_read(farm_id, principal)
        return self.load(farm_id, dataset_id)

    def read_processed_geojson(
        self,
        farm_id: str,
        dataset_id: str,
        principal: Principal
    ) -> Optional[Dict[str, Any]]:
        """
        Normalized FeatureCollection of a completed vector dataset.

        Returns None when the dataset is not completed or has no GeoJSON
        payload (rasters, failed uploads).
        """
        dataset = self.get_dataset(farm_id, dataset_id, principal)
        if dataset.status != DatasetStatus.COMPLETED or not dataset.geojson_path:
            return None
        return self.store.read_json_or_default(dataset.geojson_path, None)

    def list_revisions(self, farm_id: str, dataset_id: str, principal: Principal) -> List[DatasetRevision]:
        self.farms.load_for_read(farm_id, principal)
        return self.revisions.list(paths.dataset_revisions_key(farm_id, dataset_id))

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_dataset(self, farm_id: str, principal: Principal, data: Dict[str, Any]) -> Dataset:
        """
        Create dataset metadata.

        Args:
            data: {"name": str, "type": DatasetType value, ...optional fields}

        Raises:
            ValidationError: name or type missing/invalid
        """
        self.farms.load_for_write(farm_id, principal)

        data = Dataset.normalize_patch(data)
        if not data.get("name") or not data.get("type"):
            raise ValidationError("Dataset name and type are required")
        try:
            DatasetType(data["type"])
        except ValueError as e:
            raise ValidationError(f"Unsupported dataset type: {data['type']}") from e

        now = utc_now()
        document = {
            "status": DatasetStatus.UPLOADING.value,
            "collectedAt": now,
            **data,
            "id": str(uuid.uuid4()),
            "farmId": farm_id,
            "uploadedBy": principal.id,
            "createdAt": now,
            "updatedAt": now,
        }
        if not document.get("collectedAt"):
            document["collectedAt"] = now
        dataset = self._validate(document)

        self._save(dataset)
        logger.info(
            f"Created dataset {dataset.id} ({dataset.type.value})",
            extra={'custom_dimensions': self._context(farm_id, dataset.id, principal)}
        )
        self.aggregates.refresh_after_mutation(farm_id)
        return dataset

    # =========================================================================
    # UPDATE
    # =========================================================================

    def update_dataset(
        self,
        farm_id: str,
        dataset_id: str,
        patch: Dict[str, Any],
        principal: Principal,
        revision_message: Optional[str] = None
    ) -> Dataset:
        """
        Merge a patch into dataset metadata.

        The pre-patch state is recorded as the newest revision. Identity
        fields and pipeline-owned fields (status, payload pointers and
        processing results) in the patch are ignored.

        Raises:
            NotFoundError: farm invisible or dataset missing
            ForbiddenError: role does not allow writes
            ValidationError: invalid patch
        """
        self.farms.load_for_write(farm_id, principal)
        original = self.load(farm_id, dataset_id)

        patch = Dataset.normalize_patch(dict(patch))
        message = patch.pop("revisionMessage", None)
        if revision_message is not None:
            message = revision_message

        current = original.to_document()
        merged = {**current, **patch}
        for field in PROTECTED_DATASET_FIELDS + PIPELINE_DATASET_FIELDS:
            merged[field] = current.get(field)
        merged.update({
            "updatedAt": utc_now(),
            "updatedBy": principal.id,
            "updatedByName": principal.email,
        })
        if message is not None:
            merged["revisionMessage"] = message
        if not merged.get("name"):
            raise ValidationError("Dataset name cannot be empty")

        updated = self._validate(merged)

        self._snapshot(original, principal)
        self._save(updated)

        logger.info(
            f"Updated dataset {dataset_id}",
            extra={'custom_dimensions': self._context(farm_id, dataset_id, principal)}
        )
        self.aggregates.refresh_after_mutation(farm_id)
        return updated

    # =========================================================================
    # REVERT
    # =========================================================================

    def revert_dataset(
        self,
        farm_id: str,
        dataset_id: str,
        revision_id: str,
        principal: Principal,
        revision_message: Optional[str] = None
    ) -> Dataset:
        """
        Restore dataset metadata to a revision snapshot.

        The current state is recorded first, labelled "Reverted to {revisionId}".
        Only user-editable metadata is restored: status and the fields of
        the current upload attempt stay with the stored payload.

        Raises:
            NotFoundError: farm invisible, dataset or revision missing
        """
        self.farms.load_for_write(farm_id, principal)
        current = self.load(farm_id, dataset_id)
        revision = self.revisions.get(paths.dataset_revisions_key(farm_id, dataset_id), revision_id)

        label = f"Reverted to {revision_id}"
        if revision_message:
            label = f"{label}: {revision_message}"
        self._snapshot(current, principal, message=label)

        current_doc = current.to_document()
        restored = dict(revision.snapshot)
        for field in PROTECTED_DATASET_FIELDS + ATTEMPT_DATASET_FIELDS:
            restored[field] = current_doc.get(field)
        restored.update({
            "updatedAt": utc_now(),
            "updatedBy": principal.id,
            "updatedByName": principal.email,
            "revisionMessage": revision_message or revision.revision_message,
        })
        reverted = self._validate(restored)
        self._save(reverted)

        logger.info(
            f"Reverted dataset {dataset_id} to revision {revision_id}",
            extra={'custom_dimensions': self._context(farm_id, dataset_id, principal)}
        )
        self.aggregates.refresh_after_mutation(farm_id)
        return reverted

    # =========================================================================
    # DELETE
    # =========================================================================

    def delete_dataset(self, farm_id: str, dataset_id: str, principal: Principal) -> List[str]:
        """
        Delete every document under the dataset prefix.

        Returns:
            Keys deleted

        Raises:
            NotFoundError: farm invisible or dataset missing
        """
        self.farms.load_for_write(farm_id, principal)
        if not self.store.exists(paths.dataset_metadata_key(farm_id, dataset_id)):
            raise NotFoundError("Dataset not found", details={'farm_id': farm_id, 'dataset_id': dataset_id})

        deleted = self.store.delete_prefix(paths.dataset_prefix(farm_id, dataset_id))
        logger.info(
            f"Deleted dataset {dataset_id} ({len(deleted)} documents)",
            extra={'custom_dimensions': self._context(farm_id, dataset_id, principal)}
        )
        self.aggregates.refresh_after_mutation(farm_id)
        return deleted

    # =========================================================================
    # PIPELINE-FACING OPERATIONS
    # =========================================================================

    def transition_status(
        self,
        farm_id: str,
        dataset_id: str,
        target: DatasetStatus,
        new_attempt: bool = False,
        **fields: Any
    ) -> Dataset:
        """
        Move a dataset to a new status, setting extra fields in the same write.

        Moving to COMPLETED requires geojsonPath or rasterPath to point at an
        existing payload.

        Args:
            target: New status
            new_attempt: Re-upload starting over from a terminal status
            **fields: Additional Dataset fields (snake_case) to set

        Raises:
            ValidationError: invalid transition or missing processed payload
        """
        dataset = self.load(farm_id, dataset_id)
        validate_dataset_transition(dataset.status, target, new_attempt=new_attempt)

        document = {**dataset.to_document(), **Dataset.normalize_patch(fields)}
        document["status"] = target.value
        document["updatedAt"] = utc_now()
        updated = self._validate(document)

        if target == DatasetStatus.COMPLETED:
            payload_key = updated.geojson_path or updated.raster_path
            if not payload_key or not self.store.exists(payload_key):
                raise ValidationError(
                    "Completed dataset requires a processed payload",
                    details={'dataset_id': dataset_id, 'payload_key': payload_key}
                )

        self._save(updated)
        logger.debug(
            f"Dataset {dataset_id}: {dataset.status.value} -> {target.value}",
            extra={'custom_dimensions': LogContext(farm_id=farm_id, entity_id=dataset_id, entity_type="dataset").to_dict()}
        )
        return updated

    def store_raw(
        self,
        farm_id: str,
        dataset_id: str,
        filename: Optional[str],
        payload: bytes,
        content_type: Optional[str] = None
    ) -> str:
        """Write the raw upload to raw.{ext}. Returns the key."""
        key = paths.dataset_raw_key(farm_id, dataset_id, raw_extension(filename))
        self.store.write(key, payload, content_type=content_type or "application/octet-stream")
        return key

    def store_processed_geojson(self, farm_id: str, dataset_id: str, collection: Dict[str, Any]) -> str:
        key = paths.dataset_processed_geojson_key(farm_id, dataset_id)
        self.store.write(
            key,
            json.dumps(collection, ensure_ascii=False).encode("utf-8"),
            content_type=GEOJSON_CONTENT_TYPE
        )
        return key

    def store_processed_raster(self, farm_id: str, dataset_id: str, jpeg: bytes) -> str:
        key = paths.dataset_processed_raster_key(farm_id, dataset_id)
        self.store.write(key, jpeg, content_type=JPEG_CONTENT_TYPE)
        return key

    def snapshot(self, dataset: Dataset, principal: Principal, message: Optional[str] = None) -> bool:
        """Record a dataset state as the newest revision (best-effort)."""
        return self._snapshot(dataset, principal, message=message)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _snapshot(self, dataset: Dataset, principal: Principal, message: Optional[str] = None) -> bool:
        revision = DatasetRevision(
            id=str(uuid.uuid4()),
            dataset_id=dataset.id,
            farm_id=dataset.farm_id,
            created_at=utc_now(),
            snapshot=dataset.to_document(),
            revision_message=message if message is not None else dataset.revision_message,
            updated_by=principal.id if message is not None else (dataset.updated_by or principal.id),
            updated_by_name=principal.email if message is not None else (dataset.updated_by_name or principal.email),
        )
        return self.revisions.append(paths.dataset_revisions_key(dataset.farm_id, dataset.id), revision)

    def _save(self, dataset: Dataset) -> None:
        self.store.write_json(paths.dataset_metadata_key(dataset.farm_id, dataset.id), dataset.to_document())

    @staticmethod
    def _validate(document: Dict[str, Any]) -> Dataset:
        try:
            return Dataset.model_validate(document)
        except pydantic.ValidationError as e:
            raise ValidationError(
                f"Invalid dataset: {e.error_count()} field error(s)",
                details={'errors': e.errors(include_url=False)}
            ) from e

    @staticmethod
    def _context(farm_id: str, dataset_id: str, principal: Principal) -> Dict[str, Any]:
        return LogContext(
            farm_id=farm_id,
            entity_id=dataset_id,
            entity_type="dataset",
            principal_id=principal.id
        ).to_dict()
