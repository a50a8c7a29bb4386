# ============================================================================
# DATASET FOLDER REPOSITORY
# ============================================================================
# STATUS: Infrastructure - flat dataset grouping
# PURPOSE: Dataset folder list stored as one JSON array per farm
# EXPORTS: FolderRepository
# DEPENDENCIES: pydantic, core.models.dataset, infrastructure.farm_repository
# ============================================================================
"""
Dataset Folder Repository.

Folders live in farms/{farmId}/dataset-folders.json as a JSON array. A
folder's parentId is either the "root" sentinel or another folder id; the
grouping is a display tag, not a tree, so no cycle detection is done.

Deleting a folder does not touch datasets: datasets whose folderId no
longer resolves are shown at root by clients.

Exports:
    FolderRepository: Folder CRUD operations
"""

import uuid
from typing import Any, Dict, List, Optional

import pydantic

from exceptions import NotFoundError, ValidationError
from util_logger import LoggerFactory, ComponentType, LogContext
from core.models import DatasetFolder, Principal, ROOT_FOLDER_ID, utc_now
from . import paths
from .document_store import DocumentStore
from .farm_repository import FarmRepository

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "FolderRepository")


class FolderRepository:
    """Dataset folder CRUD."""

    def __init__(self, store: DocumentStore, farms: FarmRepository):
        self.store = store
        self.farms = farms

    def _read(self, farm_id: str) -> List[DatasetFolder]:
        entries = self.store.read_json_or_default(paths.dataset_folders_key(farm_id), [])
        if not isinstance(entries, list):
            return []
        return [DatasetFolder.from_document(e) for e in entries if isinstance(e, dict)]

    def _write(self, farm_id: str, folders: List[DatasetFolder]) -> None:
        self.store.write_json(paths.dataset_folders_key(farm_id), [f.to_document() for f in folders])

    def _check_parent(self, folders: List[DatasetFolder], parent_id: Optional[str], folder_id: Optional[str] = None) -> str:
        parent_id = parent_id or ROOT_FOLDER_ID
        if parent_id == ROOT_FOLDER_ID:
            return parent_id
        if parent_id == folder_id:
            raise ValidationError("A folder cannot be its own parent")
        if not any(f.id == parent_id for f in folders):
            raise ValidationError(f"Parent folder not found: {parent_id}")
        return parent_id

    def list_folders(self, farm_id: str, principal: Principal) -> List[DatasetFolder]:
        self.farms.load_for_read(farm_id, principal)
        return self._read(farm_id)

    def create_folder(
        self,
        farm_id: str,
        principal: Principal,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[str] = None
    ) -> DatasetFolder:
        """
        Raises:
            ValidationError: empty name or unknown parent
        """
        self.farms.load_for_write(farm_id, principal)
        if not name or not name.strip():
            raise ValidationError("Folder name is required")

        folders = self._read(farm_id)
        now = utc_now()
        folder = DatasetFolder(
            id=str(uuid.uuid4()),
            farm_id=farm_id,
            name=name.strip(),
            description=description,
            parent_id=self._check_parent(folders, parent_id),
            created_at=now,
            updated_at=now,
        )
        folders.append(folder)
        self._write(farm_id, folders)

        logger.info(
            f"Created folder {folder.id}",
            extra={'custom_dimensions': LogContext(farm_id=farm_id, entity_id=folder.id, entity_type="folder",
                                                   principal_id=principal.id).to_dict()}
        )
        return folder

    def update_folder(
        self,
        farm_id: str,
        folder_id: str,
        patch: Dict[str, Any],
        principal: Principal
    ) -> DatasetFolder:
        self.farms.load_for_write(farm_id, principal)
        folders = self._read(farm_id)
        for index, folder in enumerate(folders):
            if folder.id == folder_id:
                break
        else:
            raise NotFoundError("Folder not found", details={'folder_id': folder_id})

        current = folder.to_document()
        merged = {**current, **DatasetFolder.normalize_patch(patch)}
        merged.update({
            "id": current["id"],
            "farmId": current["farmId"],
            "createdAt": current["createdAt"],
            "updatedAt": utc_now(),
        })
        merged["parentId"] = self._check_parent(folders, merged.get("parentId"), folder_id=folder_id)
        if not merged.get("name"):
            raise ValidationError("Folder name is required")

        try:
            updated = DatasetFolder.model_validate(merged)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid folder: {e.error_count()} field error(s)") from e

        folders[index] = updated
        self._write(farm_id, folders)
        return updated

    def delete_folder(self, farm_id: str, folder_id: str, principal: Principal) -> None:
        self.farms.load_for_write(farm_id, principal)
        folders = self._read(farm_id)
        remaining = [f for f in folders if f.id != folder_id]
        if len(remaining) == len(folders):
            raise NotFoundError("Folder not found", details={'folder_id': folder_id})
        self._write(farm_id, remaining)
        logger.info(
            f"Deleted folder {folder_id}",
            extra={'custom_dimensions': LogContext(farm_id=farm_id, entity_id=folder_id, entity_type="folder",
                                                   principal_id=principal.id).to_dict()}
        )
