# ============================================================================
# REVISION LOG REPOSITORY
# ============================================================================
# STATUS: Infrastructure - capped per-entity revision history
# PURPOSE: Newest-first revision log stored as one JSON array per entity
# EXPORTS: RevisionLog
# DEPENDENCIES: pydantic, infrastructure.document_store, util_logger
# ============================================================================
"""
Revision Log Repository.

Each entity keeps its history in a single JSON array document:

    [newest, ..., oldest]      length <= cap

append() prepends and truncates, so the oldest entries are evicted first
and newest-first ordering holds at all times.

History is best-effort and never the source of truth: append() logs and
swallows store failures so the entity mutation that triggered it still
goes through.

Exports:
    RevisionLog: Capped revision log for one revision model type
"""

from typing import Generic, List, Type, TypeVar

import pydantic

from exceptions import BusinessLogicError, ContractViolationError, NotFoundError, StorageError
from util_logger import LoggerFactory, ComponentType
from core.models.base import DocumentModel
from .document_store import DocumentStore

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "RevisionLog")

RevisionT = TypeVar("RevisionT", bound=DocumentModel)


class RevisionLog(Generic[RevisionT]):
    """
    Capped, newest-first revision log.

    One instance per revision type (BlockRevision cap 100, DatasetRevision
    cap 50); the log key is supplied per call.
    """

    def __init__(self, store: DocumentStore, model: Type[RevisionT], cap: int):
        if cap < 1:
            raise ValueError(f"Revision cap must be positive, got {cap}")
        self.store = store
        self.model = model
        self.cap = cap

    # =========================================================================
    # WRITE
    # =========================================================================

    def append(self, key: str, revision: RevisionT) -> bool:
        """
        Prepend a revision and truncate the log to the cap.

        A failed append is logged and reported as False; only a wrong
        revision type (a programming error) raises.

        Args:
            key: Revision log document key
            revision: Snapshot to record

        Returns:
            True if the log was written
        """
        if not isinstance(revision, self.model):
            raise ContractViolationError(
                f"RevisionLog for {self.model.__name__} received {type(revision).__name__}"
            )

        try:
            entries = self._read_raw(key)
            entries.insert(0, revision.to_document())
            self.store.write_json(key, entries[:self.cap])
            logger.debug(f"Recorded revision {getattr(revision, 'id', '?')} at {key} ({min(len(entries), self.cap)} kept)")
            return True
        except (BusinessLogicError, pydantic.ValidationError, ValueError) as e:
            logger.warning(f"Failed to persist revision at {key}: {e}")
            return False

    # =========================================================================
    # READ
    # =========================================================================

    def list(self, key: str) -> List[RevisionT]:
        """
        All revisions, newest first. Empty when the log does not exist.

        Raises:
            StorageError: store unavailable
        """
        return [self.model.from_document(entry) for entry in self._read_raw(key)]

    def get(self, key: str, revision_id: str) -> RevisionT:
        """
        Find one revision by id.

        Raises:
            NotFoundError: no revision with that id
        """
        for entry in self._read_raw(key):
            if entry.get("id") == revision_id:
                return self.model.from_document(entry)
        raise NotFoundError("Revision not found", details={'key': key, 'revision_id': revision_id})

    def _read_raw(self, key: str) -> list:
        entries = self.store.read_json_or_default(key, [])
        if not isinstance(entries, list):
            logger.warning(f"Revision log at {key} is not a list; treating as empty")
            return []
        return [e for e in entries if isinstance(e, dict)]

    def delete(self, key: str) -> bool:
        try:
            return self.store.delete(key)
        except StorageError as e:
            logger.warning(f"Failed to delete revision log {key}: {e}")
            return False
