# ============================================================================
# DOCUMENT STORE INTERFACE
# ============================================================================
# STATUS: Infrastructure - key-addressed document storage contract
# PURPOSE: Abstract document store plus the in-memory implementation
# EXPORTS: DocumentStore, InMemoryDocumentStore
# DEPENDENCIES: exceptions, util_logger
# ============================================================================
"""
Document Store Interface.

The store is a flat key -> bytes map used as a pseudo-database.

Contract (every implementation):
    - write() overwrites the whole value; there is no merge
    - last write wins; there is no conditional or compare-and-swap write
    - every call is independent; multi-key updates have no atomicity, so a
      crash between calls leaves each key individually valid but the set
      partially updated
    - read() of an absent key raises NotFoundError
    - delete() of an absent key returns False

A store instance is injected into each repository; nothing reaches for a
process-wide client.
"""

import json
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from exceptions import ContractViolationError, NotFoundError, StorageError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "DocumentStore")

JSON_CONTENT_TYPE = "application/json"


class DocumentStore(ABC):
    """
    Key-addressed read/write/exists/delete/list over blob storage.

    Subclasses implement the five primitives; JSON helpers are shared.
    """

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def read(self, key: str) -> bytes:
        """Return the stored bytes or raise NotFoundError."""
        pass

    @abstractmethod
    def write(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        """Overwrite the whole value at key."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete key. Returns False if it was absent."""
        pass

    @abstractmethod
    def list(self, prefix: str = "") -> List[str]:
        """Keys starting with prefix, sorted."""
        pass

    # ========================================================================
    # JSON HELPERS
    # ========================================================================

    def read_json(self, key: str) -> Any:
        """
        Read and decode a UTF-8 JSON document.

        Raises:
            NotFoundError: key absent
            StorageError: stored bytes are not valid JSON
        """
        data = self.read(key)
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Corrupt JSON document at {key}: {e}")
            raise StorageError(f"Stored document is not valid JSON: {key}", details={'key': key}) from e

    def read_json_or_default(self, key: str, default: Any) -> Any:
        """read_json, returning default when the key is absent."""
        try:
            return self.read_json(key)
        except NotFoundError:
            return default

    def write_json(self, key: str, obj: Any) -> None:
        payload = json.dumps(obj, ensure_ascii=False, default=str).encode("utf-8")
        self.write(key, payload, content_type=JSON_CONTENT_TYPE)

    def delete_prefix(self, prefix: str) -> List[str]:
        """
        Delete every key under prefix.

        Individual delete failures are logged and skipped so one bad key
        does not strand the rest.

        Returns:
            Keys actually deleted
        """
        deleted = []
        for key in self.list(prefix):
            try:
                if self.delete(key):
                    deleted.append(key)
            except StorageError as e:
                logger.error(f"Error deleting {key}: {e}")
        return deleted


class InMemoryDocumentStore(DocumentStore):
    """
    Thread-safe dict-backed store for local mode and tests.

    Values are copied on the way in, so callers cannot mutate stored state.
    """

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})
        self._content_types: Dict[str, str] = {}
        self._lock = threading.Lock()
        logger.debug("Initialized in-memory document store")

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def read(self, key: str) -> bytes:
        with self._lock:
            if key not in self._data:
                raise NotFoundError(f"Document not found: {key}", details={'key': key})
            return self._data[key]

    def write(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        if not isinstance(data, (bytes, bytearray)):
            raise ContractViolationError(f"Document data must be bytes, got {type(data).__name__}")
        with self._lock:
            self._data[key] = bytes(data)
            self._content_types[key] = content_type
        logger.debug(f"Wrote {len(data)} bytes to {key}")

    def delete(self, key: str) -> bool:
        with self._lock:
            self._content_types.pop(key, None)
            return self._data.pop(key, None) is not None

    def list(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))

    def content_type(self, key: str) -> Optional[str]:
        with self._lock:
            return self._content_types.get(key)
