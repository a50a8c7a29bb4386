"""
Infrastructure Package - Lazy Loading Implementation.

Document store backends, the persisted key layout and the entity
repositories. Imports are deferred until a name is first accessed, so
importing the package never reads configuration or builds Azure clients.

Usage:
    from infrastructure import RepositoryFactory

    repos = RepositoryFactory.create_repositories()
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .factory import RepositoryFactory as _RepositoryFactory
    from .document_store import DocumentStore as _DocumentStore
    from .document_store import InMemoryDocumentStore as _InMemoryDocumentStore
    from .blob import BlobDocumentStore as _BlobDocumentStore
    from .revision_repository import RevisionLog as _RevisionLog
    from .farm_repository import FarmRepository as _FarmRepository
    from .block_repository import BlockRepository as _BlockRepository
    from .dataset_repository import DatasetRepository as _DatasetRepository
    from .folder_repository import FolderRepository as _FolderRepository


_LAZY_IMPORTS = {
    "RepositoryFactory": ".factory",
    "get_default_repositories": ".factory",
    "DocumentStore": ".document_store",
    "InMemoryDocumentStore": ".document_store",
    "BlobDocumentStore": ".blob",
    "RevisionLog": ".revision_repository",
    "FarmRepository": ".farm_repository",
    "BlockRepository": ".block_repository",
    "DatasetRepository": ".dataset_repository",
    "FolderRepository": ".folder_repository",
}


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

    import importlib
    module = importlib.import_module(module_name, __name__)
    return getattr(module, name)


__all__ = list(_LAZY_IMPORTS)
