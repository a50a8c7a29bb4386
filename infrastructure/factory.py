# ============================================================================
# REPOSITORY FACTORY
# ============================================================================
# STATUS: Infrastructure - central wiring point
# PURPOSE: Build the document store, revision logs, repositories and services
# EXPORTS: RepositoryFactory, get_default_repositories
# DEPENDENCIES: config, infrastructure/*, services/*
# ============================================================================
"""
Repository Factory - Central Creation Point.

Every repository and service shares one injected DocumentStore. The
backend is chosen by StorageConfig.backend:

    memory  InMemoryDocumentStore (local development, tests)
    azure   BlobDocumentStore over one Blob Storage container

Example:
    repos = RepositoryFactory.create_repositories()
    farm = repos['farm_repo'].create_farm(principal, {...})
    repos['ingest_service'].upload(farm.id, principal, "points.csv", payload)
"""

from typing import Any, Dict, Optional

from util_logger import LoggerFactory, ComponentType
from config import AppConfig, StorageBackend, StorageConfig, get_config
from core.models import BlockRevision, DatasetRevision
from .document_store import DocumentStore, InMemoryDocumentStore
from .revision_repository import RevisionLog
from .farm_repository import FarmRepository
from .block_repository import BlockRepository
from .dataset_repository import DatasetRepository
from .folder_repository import FolderRepository

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "RepositoryFactory")


class RepositoryFactory:
    """Factory for the document store and everything built on it."""

    @staticmethod
    def create_document_store(config: Optional[StorageConfig] = None) -> DocumentStore:
        """
        Create the configured document store.

        Raises:
            ConfigurationError: azure backend without credentials
        """
        config = config or get_config().storage

        if config.backend == StorageBackend.MEMORY:
            logger.info("Creating in-memory document store")
            return InMemoryDocumentStore()

        # Lazy: the Azure SDK is only loaded for the azure backend
        from .blob import BlobDocumentStore
        logger.info(f"Creating blob document store for container {config.container}")
        return BlobDocumentStore(
            container=config.container,
            account_name=config.account_name,
            connection_string=config.connection_string,
        )

    @staticmethod
    def create_repositories(
        store: Optional[DocumentStore] = None,
        config: Optional[AppConfig] = None,
        notifier: Optional[Any] = None
    ) -> Dict[str, Any]:
        """
        Wire every repository and service onto one store.

        Args:
            store: Document store (created from config when omitted)
            config: Application config (get_config() when omitted)
            notifier: services.notification_service.Notifier for re-upload notices

        Returns:
            Dictionary with store, farm_repo, block_repo, dataset_repo,
            folder_repo, aggregates and ingest_service
        """
        from services.aggregate_service import AggregateMaintainer
        from services.dataset_ingest_service import DatasetIngestService

        config = config or get_config()
        if store is None:
            store = RepositoryFactory.create_document_store(config.storage)

        farm_repo = FarmRepository(store)
        aggregates = AggregateMaintainer(store, farm_repo)
        block_repo = BlockRepository(
            store,
            farm_repo,
            RevisionLog(store, BlockRevision, cap=config.revisions.block_revision_cap),
            aggregates,
        )
        dataset_repo = DatasetRepository(
            store,
            farm_repo,
            RevisionLog(store, DatasetRevision, cap=config.revisions.dataset_revision_cap),
            aggregates,
        )
        folder_repo = FolderRepository(store, farm_repo)
        ingest_service = DatasetIngestService(dataset_repo, farm_repo, config=config.ingest, notifier=notifier)

        logger.debug(f"Repositories created on {type(store).__name__}")
        return {
            'store': store,
            'farm_repo': farm_repo,
            'block_repo': block_repo,
            'dataset_repo': dataset_repo,
            'folder_repo': folder_repo,
            'aggregates': aggregates,
            'ingest_service': ingest_service,
        }


def get_default_repositories() -> Dict[str, Any]:
    """Repositories wired from the environment configuration."""
    return RepositoryFactory.create_repositories()
