# ============================================================================
# BLOB DOCUMENT STORE
# ============================================================================
# STATUS: Infrastructure - Azure Blob Storage document store
# PURPOSE: DocumentStore backed by one Azure Blob Storage container
# EXPORTS: BlobDocumentStore
# DEPENDENCIES: azure-storage-blob, azure-identity, azure-core, util_logger
# ============================================================================

"""
Blob Document Store - Azure Blob Storage backend.

Authentication:
    1. Connection string, when configured
    2. DefaultAzureCredential against https://{account}.blob.core.windows.net
       (environment variables, managed identity, Azure CLI, ...)

Error mapping:
    ResourceNotFoundError -> NotFoundError (read) / False (exists, delete)
    any other AzureError  -> StorageError

Uploads always overwrite; no ETag condition is sent, so concurrent writers
to the same key race and the last one wins.

Usage:
    store = BlobDocumentStore(container="farm-data", account_name="myaccount")
    store.write_json("farms/f1/metadata.json", {...})
"""

# ============================================================================
# IMPORTS - Top of file for fail-fast behavior
# ============================================================================

from typing import List, Optional

# Azure SDK imports - These will fail fast if not installed
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings
from azure.identity import DefaultAzureCredential
from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError

# Application imports
from exceptions import ConfigurationError, NotFoundError, StorageError
from util_logger import LoggerFactory, ComponentType
from config.defaults import StorageDefaults
from .document_store import DocumentStore

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "BlobDocumentStore")


class BlobDocumentStore(DocumentStore):
    """
    Document store over a single blob container.

    One instance per container; the container client is created once and
    reused for every call.
    """

    def __init__(
        self,
        container: str,
        account_name: Optional[str] = None,
        connection_string: Optional[str] = None,
        service_client: Optional[BlobServiceClient] = None,
        create_container: bool = False
    ):
        """
        Args:
            container: Blob container holding all farm documents
            account_name: Storage account (DefaultAzureCredential auth)
            connection_string: Connection string (takes precedence over account_name)
            service_client: Pre-built client, mostly for tests
            create_container: Create the container if it does not exist
        """
        self.container = container

        if service_client is not None:
            self.blob_service = service_client
        elif connection_string:
            logger.info("Initializing BlobDocumentStore with connection string")
            self.blob_service = BlobServiceClient.from_connection_string(connection_string)
        elif account_name:
            account_url = StorageDefaults.ACCOUNT_URL_TEMPLATE.format(account_name=account_name)
            logger.info(f"Initializing BlobDocumentStore with DefaultAzureCredential for account: {account_name}")
            self.blob_service = BlobServiceClient(
                account_url=account_url,
                credential=DefaultAzureCredential()
            )
        else:
            raise ConfigurationError(
                "BlobDocumentStore requires STORAGE_CONNECTION_STRING or STORAGE_ACCOUNT_NAME"
            )

        self._container_client: ContainerClient = self.blob_service.get_container_client(container)

        if create_container:
            try:
                self._container_client.create_container()
                logger.info(f"Created container: {container}")
            except ResourceExistsError:
                logger.debug(f"Container already exists: {container}")
            except AzureError as e:
                raise StorageError(f"Failed to create container {container}: {e}") from e

    # ========================================================================
    # CORE OPERATIONS
    # ========================================================================

    def exists(self, key: str) -> bool:
        try:
            self._container_client.get_blob_client(key).get_blob_properties()
            return True
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            logger.error(f"Error checking blob existence {self.container}/{key}: {e}")
            raise StorageError(f"Failed to check {key}: {e}", details={'key': key}) from e

    def read(self, key: str) -> bytes:
        """
        Read entire blob to memory.

        Raises:
            NotFoundError: If blob doesn't exist
            StorageError: Any other storage failure
        """
        try:
            logger.debug(f"Reading blob: {self.container}/{key}")
            data = self._container_client.get_blob_client(key).download_blob().readall()
            logger.debug(f"Read {len(data)} bytes from {self.container}/{key}")
            return data
        except ResourceNotFoundError as e:
            raise NotFoundError(f"Document not found: {key}", details={'key': key}) from e
        except AzureError as e:
            logger.error(f"Failed to read blob {self.container}/{key}: {e}")
            raise StorageError(f"Failed to read {key}: {e}", details={'key': key}) from e

    def write(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        try:
            self._container_client.get_blob_client(key).upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type)
            )
            logger.debug(f"Wrote blob: {self.container}/{key} ({len(data)} bytes)")
        except AzureError as e:
            logger.error(f"Failed to write blob {self.container}/{key}: {e}")
            raise StorageError(f"Failed to write {key}: {e}", details={'key': key}) from e

    def delete(self, key: str) -> bool:
        try:
            self._container_client.get_blob_client(key).delete_blob()
            logger.info(f"Deleted blob: {self.container}/{key}")
            return True
        except ResourceNotFoundError:
            logger.warning(f"Blob not found for deletion: {self.container}/{key}")
            return False
        except AzureError as e:
            logger.error(f"Failed to delete blob {self.container}/{key}: {e}")
            raise StorageError(f"Failed to delete {key}: {e}", details={'key': key}) from e

    def list(self, prefix: str = "") -> List[str]:
        try:
            names = [blob.name for blob in self._container_client.list_blobs(name_starts_with=prefix)]
            logger.debug(f"Found {len(names)} blobs in {self.container} with prefix '{prefix}'")
            return sorted(names)
        except AzureError as e:
            logger.error(f"Failed to list blobs in {self.container}: {e}")
            raise StorageError(f"Failed to list {prefix}: {e}", details={'prefix': prefix}) from e
