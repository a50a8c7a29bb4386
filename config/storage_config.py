"""
Document Store Configuration.

Selects the document store backend and holds Azure Blob Storage
connection settings.

Exports:
    StorageBackend: Backend selector enum
    StorageConfig: Storage configuration model

Environment Variables:
    STORAGE_BACKEND            - "azure" or "memory"
    STORAGE_ACCOUNT_NAME       - Azure storage account (DefaultAzureCredential auth)
    STORAGE_CONTAINER          - Container holding all farm documents
    STORAGE_CONNECTION_STRING  - Optional connection string (takes precedence)
"""

import os
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .defaults import StorageDefaults


class StorageBackend(str, Enum):
    """Supported document store backends."""
    AZURE = "azure"
    MEMORY = "memory"


class StorageConfig(BaseModel):
    """
    Document store configuration.

    One container holds every farm; keys are laid out under
    ``farms/{farmId}/`` (see infrastructure.paths).
    """

    backend: StorageBackend = Field(
        default=StorageBackend(StorageDefaults.BACKEND),
        description="Document store backend (azure for Blob Storage, memory for local/tests)"
    )

    account_name: Optional[str] = Field(
        default=None,
        description="Azure storage account name, used with DefaultAzureCredential"
    )

    container: str = Field(
        default=StorageDefaults.CONTAINER,
        description="Blob container holding all farm documents"
    )

    connection_string: Optional[str] = Field(
        default=None,
        repr=False,
        description="Azure storage connection string (takes precedence over account_name)"
    )

    @field_validator('container')
    @classmethod
    def validate_container(cls, v: str) -> str:
        """Azure container names are 3-63 lowercase letters, digits and hyphens."""
        if not (3 <= len(v) <= 63):
            raise ValueError(f"container name must be 3-63 characters, got {len(v)}")
        if v != v.lower():
            raise ValueError(f"container name must be lowercase: {v}")
        return v

    @property
    def account_url(self) -> Optional[str]:
        """Blob service URL derived from the account name."""
        if not self.account_name:
            return None
        return StorageDefaults.ACCOUNT_URL_TEMPLATE.format(account_name=self.account_name)

    def debug_dict(self) -> dict:
        """Sanitized view for logging (connection string masked)."""
        return {
            'backend': self.backend.value,
            'account_name': self.account_name,
            'account_url': self.account_url,
            'container': self.container,
            'connection_string': '***MASKED***' if self.connection_string else None,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            backend=StorageBackend(os.environ.get("STORAGE_BACKEND", StorageDefaults.BACKEND).lower()),
            account_name=os.environ.get("STORAGE_ACCOUNT_NAME") or None,
            container=os.environ.get("STORAGE_CONTAINER", StorageDefaults.CONTAINER),
            connection_string=os.environ.get("STORAGE_CONNECTION_STRING") or None,
        )
