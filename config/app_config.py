"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - StorageConfig (document store backend)
    - IngestConfig (upload ceiling, raster transcoding, projected CSV pair)
    - RevisionConfig (revision log caps)

Exports:
    AppConfig: Main configuration class

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from pydantic import BaseModel, Field

from .storage_config import StorageConfig
from .ingest_config import IngestConfig
from .revision_config import RevisionConfig
from .defaults import AppDefaults


class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.
    """

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Enable debug mode. Error responses include stack traces when set."
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, qa, prod)",
        examples=["dev", "qa", "prod"]
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Logging level for application diagnostics",
        examples=["DEBUG", "INFO", "WARNING", "ERROR"]
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    revisions: RevisionConfig = Field(default_factory=RevisionConfig)

    @property
    def is_development(self) -> bool:
        """Stack traces are exposed only in development or debug mode."""
        return self.debug_mode or self.environment.lower() in ("dev", "development", "local")

    @classmethod
    def from_environment(cls):
        """Load all configs from environment."""
        return cls(
            debug_mode=os.environ.get("DEBUG_MODE", str(AppDefaults.DEBUG_MODE).lower()).lower() == "true",
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),

            storage=StorageConfig.from_environment(),
            ingest=IngestConfig.from_environment(),
            revisions=RevisionConfig.from_environment(),
        )
