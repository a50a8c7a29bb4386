"""
Configuration loading tests.
"""

import pydantic
import pytest

from config import (
    AppConfig,
    IngestConfig,
    StorageBackend,
    StorageConfig,
    debug_config,
    get_config,
    reset_config,
)
from exceptions import ConfigurationError
from infrastructure.document_store import InMemoryDocumentStore
from infrastructure.factory import RepositoryFactory


class TestDefaults:

    def test_defaults_without_environment(self, clean_env):
        config = AppConfig.from_environment()
        assert config.storage.backend == StorageBackend.MEMORY
        assert config.storage.container == "farm-data"
        assert config.ingest.max_upload_bytes == 50 * 1024 * 1024
        assert config.ingest.raster_max_width == 1000
        assert config.ingest.projected_crs == "EPSG:2154"
        assert config.revisions.block_revision_cap == 100
        assert config.revisions.dataset_revision_cap == 50
        assert config.is_development


class TestEnvironment:

    def test_overrides(self, clean_env):
        clean_env.setenv("STORAGE_BACKEND", "AZURE")
        clean_env.setenv("STORAGE_ACCOUNT_NAME", "farmstore")
        clean_env.setenv("INGEST_MAX_UPLOAD_MB", "5")
        clean_env.setenv("BLOCK_REVISION_CAP", "10")
        clean_env.setenv("ENVIRONMENT", "prod")

        config = AppConfig.from_environment()
        assert config.storage.backend == StorageBackend.AZURE
        assert config.storage.account_url == "https://farmstore.blob.core.windows.net"
        assert config.ingest.max_upload_mb == 5
        assert config.revisions.block_revision_cap == 10
        assert not config.is_development

    def test_debug_mode_flag(self, clean_env):
        clean_env.setenv("ENVIRONMENT", "prod")
        clean_env.setenv("DEBUG_MODE", "true")
        assert AppConfig.from_environment().is_development

    def test_unknown_backend_rejected(self, clean_env):
        clean_env.setenv("STORAGE_BACKEND", "s3")
        with pytest.raises(ValueError):
            StorageConfig.from_environment()

    @pytest.mark.parametrize("container", ["ab", "Farm-Data"])
    def test_container_name_rules(self, container):
        with pytest.raises(pydantic.ValidationError):
            StorageConfig(container=container)

    def test_ingest_bounds(self):
        with pytest.raises(pydantic.ValidationError):
            IngestConfig(raster_jpeg_quality=101)


class TestSingleton:

    def test_get_config_is_cached_until_reset(self, clean_env):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_debug_config_masks_connection_string(self, clean_env):
        clean_env.setenv("STORAGE_CONNECTION_STRING", "AccountKey=secret")
        info = debug_config()
        assert info["storage"]["connection_string"] == "***MASKED***"
        assert "secret" not in repr(info)


class TestStoreFactory:

    def test_memory_backend(self):
        store = RepositoryFactory.create_document_store(StorageConfig())
        assert isinstance(store, InMemoryDocumentStore)

    def test_azure_backend_requires_credentials(self):
        with pytest.raises(ConfigurationError):
            RepositoryFactory.create_document_store(StorageConfig(backend=StorageBackend.AZURE))
