"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "STORAGE_BACKEND", "STORAGE_ACCOUNT_NAME", "STORAGE_CONTAINER",
        "STORAGE_CONNECTION_STRING",
        "INGEST_MAX_UPLOAD_MB", "RASTER_MAX_WIDTH", "RASTER_JPEG_QUALITY",
        "INGEST_PROJECTED_X_COLUMN", "INGEST_PROJECTED_Y_COLUMN", "INGEST_PROJECTED_CRS",
        "BLOCK_REVISION_CAP", "DATASET_REVISION_CAP",
        "ENVIRONMENT", "DEBUG_MODE", "LOG_LEVEL",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
