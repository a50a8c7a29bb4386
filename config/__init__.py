# ============================================================================
# CONFIG PACKAGE INIT
# ============================================================================
# STATUS: Shared - configuration entry point
# PURPOSE: Configuration package exports, singleton accessor and debug view
# EXPORTS: All config classes, get_config singleton, reset_config, debug_config helper
# DEPENDENCIES: pydantic, domain config modules
# ============================================================================

"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── storage_config.py        # Document store backend
    ├── ingest_config.py         # Upload / raster / CSV projection settings
    ├── revision_config.py       # Revision log caps
    └── defaults.py              # Default values

Usage:
    from config import get_config
    config = get_config()
    cap = config.revisions.block_revision_cap

    from config import debug_config
    info = debug_config()  # Secrets masked
"""

from typing import Optional

from .storage_config import StorageBackend, StorageConfig
from .ingest_config import IngestConfig
from .revision_config import RevisionConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, secrets masked
    """
    try:
        config = get_config()
        return {
            'storage': config.storage.debug_dict(),
            'ingest': {
                'max_upload_mb': config.ingest.max_upload_mb,
                'raster_max_width': config.ingest.raster_max_width,
                'raster_jpeg_quality': config.ingest.raster_jpeg_quality,
                'projected_crs': config.ingest.projected_crs,
            },
            'revisions': {
                'block_revision_cap': config.revisions.block_revision_cap,
                'dataset_revision_cap': config.revisions.dataset_revision_cap,
            },
            'debug_mode': config.debug_mode,
            'environment': config.environment,
            'log_level': config.log_level,
        }
    except Exception as e:
        return {'error': f'Failed to load configuration: {e}'}


__all__ = [
    'StorageBackend',
    'StorageConfig',
    'IngestConfig',
    'RevisionConfig',
    'AppConfig',
    'get_config',
    'reset_config',
    'debug_config',
]
