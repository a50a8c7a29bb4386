"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    Farm, FarmLocation, Collaborator, FarmMember, Principal: Farm models
    Block, BlockField, BlockRevision: Block models
    Dataset, DatasetRevision, DatasetFolder, VizSettings: Dataset models
    FarmRole, DatasetStatus, DatasetType, FormatTag: Enums
"""

# Enums
from .enums import (
    FarmRole,
    DatasetStatus,
    DatasetType,
    FormatTag
)

# Base
from .base import DocumentModel, utc_now

# Farm models
from .farm import (
    FarmLocation,
    Collaborator,
    FarmMember,
    Farm,
    Principal
)

# Block models
from .block import (
    BLOCK_GEOMETRY_TYPES,
    BlockField,
    Block,
    BlockRevision
)

# Dataset models
from .dataset import (
    ROOT_FOLDER_ID,
    VizSettings,
    Dataset,
    DatasetRevision,
    DatasetFolder
)

__all__ = [
    'FarmRole',
    'DatasetStatus',
    'DatasetType',
    'FormatTag',
    'DocumentModel',
    'utc_now',
    'FarmLocation',
    'Collaborator',
    'FarmMember',
    'Farm',
    'Principal',
    'BLOCK_GEOMETRY_TYPES',
    'BlockField',
    'Block',
    'BlockRevision',
    'ROOT_FOLDER_ID',
    'VizSettings',
    'Dataset',
    'DatasetRevision',
    'DatasetFolder',
]
