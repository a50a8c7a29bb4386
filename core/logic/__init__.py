"""
Core Business Logic Package.

Contains business logic that operates on pure data models.
Separated from models to maintain clean architecture.

Exports:
    Access: resolve_access, require_read, require_write, require_owner, normalize_role
    State transitions: can_dataset_transition, validate_dataset_transition, is_dataset_terminal
    Calculations: geodesic_area, total_block_area
"""

# Access resolution
from .access import (
    FARM_ACCESS_DENIED_MESSAGE,
    FarmAccess,
    normalize_role,
    collect_roles,
    resolve_access,
    require_read,
    require_write,
    require_owner
)

# State transitions
from .transitions import (
    can_dataset_transition,
    get_dataset_terminal_states,
    get_dataset_active_states,
    is_dataset_terminal,
    validate_dataset_transition
)

# Calculations
from .calculations import (
    geodesic_area,
    total_block_area
)

__all__ = [
    # Access
    'FARM_ACCESS_DENIED_MESSAGE',
    'FarmAccess',
    'normalize_role',
    'collect_roles',
    'resolve_access',
    'require_read',
    'require_write',
    'require_owner',

    # State transitions
    'can_dataset_transition',
    'get_dataset_terminal_states',
    'get_dataset_active_states',
    'is_dataset_terminal',
    'validate_dataset_transition',

    # Calculations
    'geodesic_area',
    'total_block_area'
]
