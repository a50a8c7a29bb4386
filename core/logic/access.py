# ============================================================================
# FARM ACCESS RESOLVER
# ============================================================================
# STATUS: Core - authorization for every farm-scoped operation
# PURPOSE: Resolve read/write capability of a principal on a farm
# EXPORTS: FarmAccess, normalize_role, collect_roles, resolve_access,
#          require_read, require_write, require_owner, FARM_ACCESS_DENIED_MESSAGE
# DEPENDENCIES: core.models, exceptions
# ============================================================================
"""
Farm Access Resolver.

A farm record grants access through four parallel representations, all of
which stay in use by stored data and are OR-ed together:

    1. owner                          -> read + write
    2. collaborators[].role           -> viewer: read, anything else: read + write
    3. users[] (legacy member list)   -> read only
    4. permissions{userId: role}      -> viewer: read, editor/administrator: read + write

Each representation is normalized to a FarmRole; the strongest role wins.

Error semantics:
    require_read  -> NotFoundError (farm invisible to principals without access)
    require_write -> ForbiddenError (farm visible but role insufficient)
"""

from dataclasses import dataclass, field
from typing import List, Optional

from exceptions import ForbiddenError, NotFoundError
from ..models.enums import FarmRole
from ..models.farm import Farm


FARM_ACCESS_DENIED_MESSAGE = "Farm not found or access denied"

# Strongest first; used to pick the effective role
_ROLE_PRECEDENCE = [
    FarmRole.OWNER,
    FarmRole.ADMINISTRATOR,
    FarmRole.EDITOR,
    FarmRole.VIEWER,
    FarmRole.MEMBER,
]

_ROLE_ALIASES = {
    "owner": FarmRole.OWNER,
    "administrator": FarmRole.ADMINISTRATOR,
    "admin": FarmRole.ADMINISTRATOR,
    "editor": FarmRole.EDITOR,
    "viewer": FarmRole.VIEWER,
    "member": FarmRole.MEMBER,
}


@dataclass(frozen=True)
class FarmAccess:
    """Resolved capability of one principal on one farm."""
    has_read: bool
    has_write: bool
    role: Optional[FarmRole] = None
    roles: List[FarmRole] = field(default_factory=list)


def normalize_role(value: Optional[str], default: Optional[FarmRole] = None) -> Optional[FarmRole]:
    """
    Map a stored role string to a FarmRole (case-insensitive).

    Unrecognized non-empty strings resolve to `default`.
    """
    if value is None:
        return None
    if isinstance(value, FarmRole):
        return value
    key = str(value).strip().lower()
    if not key:
        return None
    return _ROLE_ALIASES.get(key, default)


def collect_roles(farm: Farm, principal_id: str) -> List[FarmRole]:
    """Every role the principal holds on the farm, one per matching representation."""
    roles: List[FarmRole] = []

    if farm.owner == principal_id:
        roles.append(FarmRole.OWNER)

    for collaborator in farm.collaborators or []:
        if collaborator.user_id == principal_id:
            # Collaborator roles other than viewer grant write; ownership
            # comes only from farm.owner
            role = normalize_role(collaborator.role, default=FarmRole.EDITOR)
            if role in (None, FarmRole.OWNER, FarmRole.MEMBER):
                role = FarmRole.EDITOR
            roles.append(role)

    for member in farm.users or []:
        if member.id == principal_id:
            roles.append(FarmRole.MEMBER)

    if farm.permissions and principal_id in farm.permissions:
        role = normalize_role(farm.permissions[principal_id], default=FarmRole.VIEWER)
        if role == FarmRole.OWNER:
            role = FarmRole.ADMINISTRATOR
        if role is not None:
            roles.append(role)

    return roles


def resolve_access(farm: Farm, principal_id: str) -> FarmAccess:
    """
    Compute read/write capability as the OR across all representations.

    Args:
        farm: Farm record
        principal_id: Resolved principal id

    Returns:
        FarmAccess with the strongest role held
    """
    roles = collect_roles(farm, principal_id)
    if not roles:
        return FarmAccess(has_read=False, has_write=False)

    effective = min(roles, key=_ROLE_PRECEDENCE.index)
    return FarmAccess(
        has_read=True,
        has_write=any(role.can_write for role in roles),
        role=effective,
        roles=roles,
    )


def require_read(farm: Optional[Farm], principal_id: str) -> FarmAccess:
    """Raise NotFoundError unless the principal can see the farm."""
    if farm is None:
        raise NotFoundError(FARM_ACCESS_DENIED_MESSAGE)
    access = resolve_access(farm, principal_id)
    if not access.has_read:
        raise NotFoundError(FARM_ACCESS_DENIED_MESSAGE, details={'farm_id': farm.id})
    return access


def require_write(farm: Optional[Farm], principal_id: str) -> FarmAccess:
    """Raise NotFoundError without access, ForbiddenError without a writing role."""
    access = require_read(farm, principal_id)
    if not access.has_write:
        raise ForbiddenError(
            "You do not have permission to modify this farm",
            details={'farm_id': farm.id, 'role': access.role.value if access.role else None}
        )
    return access


def require_owner(farm: Optional[Farm], principal_id: str) -> FarmAccess:
    """Farm deletion is restricted to the owner."""
    access = require_read(farm, principal_id)
    if farm.owner != principal_id:
        raise ForbiddenError(
            "Only the farm owner can delete the farm",
            details={'farm_id': farm.id}
        )
    return access
