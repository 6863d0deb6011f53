"""
Role-rights table for the records API.
Fixed at import time; a role missing from the table has no rights.
"""
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping

from ..models.patient import Role

# Permission constants
PERM_GET_USERS = "getUsers"
PERM_MANAGE_USERS = "manageUsers"
PERM_GET_RECORDS = "getRecords"
PERM_MANAGE_RECORDS = "manageRecords"

NO_RIGHTS: FrozenSet[str] = frozenset()

ROLE_RIGHTS: Mapping[str, FrozenSet[str]] = MappingProxyType({
    Role.USER: NO_RIGHTS,
    Role.ADMIN: frozenset({
        PERM_GET_USERS,
        PERM_MANAGE_USERS,
        PERM_GET_RECORDS,
        PERM_MANAGE_RECORDS,
    }),
})


def get_role_rights(role: str) -> FrozenSet[str]:
    return ROLE_RIGHTS.get(role, NO_RIGHTS)


def has_permission(role: str, permission: str) -> bool:
    """Check if a role has a specific permission."""
    return permission in get_role_rights(role)


def has_rights(role: str, required_rights: Iterable[str]) -> bool:
    """True when the role grants every one of ``required_rights``."""
    return get_role_rights(role).issuperset(required_rights)
