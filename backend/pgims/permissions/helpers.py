# Overview: Utility functions for permission lookups and role checks.

from __future__ import annotations

from pgims.errors import PermissionDenied

from .categories import Role
from .definitions import OPERATION_ROLES, PERMISSION_DEFINITIONS


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permission_definition(code):
    """Get full definition for a permission code."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == code:
            return {
                "code": perm[0],
                "name": perm[1],
                "description": perm[2],
                "category": perm[3],
                "roles": sorted(r.value for r in OPERATION_ROLES[code]),
            }
    return None


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in OPERATION_ROLES


def role_allows(operation: str, role: str | None) -> bool:
    """True if `role` may perform `operation`. Unknown roles and codes are denied."""
    if role is None:
        return False
    try:
        role = Role(role)
    except ValueError:
        return False
    return role in OPERATION_ROLES.get(operation, frozenset())


def authorize(operation: str, role: str | None) -> None:
    """Raise PermissionDenied unless `role` may perform `operation`."""
    if not validate_permission_code(operation):
        raise ValueError(f"Unknown operation code: {operation}")
    if not role_allows(operation, role):
        raise PermissionDenied(operation, role.value if isinstance(role, Role) else role)


def permissions_for_role(role: str) -> list[str]:
    """Every operation code the role may perform, sorted."""
    return sorted(code for code in OPERATION_ROLES if role_allows(code, role))
