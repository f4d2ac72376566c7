# Overview: Permission system package.
# Re-exports all public APIs for short imports.

from .categories import PermissionCategory, Role
from .definitions import (
    PERMISSION_DEFINITIONS,
    OPERATION_ROLES,
    CATALOG_PERMISSIONS,
    INVENTORY_PERMISSIONS,
    SALES_PERMISSIONS,
    CUSTOMER_PERMISSIONS,
    FINANCE_PERMISSIONS,
    PURCHASING_PERMISSIONS,
    USER_PERMISSIONS,
    COMMUNICATION_PERMISSIONS,
)
from .helpers import (
    authorize,
    get_all_permission_codes,
    get_permission_definition,
    permissions_for_role,
    role_allows,
    validate_permission_code,
)

__all__ = [
    "PermissionCategory",
    "Role",
    "PERMISSION_DEFINITIONS",
    "OPERATION_ROLES",
    "CATALOG_PERMISSIONS",
    "INVENTORY_PERMISSIONS",
    "SALES_PERMISSIONS",
    "CUSTOMER_PERMISSIONS",
    "FINANCE_PERMISSIONS",
    "PURCHASING_PERMISSIONS",
    "USER_PERMISSIONS",
    "COMMUNICATION_PERMISSIONS",
    "authorize",
    "get_all_permission_codes",
    "get_permission_definition",
    "permissions_for_role",
    "role_allows",
    "validate_permission_code",
]
