# Overview: Permission category and role constants.

from enum import Enum


class PermissionCategory:
    """Permission categories for grouping and display."""
    CATALOG = "CATALOG"
    INVENTORY = "INVENTORY"
    SALES = "SALES"
    CUSTOMERS = "CUSTOMERS"
    FINANCE = "FINANCE"
    PURCHASING = "PURCHASING"
    USERS = "USERS"
    COMMUNICATIONS = "COMMUNICATIONS"


class Role(str, Enum):
    """Fixed set of staff roles. Stored on User.role as the plain value."""
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"
    FINANCE = "finance"
    USER = "user"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(r.value for r in cls)
