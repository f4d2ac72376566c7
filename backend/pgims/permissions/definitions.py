# Overview: All permission definitions and the role table.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory, Role

ALL_ROLES = frozenset(Role)
ADMIN_ONLY = frozenset({Role.ADMIN})
MANAGEMENT = frozenset({Role.ADMIN, Role.MANAGER})
FRONT_OF_HOUSE = frozenset({Role.ADMIN, Role.MANAGER, Role.CASHIER})
FINANCE_DESK = frozenset({Role.ADMIN, Role.FINANCE})


# -- CATALOG --

CATALOG_PERMISSIONS = [
    ("VIEW_PRODUCTS", "View Products", "List and read products", PermissionCategory.CATALOG),
    ("MANAGE_PRODUCTS", "Manage Products", "Create, edit and delete products", PermissionCategory.CATALOG),
    ("MANAGE_STORES", "Manage Stores", "Create, edit and delete stores", PermissionCategory.CATALOG),
]

# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "MANAGE_INVENTORY",
        "Manage Inventory",
        "Read and set per-store quantities and product stock",
        PermissionCategory.INVENTORY,
    ),
    (
        "MANAGE_REQUISITIONS",
        "Manage Requisitions",
        "Create, edit, reject and delete stock requisitions",
        PermissionCategory.INVENTORY,
    ),
    (
        "APPROVE_REQUISITION",
        "Approve Requisition",
        "Approve a pending stock requisition",
        PermissionCategory.INVENTORY,
    ),
    (
        "COMPLETE_REQUISITION",
        "Complete Requisition",
        "Move stock for an approved requisition",
        PermissionCategory.INVENTORY,
    ),
]

# -- SALES --

SALES_PERMISSIONS = [
    ("PLACE_ORDER", "Place Order", "Create customer orders", PermissionCategory.SALES),
    ("MANAGE_ORDERS", "Manage Orders", "Read, edit and delete orders", PermissionCategory.SALES),
]

# -- CUSTOMERS --

CUSTOMER_PERMISSIONS = [
    ("MANAGE_CUSTOMERS", "Manage Customers", "Create, edit and delete customers", PermissionCategory.CUSTOMERS),
    ("DEPOSIT_BALANCE", "Deposit Balance", "Deposit to or withdraw from customer balances", PermissionCategory.CUSTOMERS),
]

# -- FINANCE --

FINANCE_PERMISSIONS = [
    ("MANAGE_BANK_ACCOUNTS", "Manage Bank Accounts", "Maintain company bank accounts", PermissionCategory.FINANCE),
    ("MANAGE_TRANSACTIONS", "Manage Transactions", "Record bank transactions", PermissionCategory.FINANCE),
]

# -- PURCHASING --

PURCHASING_PERMISSIONS = [
    ("MANAGE_SUPPLIERS", "Manage Suppliers", "Maintain the supplier list", PermissionCategory.PURCHASING),
    ("MANAGE_PURCHASE_ORDERS", "Manage Purchase Orders", "Maintain purchase orders", PermissionCategory.PURCHASING),
]

# -- USERS --

USER_PERMISSIONS = [
    ("MANAGE_USERS", "Manage Users", "Create, edit and deactivate staff accounts", PermissionCategory.USERS),
]

# -- COMMUNICATIONS --

COMMUNICATION_PERMISSIONS = [
    (
        "MANAGE_NOTIFICATIONS",
        "Manage Notifications",
        "Create, read and dismiss notifications",
        PermissionCategory.COMMUNICATIONS,
    ),
]


PERMISSION_DEFINITIONS = (
    CATALOG_PERMISSIONS
    + INVENTORY_PERMISSIONS
    + SALES_PERMISSIONS
    + CUSTOMER_PERMISSIONS
    + FINANCE_PERMISSIONS
    + PURCHASING_PERMISSIONS
    + USER_PERMISSIONS
    + COMMUNICATION_PERMISSIONS
)


# Operation code -> roles allowed to perform it. Every code above must appear here.
OPERATION_ROLES = {
    "MANAGE_USERS": ADMIN_ONLY,
    "MANAGE_SUPPLIERS": ADMIN_ONLY,
    "VIEW_PRODUCTS": ALL_ROLES,
    "MANAGE_PRODUCTS": MANAGEMENT,
    "MANAGE_INVENTORY": MANAGEMENT,
    "PLACE_ORDER": MANAGEMENT,
    "MANAGE_ORDERS": MANAGEMENT,
    "MANAGE_PURCHASE_ORDERS": MANAGEMENT,
    "MANAGE_REQUISITIONS": MANAGEMENT,
    "APPROVE_REQUISITION": MANAGEMENT,
    "COMPLETE_REQUISITION": MANAGEMENT,
    "MANAGE_STORES": MANAGEMENT,
    "MANAGE_CUSTOMERS": FRONT_OF_HOUSE,
    "DEPOSIT_BALANCE": FRONT_OF_HOUSE,
    "MANAGE_TRANSACTIONS": FRONT_OF_HOUSE,
    "MANAGE_NOTIFICATIONS": FRONT_OF_HOUSE,
    "MANAGE_BANK_ACCOUNTS": FINANCE_DESK,
}
