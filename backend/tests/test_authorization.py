"""
Authorization tests for PGIMS.

Verifies:
- Unauthenticated requests return 401
- The permission table matches the role groups
- Cashier and finance roles are denied management operations (403)
- Admin and manager roles can perform privileged operations
"""

import pytest

from pgims.errors import PermissionDenied
from pgims.permissions import (
    OPERATION_ROLES,
    Role,
    authorize,
    get_all_permission_codes,
    permissions_for_role,
    role_allows,
)


# =============================================================================
# UNAUTHENTICATED ACCESS — 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/orders"),
            ("POST", "/api/orders"),
            ("GET", "/api/inventory"),
            ("PUT", "/api/products/1/stock"),
            ("GET", "/api/stock-requisitions"),
            ("POST", "/api/customers/1/deposit"),
            ("GET", "/api/notifications"),
            ("GET", "/api/products"),
            ("GET", "/api/stores"),
            ("GET", "/api/users"),
            ("GET", "/api/bank-accounts"),
            ("GET", "/api/auth/me"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token_rejected(self, client, db_session):
        resp = client.get("/api/orders", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401


# =============================================================================
# PERMISSION TABLE
# =============================================================================


class TestPermissionTable:

    def test_every_code_has_roles(self):
        assert set(get_all_permission_codes()) == set(OPERATION_ROLES)

    @pytest.mark.parametrize(
        "operation,allowed",
        [
            ("MANAGE_USERS", {"admin"}),
            ("MANAGE_SUPPLIERS", {"admin"}),
            ("VIEW_PRODUCTS", {"admin", "manager", "cashier", "finance", "user"}),
            ("PLACE_ORDER", {"admin", "manager"}),
            ("COMPLETE_REQUISITION", {"admin", "manager"}),
            ("DEPOSIT_BALANCE", {"admin", "manager", "cashier"}),
            ("MANAGE_NOTIFICATIONS", {"admin", "manager", "cashier"}),
            ("MANAGE_BANK_ACCOUNTS", {"admin", "finance"}),
        ],
    )
    def test_roles_per_operation(self, operation, allowed):
        for role in Role.values():
            assert role_allows(operation, role) is (role in allowed), (operation, role)

    def test_unknown_role_denied(self):
        assert role_allows("VIEW_PRODUCTS", "superuser") is False
        assert role_allows("VIEW_PRODUCTS", None) is False

    def test_authorize_raises(self):
        with pytest.raises(PermissionDenied) as exc:
            authorize("MANAGE_USERS", "manager")
        assert exc.value.operation == "MANAGE_USERS"
        with pytest.raises(ValueError):
            authorize("LAUNCH_ROCKETS", "admin")

    def test_user_role_is_read_only(self):
        assert permissions_for_role("user") == ["VIEW_PRODUCTS"]


# =============================================================================
# CASHIER DENIED HIGH-RISK OPERATIONS — 403
# =============================================================================


class TestCashierDeniedHighRisk:
    """Cashier role cannot perform management operations."""

    def test_cannot_place_order(self, client, cashier_headers, product_x):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": product_x.id, "quantity": 1}]},
            headers=cashier_headers,
        )
        assert resp.status_code == 403
        assert resp.json["error"] == "permission_denied"

    def test_cannot_set_inventory(self, client, cashier_headers, store_a, product_x):
        resp = client.put(
            f"/api/inventory/{store_a.id}/{product_x.id}",
            json={"quantity": 10},
            headers=cashier_headers,
        )
        assert resp.status_code == 403

    def test_cannot_manage_users(self, client, cashier_headers):
        resp = client.post(
            "/api/users",
            json={"name": "x", "email": "x@x.com", "password": "P@ssw0rd123!"},
            headers=cashier_headers,
        )
        assert resp.status_code == 403

    def test_cannot_create_store(self, client, cashier_headers):
        resp = client.post("/api/stores", json={"name": "Evil Store"}, headers=cashier_headers)
        assert resp.status_code == 403

    def test_cannot_approve_requisition(self, client, cashier_headers):
        resp = client.post("/api/stock-requisitions/1/approve", headers=cashier_headers)
        assert resp.status_code == 403

    def test_cannot_view_bank_accounts(self, client, cashier_headers):
        resp = client.get("/api/bank-accounts", headers=cashier_headers)
        assert resp.status_code == 403

    def test_can_deposit(self, client, cashier_headers, customer):
        resp = client.post(
            f"/api/customers/{customer.id}/deposit",
            json={"amount": "1.00"},
            headers=cashier_headers,
        )
        assert resp.status_code == 200

    def test_can_view_products(self, client, cashier_headers, product_x):
        resp = client.get("/api/products", headers=cashier_headers)
        assert resp.status_code == 200


class TestPrivilegedAccess:

    def test_finance_can_manage_bank_accounts(self, client, headers_for):
        headers = headers_for("finance")
        resp = client.post(
            "/api/bank-accounts",
            json={"bank_name": "First Bank", "account_number": "001-22", "account_name": "Operating"},
            headers=headers,
        )
        assert resp.status_code == 201

    def test_manager_cannot_manage_users(self, client, manager_headers):
        resp = client.get("/api/users", headers=manager_headers)
        assert resp.status_code == 403

    def test_admin_can_manage_users(self, client, admin_headers):
        resp = client.get("/api/users", headers=admin_headers)
        assert resp.status_code == 200
