"""
Uniform CRUD tests for the boilerplate resources.
"""

import pytest

from pgims.errors import UniquenessConflict, ValidationError
from pgims.models import Product, Store
from pgims.services import resource_service


class TestProducts:

    def test_create_list_update_delete(self, client, manager_headers):
        resp = client.post(
            "/api/products",
            json={"sku": "SKU-1", "name": "Widget", "price_cents": 1250, "stock": 5},
            headers=manager_headers,
        )
        assert resp.status_code == 201
        product_id = resp.json["id"]
        assert resp.json["price"] == "12.50"
        assert resp.json["stock"] == 5

        listed = client.get("/api/products", headers=manager_headers).json
        assert [p["sku"] for p in listed] == ["SKU-1"]

        resp = client.put(f"/api/products/{product_id}", json={"price_cents": 1300}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json["price"] == "13.00"

        assert client.delete(f"/api/products/{product_id}", headers=manager_headers).status_code == 200
        assert client.get(f"/api/products/{product_id}", headers=manager_headers).status_code == 404

    def test_duplicate_sku(self, client, manager_headers, product_x):
        resp = client.post(
            "/api/products",
            json={"sku": product_x.sku, "name": "Clone", "price_cents": 1},
            headers=manager_headers,
        )
        assert resp.status_code == 409
        assert resp.json["field"] == "sku"

    @pytest.mark.parametrize(
        "payload,field",
        [
            ({"name": "No price"}, "price_cents"),
            ({"name": "Negative", "price_cents": -1}, "price_cents"),
            ({"name": "Float", "price_cents": 12.5}, "price_cents"),
            ({"name": "Huge", "price_cents": 1_000_000_000}, "price_cents"),
            ({"name": "Sneaky", "price_cents": 1, "version_id": 9}, "version_id"),
        ],
    )
    def test_validation(self, client, manager_headers, payload, field):
        resp = client.post("/api/products", json=payload, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.json["field"] == field


class TestStoresAndSuppliers:

    def test_store_crud(self, client, manager_headers):
        resp = client.post("/api/stores", json={"name": "Airport", "code": "AIR"}, headers=manager_headers)
        assert resp.status_code == 201
        store_id = resp.json["id"]

        resp = client.patch(f"/api/stores/{store_id}", json={"phone": "555-0101"}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json["phone"] == "555-0101"

    def test_suppliers_are_admin_only(self, client, manager_headers, admin_headers):
        assert client.post("/api/suppliers", json={"name": "Acme"}, headers=manager_headers).status_code == 403
        assert client.post("/api/suppliers", json={"name": "Acme"}, headers=admin_headers).status_code == 201


class TestFinanceAndPurchasing:

    def test_transaction_requires_existing_account(self, client, headers_for):
        headers = headers_for("finance")
        account = client.post(
            "/api/bank-accounts",
            json={"bank_name": "First Bank", "account_number": "ACC-9", "account_name": "Ops"},
            headers=headers,
        ).json

        cashier = headers_for("cashier")
        resp = client.post(
            "/api/transactions",
            json={
                "bank_account_id": account["id"],
                "type": "credit",
                "amount_cents": 5000,
                "transaction_date": "2026-01-15",
            },
            headers=cashier,
        )
        assert resp.status_code == 201
        assert resp.json["transaction_date"] == "2026-01-15"

        resp = client.post(
            "/api/transactions",
            json={"bank_account_id": 999999, "type": "credit", "amount_cents": 5000, "transaction_date": "2026-01-15"},
            headers=cashier,
        )
        assert resp.status_code == 404

    def test_duplicate_account_number(self, client, headers_for):
        headers = headers_for("finance")
        body = {"bank_name": "First Bank", "account_number": "ACC-1", "account_name": "Ops"}
        assert client.post("/api/bank-accounts", json=body, headers=headers).status_code == 201
        assert client.post("/api/bank-accounts", json=body, headers=headers).status_code == 409

    def test_purchase_order(self, client, admin_headers, manager_headers):
        supplier = client.post("/api/suppliers", json={"name": "Acme"}, headers=admin_headers).json

        resp = client.post(
            "/api/purchase-orders",
            json={
                "supplier_id": supplier["id"],
                "order_number": "PO-0001",
                "order_date": "2026-02-01",
                "total_cents": 150000,
            },
            headers=manager_headers,
        )
        assert resp.status_code == 201
        assert resp.json["status"] == "pending"

        resp = client.put(
            f"/api/purchase-orders/{resp.json['id']}",
            json={"status": "teleported"},
            headers=manager_headers,
        )
        assert resp.status_code == 400


class TestUsers:

    def test_admin_creates_user(self, client, admin_headers):
        resp = client.post(
            "/api/users",
            json={"name": "Cash Ier", "email": "Till@PGIMS.test", "password": "Password123!", "role": "cashier"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json["email"] == "till@pgims.test"
        assert "password_hash" not in resp.json

    def test_unknown_role(self, client, admin_headers):
        resp = client.post(
            "/api/users",
            json={"name": "X", "email": "x@pgims.test", "password": "Password123!", "role": "overlord"},
            headers=admin_headers,
        )
        assert resp.status_code == 400


class TestDatabaseConstraintFallback:
    """Constraint failures that get past validation still map to typed errors."""

    def test_unique_index_maps_to_uniqueness_conflict(self, db_session, monkeypatch, store_a):
        monkeypatch.setattr(resource_service, "enforce_unique", lambda *args, **kwargs: None)

        with pytest.raises(UniquenessConflict) as exc:
            resource_service.create_item(resource_service.STORES, {"name": "Copy", "code": store_a.code})

        assert exc.value.field == "code"
        assert exc.value.value == store_a.code
        assert db_session.query(Store).count() == 1

    def test_check_constraint_is_not_a_uniqueness_conflict(self, db_session, monkeypatch):
        monkeypatch.setattr(
            resource_service, "validate_payload", lambda model, payload, policy, partial: dict(payload)
        )

        with pytest.raises(ValidationError) as exc:
            resource_service.create_item(resource_service.PRODUCTS, {"name": "Bad", "price_cents": -1})

        assert not isinstance(exc.value, UniquenessConflict)
        assert db_session.query(Product).count() == 0
