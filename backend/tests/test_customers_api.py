"""
Customer API tests: CRUD plus the balance ledger endpoints.
"""

import pytest


class TestCustomerCrud:

    def test_create_and_update(self, client, db_session, cashier_headers):
        resp = client.post(
            "/api/customers",
            json={"name": "Ada", "email": "ada@example.com", "gender": "female", "birthday": "1990-04-01"},
            headers=cashier_headers,
        )
        assert resp.status_code == 201
        customer_id = resp.json["id"]
        assert resp.json["balance"] == "0.00"
        assert resp.json["birthday"] == "1990-04-01"

        resp = client.put(f"/api/customers/{customer_id}", json={"phone": "555-0100"}, headers=cashier_headers)
        assert resp.status_code == 200
        assert resp.json["phone"] == "555-0100"

    def test_invalid_gender(self, client, db_session, cashier_headers):
        resp = client.post("/api/customers", json={"name": "Bob", "gender": "robot"}, headers=cashier_headers)
        assert resp.status_code == 400
        assert resp.json["field"] == "gender"

    def test_duplicate_email(self, client, cashier_headers, customer):
        resp = client.post(
            "/api/customers",
            json={"name": "Other", "email": customer.email},
            headers=cashier_headers,
        )
        assert resp.status_code == 409

    def test_balance_not_editable_after_create(self, client, cashier_headers, customer):
        resp = client.put(f"/api/customers/{customer.id}", json={"balance_cents": 1}, headers=cashier_headers)
        assert resp.status_code == 400


class TestBalanceEndpoints:

    def test_deposit(self, client, cashier_headers, customer):
        resp = client.post(
            f"/api/customers/{customer.id}/deposit",
            json={"amount": "500.00"},
            headers=cashier_headers,
        )
        assert resp.status_code == 200
        assert resp.json["balance"] == "2500.00"

    @pytest.mark.parametrize("amount", ["0", "-5.00", "abc", None])
    def test_bad_deposit_amount(self, client, cashier_headers, customer, amount):
        resp = client.post(
            f"/api/customers/{customer.id}/deposit",
            json={"amount": amount},
            headers=cashier_headers,
        )
        assert resp.status_code == 400
        balance = client.get(f"/api/customers/{customer.id}", headers=cashier_headers).json["balance"]
        assert balance == "2000.00"

    def test_withdraw_over_credit_limit(self, client, cashier_headers, customer):
        resp = client.post(
            f"/api/customers/{customer.id}/withdraw",
            json={"amount": "2000.01"},
            headers=cashier_headers,
        )
        assert resp.status_code == 409
        assert resp.json["error"] == "credit_limit_exceeded"

    def test_deposit_unknown_customer(self, client, cashier_headers, db_session):
        resp = client.post("/api/customers/999999/deposit", json={"amount": "1.00"}, headers=cashier_headers)
        assert resp.status_code == 404

    def test_opening_balance_cannot_be_negative(self, client, db_session, cashier_headers):
        resp = client.post(
            "/api/customers",
            json={"name": "Neg", "balance_cents": -500000},
            headers=cashier_headers,
        )
        assert resp.status_code == 400
        assert resp.json["field"] == "balance_cents"
        assert client.get("/api/customers", headers=cashier_headers).json == []
