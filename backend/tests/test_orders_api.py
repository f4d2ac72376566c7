"""
Order API tests.
"""

from pgims.models import Product


class TestOrdersApi:

    def test_place_order(self, client, db_session, manager_headers, customer, product_x, product_y):
        resp = client.post(
            "/api/orders",
            json={
                "customer_id": customer.id,
                "items": [
                    {"product_id": product_x.id, "quantity": 3},
                    {"product_id": product_y.id, "quantity": 4},
                ],
                "notes": "counter sale",
            },
            headers=manager_headers,
        )

        assert resp.status_code == 201
        body = resp.json
        assert body["total_cents"] == 4000
        assert body["total_amount"] == "40.00"
        assert body["status"] == "completed"
        assert body["customer"]["id"] == customer.id
        assert [i["quantity"] for i in body["items"]] == [3, 4]

    def test_insufficient_stock_is_409(self, client, db_session, manager_headers, product_x):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": product_x.id, "quantity": 11}]},
            headers=manager_headers,
        )

        assert resp.status_code == 409
        assert resp.json["error"] == "insufficient_stock"
        assert resp.json["product"] == "Product X"
        assert resp.json["requested"] == 11
        assert resp.json["available"] == 10
        db_session.expire_all()
        assert db_session.get(Product, product_x.id).stock == 10

    def test_empty_items_is_400(self, client, db_session, manager_headers):
        resp = client.post("/api/orders", json={"items": []}, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "validation_error"

    def test_unknown_customer_is_404(self, client, manager_headers, product_x):
        resp = client.post(
            "/api/orders",
            json={"customer_id": 999999, "items": [{"product_id": product_x.id, "quantity": 1}]},
            headers=manager_headers,
        )
        assert resp.status_code == 404
        assert resp.json["entity_type"] == "Customer"

    def test_edit_and_delete(self, client, db_session, manager_headers, product_x):
        created = client.post(
            "/api/orders",
            json={"items": [{"product_id": product_x.id, "quantity": 2}]},
            headers=manager_headers,
        ).json

        resp = client.put(
            f"/api/orders/{created['id']}",
            json={"items": [{"product_id": product_x.id, "quantity": 5}], "status": "processing"},
            headers=manager_headers,
        )
        assert resp.status_code == 200
        assert resp.json["total_cents"] == 5000
        assert resp.json["status"] == "processing"

        listed = client.get("/api/orders", headers=manager_headers).json
        assert [o["id"] for o in listed] == [created["id"]]

        assert client.delete(f"/api/orders/{created['id']}", headers=manager_headers).status_code == 200
        assert client.get(f"/api/orders/{created['id']}", headers=manager_headers).status_code == 404

        db_session.expire_all()
        assert db_session.get(Product, product_x.id).stock == 10

    def test_customer_delete_keeps_orders(self, client, db_session, manager_headers, customer, product_x):
        created = client.post(
            "/api/orders",
            json={"customer_id": customer.id, "items": [{"product_id": product_x.id, "quantity": 1}]},
            headers=manager_headers,
        ).json

        assert client.delete(f"/api/customers/{customer.id}", headers=manager_headers).status_code == 200
        order = client.get(f"/api/orders/{created['id']}", headers=manager_headers).json
        assert order["customer_id"] is None

    def test_product_with_orders_cannot_be_deleted(self, client, manager_headers, product_x):
        client.post(
            "/api/orders",
            json={"items": [{"product_id": product_x.id, "quantity": 1}]},
            headers=manager_headers,
        )
        resp = client.delete(f"/api/products/{product_x.id}", headers=manager_headers)
        assert resp.status_code == 409
        assert resp.json["error"] == "in_use"

    def test_non_ascii_digit_quantity_is_400(self, client, db_session, manager_headers, product_x):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": product_x.id, "quantity": "²"}]},
            headers=manager_headers,
        )

        assert resp.status_code == 400
        assert resp.json["error"] == "validation_error"
        assert db_session.get(Product, product_x.id).stock == 10
