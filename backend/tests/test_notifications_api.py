"""
Notification API tests.
"""

import pytest

from pgims.errors import NotFound, ValidationError
from pgims.services import notification_service


def _payload(kind, target_id, **extra):
    return {
        "type": "low_stock",
        "title": "Stock running low",
        "message": "Reorder soon",
        "notifiable_type": kind,
        "notifiable_id": target_id,
        **extra,
    }


class TestNotificationService:

    def test_target_must_exist(self, db_session):
        with pytest.raises(NotFound):
            notification_service.create_notification(_payload("customer", 424242))

    def test_unknown_kind(self, db_session, store_a):
        with pytest.raises(ValidationError):
            notification_service.create_notification(_payload("warehouse", store_a.id))

    def test_kind_and_id_travel_together(self, db_session, store_a):
        payload = _payload("store", store_a.id)
        del payload["notifiable_id"]
        with pytest.raises(ValidationError):
            notification_service.create_notification(payload)

    def test_resolve_notifiable(self, store_a):
        assert notification_service.resolve_notifiable("store", store_a.id).id == store_a.id


class TestNotificationApi:

    def test_crud_and_read(self, client, cashier_headers, store_a, customer):
        resp = client.post("/api/notifications", json=_payload("store", store_a.id), headers=cashier_headers)
        assert resp.status_code == 201
        notification_id = resp.json["id"]
        assert resp.json["notifiable_type"] == "store"
        assert resp.json["is_read"] is False

        client.post("/api/notifications", json=_payload("customer", customer.id), headers=cashier_headers)

        listed = client.get(
            f"/api/notifications?notifiable_type=store&notifiable_id={store_a.id}",
            headers=cashier_headers,
        ).json
        assert [n["id"] for n in listed] == [notification_id]

        resp = client.post(f"/api/notifications/{notification_id}/read", headers=cashier_headers)
        assert resp.status_code == 200
        assert resp.json["is_read"] is True
        assert resp.json["read_at"] is not None

        unread = client.get("/api/notifications?unread=1", headers=cashier_headers).json
        assert [n["notifiable_type"] for n in unread] == ["customer"]

        resp = client.put(
            f"/api/notifications/{notification_id}",
            json={"title": "Restocked", "notifiable_type": "customer", "notifiable_id": customer.id},
            headers=cashier_headers,
        )
        assert resp.status_code == 200
        assert resp.json["title"] == "Restocked"
        assert resp.json["notifiable_type"] == "customer"

        assert client.delete(f"/api/notifications/{notification_id}", headers=cashier_headers).status_code == 200
        assert client.get(f"/api/notifications/{notification_id}", headers=cashier_headers).status_code == 404

    def test_missing_target_is_404(self, client, cashier_headers):
        resp = client.post("/api/notifications", json=_payload("user", 424242), headers=cashier_headers)
        assert resp.status_code == 404
