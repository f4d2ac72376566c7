# Overview: Flask API routes for notifications; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..services import notification_service


notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("")
@require_auth
@require_permission("MANAGE_NOTIFICATIONS")
def list_notifications():
    """Query params: notifiable_type, notifiable_id, unread=1."""
    notifications = notification_service.list_notifications(
        kind=request.args.get("notifiable_type") or None,
        notifiable_id=request.args.get("notifiable_id", type=int),
        unread_only=request.args.get("unread") in ("1", "true"),
    )
    return jsonify([n.to_dict() for n in notifications]), 200


@notifications_bp.post("")
@require_auth
@require_permission("MANAGE_NOTIFICATIONS")
def create_notification():
    """
    Request body:
    {
        "type": str,
        "title": str,
        "message": str,
        "notifiable_type": "user" | "customer" | "store" | "supplier",
        "notifiable_id": int
    }
    """
    notification = notification_service.create_notification(request.get_json(silent=True))
    return jsonify(notification.to_dict()), 201


@notifications_bp.get("/<int:notification_id>")
@require_auth
@require_permission("MANAGE_NOTIFICATIONS")
def get_notification(notification_id: int):
    return jsonify(notification_service.get_notification(notification_id).to_dict()), 200


@notifications_bp.put("/<int:notification_id>")
@require_auth
@require_permission("MANAGE_NOTIFICATIONS")
def update_notification(notification_id: int):
    notification = notification_service.update_notification(notification_id, request.get_json(silent=True))
    return jsonify(notification.to_dict()), 200


@notifications_bp.post("/<int:notification_id>/read")
@require_auth
@require_permission("MANAGE_NOTIFICATIONS")
def mark_read(notification_id: int):
    return jsonify(notification_service.mark_read(notification_id).to_dict()), 200


@notifications_bp.delete("/<int:notification_id>")
@require_auth
@require_permission("MANAGE_NOTIFICATIONS")
def delete_notification(notification_id: int):
    notification_service.delete_notification(notification_id)
    return jsonify({"ok": True}), 200
