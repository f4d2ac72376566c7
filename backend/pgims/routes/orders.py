# Overview: Flask API routes for orders; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..services import order_service


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
@require_permission("MANAGE_ORDERS")
def list_orders():
    """Query params: customer_id, status."""
    orders = order_service.list_orders(
        customer_id=request.args.get("customer_id", type=int),
        status=request.args.get("status") or None,
    )
    return jsonify([o.to_dict(include_lines=False) for o in orders]), 200


@orders_bp.post("")
@require_auth
@require_permission("PLACE_ORDER")
def place_order():
    """
    Place an order.

    Request body:
    {
        "customer_id": int | null,
        "items": [{"product_id": int, "quantity": int}, ...],
        "notes": str (optional)
    }

    Returns:
        201: Order with lines and customer
        400: Invalid request
        404: Customer or product not found
        409: Insufficient stock
        503: Concurrent update conflict (retry)
    """
    data = request.get_json(silent=True) or {}

    order = order_service.place_order(
        data.get("customer_id"),
        data.get("items"),
        notes=data.get("notes"),
    )
    return jsonify(order.to_dict()), 201


@orders_bp.get("/<int:order_id>")
@require_auth
@require_permission("MANAGE_ORDERS")
def get_order(order_id: int):
    return jsonify(order_service.get_order(order_id).to_dict()), 200


@orders_bp.put("/<int:order_id>")
@require_auth
@require_permission("MANAGE_ORDERS")
def update_order(order_id: int):
    """
    Edit an order. Any of customer_id, status, notes, items may be sent;
    sending items replaces every line and re-prices the order.
    """
    data = request.get_json(silent=True) or {}

    kwargs = {}
    if "customer_id" in data:
        kwargs["customer_id"] = data["customer_id"]
    if "notes" in data:
        kwargs["notes"] = data["notes"]
    if data.get("status") is not None:
        kwargs["status"] = data["status"]
    if "items" in data:
        kwargs["lines"] = data["items"]

    order = order_service.update_order(order_id, **kwargs)
    return jsonify(order.to_dict()), 200


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_permission("MANAGE_ORDERS")
def delete_order(order_id: int):
    order_service.delete_order(order_id)
    return jsonify({"ok": True}), 200
