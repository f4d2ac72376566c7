# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

# backend/pgims/routes/inventory.py
"""
Stock counters.

Quantities are never written through generic CRUD: every write here goes
through inventory_service, which takes the row lock first.
"""
from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..services import inventory_service


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api")


def _quantity_from_body(key: str = "quantity"):
    data = request.get_json(silent=True) or {}
    if key not in data:
        raise ValidationError(f"Missing required fields: {key}", field=key)
    return data[key]


@inventory_bp.get("/inventory")
@require_auth
@require_permission("MANAGE_INVENTORY")
def list_inventory():
    """Query params: store_id, product_id."""
    records = inventory_service.list_records(
        store_id=request.args.get("store_id", type=int),
        product_id=request.args.get("product_id", type=int),
    )
    return jsonify([r.to_dict() for r in records]), 200


@inventory_bp.get("/inventory/<int:store_id>/<int:product_id>")
@require_auth
@require_permission("MANAGE_INVENTORY")
def get_inventory(store_id: int, product_id: int):
    """On-hand quantity; 0 (not 404) when the store never held the product."""
    return jsonify({
        "store_id": store_id,
        "product_id": product_id,
        "quantity": inventory_service.get_quantity(store_id, product_id),
    }), 200


@inventory_bp.put("/inventory/<int:store_id>/<int:product_id>")
@require_auth
@require_permission("MANAGE_INVENTORY")
def set_inventory(store_id: int, product_id: int):
    """
    Request body:
    {
        "quantity": int (>= 0)
    }
    """
    record = inventory_service.set_quantity(store_id, product_id, _quantity_from_body())
    return jsonify(record.to_dict()), 200


@inventory_bp.delete("/inventory/<int:store_id>/<int:product_id>")
@require_auth
@require_permission("MANAGE_INVENTORY")
def delete_inventory(store_id: int, product_id: int):
    inventory_service.delete_record(store_id, product_id)
    return jsonify({"ok": True}), 200


@inventory_bp.put("/products/<int:product_id>/stock")
@require_auth
@require_permission("MANAGE_INVENTORY")
def set_product_stock(product_id: int):
    """
    Request body:
    {
        "stock": int (>= 0)
    }
    """
    product = inventory_service.set_product_stock(product_id, _quantity_from_body("stock"))
    return jsonify(product.to_dict()), 200
