# backend/pgims/routes/requisitions.py
"""
Stock requisition API routes.
"""
from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import requisition_service


requisitions_bp = Blueprint("requisitions", __name__, url_prefix="/api/stock-requisitions")


@requisitions_bp.get("")
@require_auth
@require_permission("MANAGE_REQUISITIONS")
def list_requisitions():
    """Query params: status, store_id (matches either side)."""
    requisitions = requisition_service.list_requisitions(
        status=request.args.get("status") or None,
        store_id=request.args.get("store_id", type=int),
    )
    return jsonify([r.to_dict(include_items=False) for r in requisitions]), 200


@requisitions_bp.post("")
@require_auth
@require_permission("MANAGE_REQUISITIONS")
def create_requisition():
    """
    Create a pending requisition.

    Request body:
    {
        "from_store_id": int,
        "to_store_id": int,
        "items": [{"product_id": int, "quantity": int}, ...] (optional),
        "notes": str (optional)
    }

    Returns:
        201: Requisition created
        400: Invalid request (including same source and destination)
        404: Store or product not found
    """
    data = request.get_json(silent=True) or {}

    requisition = requisition_service.create(
        data.get("from_store_id"),
        data.get("to_store_id"),
        data.get("items"),
        created_by=g.current_user.id,
        notes=data.get("notes"),
    )
    return jsonify(requisition.to_dict()), 201


@requisitions_bp.get("/<int:requisition_id>")
@require_auth
@require_permission("MANAGE_REQUISITIONS")
def get_requisition(requisition_id: int):
    return jsonify(requisition_service.get(requisition_id).to_dict()), 200


@requisitions_bp.delete("/<int:requisition_id>")
@require_auth
@require_permission("MANAGE_REQUISITIONS")
def delete_requisition(requisition_id: int):
    requisition_service.delete(requisition_id)
    return jsonify({"ok": True}), 200


@requisitions_bp.post("/<int:requisition_id>/items")
@require_auth
@require_permission("MANAGE_REQUISITIONS")
def add_requisition_item(requisition_id: int):
    """
    Request body:
    {
        "product_id": int,
        "quantity": int
    }
    """
    data = request.get_json(silent=True) or {}
    item = requisition_service.add_item(requisition_id, data.get("product_id"), data.get("quantity"))
    return jsonify(item.to_dict()), 201


@requisitions_bp.post("/<int:requisition_id>/approve")
@require_auth
@require_permission("APPROVE_REQUISITION")
def approve_requisition(requisition_id: int):
    requisition = requisition_service.approve(requisition_id, g.current_user.id)
    return jsonify(requisition.to_dict()), 200


@requisitions_bp.post("/<int:requisition_id>/complete")
@require_auth
@require_permission("COMPLETE_REQUISITION")
def complete_requisition(requisition_id: int):
    """
    Move stock for an approved requisition.

    Returns:
        200: Completed
        409: Wrong status, or insufficient stock at the source (requisition stays approved)
    """
    requisition = requisition_service.complete(requisition_id)
    return jsonify(requisition.to_dict()), 200


@requisitions_bp.post("/<int:requisition_id>/reject")
@require_auth
@require_permission("MANAGE_REQUISITIONS")
def reject_requisition(requisition_id: int):
    requisition = requisition_service.reject(requisition_id)
    return jsonify(requisition.to_dict()), 200
