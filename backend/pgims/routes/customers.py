# Overview: Flask API routes for customer balances. Customer CRUD lives in routes/resources.py.

from flask import Blueprint, request, jsonify

from .. import money
from ..decorators import require_auth, require_permission
from ..services import customer_service


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


def _amount_cents() -> int:
    data = request.get_json(silent=True) or {}
    return money.to_cents(data.get("amount"), field="amount")


@customers_bp.post("/<int:customer_id>/deposit")
@require_auth
@require_permission("DEPOSIT_BALANCE")
def deposit(customer_id: int):
    """
    Request body:
    {
        "amount": "500.00"  (decimal string or number, > 0)
    }
    """
    customer = customer_service.deposit(customer_id, _amount_cents())
    return jsonify(customer.to_dict()), 200


@customers_bp.post("/<int:customer_id>/withdraw")
@require_auth
@require_permission("DEPOSIT_BALANCE")
def withdraw(customer_id: int):
    """Same body as deposit. 409 when the credit limit would be exceeded."""
    customer = customer_service.withdraw(customer_id, _amount_cents())
    return jsonify(customer.to_dict()), 200
