"""
Order engine: place, edit and delete customer orders.

Placing an order is one atomic unit: the customer check, the stock checks,
the stock decrements and the order with its lines commit together or not at
all. Product stock rows are locked in ascending product id order before any
line is processed.
"""

from __future__ import annotations

from flask import current_app

from .. import money
from ..errors import NotFound, ValidationError
from ..extensions import db
from ..models import Customer, Order, OrderLine
from ..models.orders import ORDER_STATUS_COMPLETED, ORDER_STATUSES
from ..permissions import authorize
from ..validation import require_positive_int
from .concurrency import begin_exclusive, lock_for_update, run_with_retry
from .inventory_service import lock_product_stocks

_UNSET = object()


def normalize_lines(lines) -> list[tuple[int, int]]:
    """
    Validate order lines into [(product_id, quantity), ...] in client order.

    Accepts dicts with product_id and quantity. Raises ValidationError for
    empty input, bad values and repeated products.
    """
    if not isinstance(lines, (list, tuple)) or not lines:
        raise ValidationError("items must be a non-empty list", field="items")

    normalized: list[tuple[int, int]] = []
    seen: set[int] = set()
    for i, line in enumerate(lines):
        if not isinstance(line, dict):
            raise ValidationError(f"items[{i}] must be an object", field="items")
        product_id = require_positive_int(line.get("product_id"), f"items[{i}].product_id")
        quantity = require_positive_int(line.get("quantity"), f"items[{i}].quantity")
        if product_id in seen:
            raise ValidationError(f"items[{i}]: product {product_id} appears more than once", field="items")
        seen.add(product_id)
        normalized.append((product_id, quantity))
    return normalized


def _normalize_notes(notes):
    if notes is None:
        return None
    if not isinstance(notes, str):
        raise ValidationError("notes must be a string", field="notes")
    return notes.strip() or None


def _require_customer(customer_id: int | None) -> None:
    if customer_id is not None and db.session.get(Customer, customer_id) is None:
        raise NotFound("Customer", customer_id)


def _apply_lines(order: Order, lines: list[tuple[int, int]], handles) -> int:
    """Price each line, decrement its stock and attach it. Returns the total in cents."""
    total = 0
    for product_id, quantity in lines:
        handle = handles[product_id]
        product = handle.row
        handle.decrement(quantity)

        line_total = money.multiply(product.price_cents, quantity)
        total = money.add(total, line_total)

        order.lines.append(
            OrderLine(
                product_id=product_id,
                quantity=quantity,
                unit_price_cents=product.price_cents,
                line_total_cents=line_total,
            )
        )
    return total


def place_order(customer_id, lines, *, notes=None, role: str | None = None) -> Order:
    """
    Create a completed order and take its stock.

    Raises ValidationError before any transaction opens. NotFound,
    InsufficientStock and ConcurrencyConflict roll the whole order back.
    """
    if role is not None:
        authorize("PLACE_ORDER", role)
    normalized = normalize_lines(lines)
    if customer_id is not None:
        customer_id = require_positive_int(customer_id, "customer_id")
    notes = _normalize_notes(notes)

    def _op():
        begin_exclusive()
        _require_customer(customer_id)

        handles = lock_product_stocks(pid for pid, _ in normalized)

        order = Order(
            customer_id=customer_id,
            status=ORDER_STATUS_COMPLETED,
            total_cents=0,
            notes=notes,
        )
        db.session.add(order)

        order.total_cents = _apply_lines(order, normalized, handles)
        db.session.commit()

        current_app.logger.info(
            "Order %s placed: %d lines, total %s",
            order.id,
            len(normalized),
            money.format_cents(order.total_cents),
        )
        return order

    return run_with_retry(_op)


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound("Order", order_id)
    return order


def list_orders(*, customer_id: int | None = None, status: str | None = None) -> list[Order]:
    query = db.session.query(Order)
    if customer_id is not None:
        query = query.filter(Order.customer_id == customer_id)
    if status is not None:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def update_order(
    order_id: int,
    *,
    customer_id=_UNSET,
    status: str | None = None,
    notes=_UNSET,
    lines=None,
    role: str | None = None,
) -> Order:
    """
    Edit an order.

    When `lines` is given the old lines' stock is restored, the old lines are
    removed and the new lines are priced and decremented, all in one
    transaction. Omitted fields are left as they are.
    """
    if role is not None:
        authorize("MANAGE_ORDERS", role)
    normalized = normalize_lines(lines) if lines is not None else None
    if customer_id is not _UNSET and customer_id is not None:
        customer_id = require_positive_int(customer_id, "customer_id")
    if status is not None and status not in ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}", field="status")
    if notes is not _UNSET:
        notes = _normalize_notes(notes)

    def _op():
        begin_exclusive()
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if order is None:
            raise NotFound("Order", order_id)

        if customer_id is not _UNSET:
            _require_customer(customer_id)
            order.customer_id = customer_id
        if status is not None:
            order.status = status
        if notes is not _UNSET:
            order.notes = notes

        if normalized is not None:
            old_lines = list(order.lines)
            product_ids = {line.product_id for line in old_lines} | {pid for pid, _ in normalized}
            handles = lock_product_stocks(product_ids)

            for line in old_lines:
                handles[line.product_id].increment(line.quantity)
            order.lines.clear()
            # Old rows must be gone before new rows reuse (order_id, product_id)
            db.session.flush()

            order.total_cents = _apply_lines(order, normalized, handles)

        db.session.commit()
        current_app.logger.info("Order %s updated", order.id)
        return order

    return run_with_retry(_op)


def delete_order(order_id: int, *, role: str | None = None) -> None:
    """Return every line's stock, then delete the order and its lines."""
    if role is not None:
        authorize("MANAGE_ORDERS", role)

    def _op():
        begin_exclusive()
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if order is None:
            raise NotFound("Order", order_id)

        lines = list(order.lines)
        handles = lock_product_stocks(line.product_id for line in lines)
        for line in lines:
            handles[line.product_id].increment(line.quantity)

        db.session.delete(order)
        db.session.commit()
        current_app.logger.info("Order %s deleted, stock restored for %d lines", order_id, len(lines))

    run_with_retry(_op)
