# backend/pgims/services/requisition_service.py
"""
Stock requisition engine: request, approve and carry out stock moves between stores.

LIFECYCLE:
1. pending: created, items may be added
2. approved: approver recorded, no stock has moved
3. completed: every item moved from source to destination in one transaction
4. rejected: declined while pending

approve() and complete() are separate steps. If complete() finds any item
short at the source, nothing moves and the requisition stays approved so it
can be completed later.
"""
from __future__ import annotations

from flask import current_app

from ..errors import InvalidStateTransition, NotFound, UniquenessConflict, ValidationError
from ..extensions import db
from ..models import Product, RequisitionItem, StockRequisition, Store, User
from ..models.requisitions import (
    REQUISITION_STATUS_APPROVED,
    REQUISITION_STATUS_COMPLETED,
    REQUISITION_STATUS_PENDING,
    REQUISITION_STATUS_REJECTED,
)
from ..permissions import authorize
from ..time_utils import utcnow
from ..validation import require_positive_int
from .concurrency import begin_exclusive, lock_for_update, run_with_retry
from .inventory_service import lock_inventories


def _normalize_items(items) -> list[tuple[int, int]]:
    if items is None:
        return []
    if not isinstance(items, (list, tuple)):
        raise ValidationError("items must be a list", field="items")
    normalized: list[tuple[int, int]] = []
    seen: set[int] = set()
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{i}] must be an object", field="items")
        product_id = require_positive_int(item.get("product_id"), f"items[{i}].product_id")
        quantity = require_positive_int(item.get("quantity"), f"items[{i}].quantity")
        if product_id in seen:
            raise ValidationError(f"items[{i}]: product {product_id} appears more than once", field="items")
        seen.add(product_id)
        normalized.append((product_id, quantity))
    return normalized


def _locked_requisition(requisition_id: int) -> StockRequisition:
    begin_exclusive()
    requisition = lock_for_update(
        db.session.query(StockRequisition).filter_by(id=requisition_id)
    ).first()
    if requisition is None:
        raise NotFound("StockRequisition", requisition_id)
    return requisition


def _require_status(requisition: StockRequisition, expected: str, target: str) -> None:
    if requisition.status != expected:
        raise InvalidStateTransition(requisition.status, target)


def _require_product(product_id: int) -> None:
    if db.session.get(Product, product_id) is None:
        raise NotFound("Product", product_id)


def create(
    from_store_id: int,
    to_store_id: int,
    items=None,
    *,
    created_by: int | None = None,
    notes: str | None = None,
    role: str | None = None,
) -> StockRequisition:
    """
    Create a pending requisition. No inventory effect.

    Raises:
        ValidationError: same source and destination, or malformed items
        NotFound: missing store or product
    """
    if role is not None:
        authorize("MANAGE_REQUISITIONS", role)
    from_store_id = require_positive_int(from_store_id, "from_store_id")
    to_store_id = require_positive_int(to_store_id, "to_store_id")
    if from_store_id == to_store_id:
        raise ValidationError("from_store_id and to_store_id must differ", field="to_store_id")
    normalized = _normalize_items(items)
    if notes is not None and not isinstance(notes, str):
        raise ValidationError("notes must be a string", field="notes")

    def _op():
        for store_id in (from_store_id, to_store_id):
            if db.session.get(Store, store_id) is None:
                raise NotFound("Store", store_id)
        for product_id, _ in normalized:
            _require_product(product_id)

        requisition = StockRequisition(
            from_store_id=from_store_id,
            to_store_id=to_store_id,
            status=REQUISITION_STATUS_PENDING,
            created_by=created_by,
            notes=notes,
        )
        for product_id, quantity in normalized:
            requisition.items.append(RequisitionItem(product_id=product_id, quantity=quantity))
        db.session.add(requisition)
        db.session.commit()

        current_app.logger.info(
            "Requisition %s created: store %s -> %s, %d items",
            requisition.id, from_store_id, to_store_id, len(normalized),
        )
        return requisition

    return run_with_retry(_op)


def add_item(requisition_id: int, product_id: int, quantity: int, *, role: str | None = None) -> RequisitionItem:
    """Add one product to a pending requisition."""
    if role is not None:
        authorize("MANAGE_REQUISITIONS", role)
    product_id = require_positive_int(product_id, "product_id")
    quantity = require_positive_int(quantity, "quantity")

    def _op():
        requisition = _locked_requisition(requisition_id)
        if requisition.status != REQUISITION_STATUS_PENDING:
            raise InvalidStateTransition(requisition.status, REQUISITION_STATUS_PENDING)
        _require_product(product_id)

        existing = db.session.query(RequisitionItem).filter_by(
            requisition_id=requisition_id,
            product_id=product_id,
        ).first()
        if existing:
            raise UniquenessConflict("product_id", product_id)

        item = RequisitionItem(requisition_id=requisition_id, product_id=product_id, quantity=quantity)
        db.session.add(item)
        db.session.commit()
        return item

    return run_with_retry(_op)


def approve(requisition_id: int, approver_id: int | None, *, role: str | None = None) -> StockRequisition:
    """pending -> approved. Records who approved and when; moves no stock."""
    if role is not None:
        authorize("APPROVE_REQUISITION", role)

    def _op():
        requisition = _locked_requisition(requisition_id)
        _require_status(requisition, REQUISITION_STATUS_PENDING, REQUISITION_STATUS_APPROVED)
        if not requisition.items:
            raise ValidationError("Cannot approve a requisition with no items", field="items")
        if approver_id is not None and db.session.get(User, approver_id) is None:
            raise NotFound("User", approver_id)

        requisition.status = REQUISITION_STATUS_APPROVED
        requisition.approved_by = approver_id
        requisition.approved_at = utcnow()
        db.session.commit()

        current_app.logger.info("Requisition %s approved by user %s", requisition_id, approver_id)
        return requisition

    return run_with_retry(_op)


def complete(requisition_id: int, *, role: str | None = None) -> StockRequisition:
    """
    approved -> completed, moving every item's quantity from source to destination.

    All affected inventory records are locked in canonical (store, product)
    order before the first write. InsufficientStock on any item rolls back
    every move and leaves the requisition approved.
    """
    if role is not None:
        authorize("COMPLETE_REQUISITION", role)

    def _op():
        requisition = _locked_requisition(requisition_id)
        _require_status(requisition, REQUISITION_STATUS_APPROVED, REQUISITION_STATUS_COMPLETED)

        items = list(requisition.items)
        keys = []
        for item in items:
            keys.append((requisition.from_store_id, item.product_id))
            keys.append((requisition.to_store_id, item.product_id))
        handles = lock_inventories(keys)

        for item in items:
            handles[(requisition.from_store_id, item.product_id)].decrement(item.quantity)
            handles[(requisition.to_store_id, item.product_id)].increment(item.quantity)

        requisition.status = REQUISITION_STATUS_COMPLETED
        requisition.completed_at = utcnow()
        db.session.commit()

        current_app.logger.info(
            "Requisition %s completed: %d items moved from store %s to store %s",
            requisition_id, len(items), requisition.from_store_id, requisition.to_store_id,
        )
        return requisition

    return run_with_retry(_op)


def reject(requisition_id: int, *, role: str | None = None) -> StockRequisition:
    """pending -> rejected (terminal)."""
    if role is not None:
        authorize("MANAGE_REQUISITIONS", role)

    def _op():
        requisition = _locked_requisition(requisition_id)
        _require_status(requisition, REQUISITION_STATUS_PENDING, REQUISITION_STATUS_REJECTED)
        requisition.status = REQUISITION_STATUS_REJECTED
        requisition.rejected_at = utcnow()
        db.session.commit()

        current_app.logger.info("Requisition %s rejected", requisition_id)
        return requisition

    return run_with_retry(_op)


def delete(requisition_id: int, *, role: str | None = None) -> None:
    """Delete a requisition and its items. Completed requisitions are kept."""
    if role is not None:
        authorize("MANAGE_REQUISITIONS", role)

    def _op():
        requisition = _locked_requisition(requisition_id)
        if requisition.status == REQUISITION_STATUS_COMPLETED:
            raise InvalidStateTransition(requisition.status, "deleted")
        db.session.delete(requisition)
        db.session.commit()
        current_app.logger.info("Requisition %s deleted", requisition_id)

    run_with_retry(_op)


def get(requisition_id: int) -> StockRequisition:
    requisition = db.session.get(StockRequisition, requisition_id)
    if requisition is None:
        raise NotFound("StockRequisition", requisition_id)
    return requisition


def list_requisitions(*, status: str | None = None, store_id: int | None = None) -> list[StockRequisition]:
    query = db.session.query(StockRequisition)
    if status is not None:
        query = query.filter(StockRequisition.status == status)
    if store_id is not None:
        query = query.filter(
            (StockRequisition.from_store_id == store_id) | (StockRequisition.to_store_id == store_id)
        )
    return query.order_by(StockRequisition.created_at.desc(), StockRequisition.id.desc()).all()
