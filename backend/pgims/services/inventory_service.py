# Overview: Service-layer operations for stock counters; every stock mutation goes through a lock handle.

# backend/pgims/services/inventory_service.py

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import InsufficientStock, NotFound
from ..extensions import db
from ..models import InventoryRecord, Product, Store
from ..permissions import authorize
from ..validation import require_non_negative_int, require_positive_int
from .concurrency import begin_exclusive, lock_for_update, run_with_retry
"""
Stock invariants (authoritative)

Two kinds of counter exist:
- Product.stock: the quantity the order engine sells from.
- InventoryRecord.quantity: quantity of one product at one store, used by
  requisitions. A missing record means zero on hand.

Rules:
- A counter is only changed through a StockHandle. A handle is obtained by
  locking the row (SELECT ... FOR UPDATE, or BEGIN IMMEDIATE on SQLite) and is
  bound to the session transaction that took the lock.
- Using a handle after that transaction committed or rolled back raises
  HandleExpired.
- No mutation may leave a counter below zero.
- When several counters are locked together they are locked in ascending key
  order (product id, or (store id, product id)), so two transactions never
  wait on each other in opposite orders.

reserve_and_decrement() and increment() run inside the caller's transaction
and never commit. set_quantity(), set_product_stock() and delete_record() are
complete administrative operations and commit on success.
"""


class HandleExpired(RuntimeError):
    """A stock handle was used after the transaction that locked its row ended."""


class StockHandle:
    """
    Exclusive right to change one stock counter for the life of a transaction.

    Subclasses name the counter column via `_counter`.
    """
    _counter = "quantity"

    def __init__(self, row, transaction, *, label: str, product_id: int):
        self._row = row
        self._transaction = transaction
        self.label = label
        self.product_id = product_id

    def _check_live(self) -> None:
        tx = self._transaction
        if tx is None or not tx.is_active or db.session().get_transaction() is not tx:
            raise HandleExpired(f"Stock handle for {self.label} used outside its transaction")

    @property
    def row(self):
        self._check_live()
        return self._row

    @property
    def quantity(self) -> int:
        self._check_live()
        if self._row is None:
            return 0
        return getattr(self._row, self._counter)

    def ensure_row(self):
        """Hook for handles whose row may not exist yet."""
        return self._row

    def decrement(self, quantity: int) -> int:
        """Take `quantity` units. Raises InsufficientStock without touching the counter."""
        available = self.quantity
        if quantity > available:
            raise InsufficientStock(self.label, quantity, available, product_id=self.product_id)
        return self._write(available - quantity)

    def increment(self, quantity: int) -> int:
        return self._write(self.quantity + quantity)

    def set(self, quantity: int) -> int:
        return self._write(quantity)

    def _write(self, new_quantity: int) -> int:
        self._check_live()
        if new_quantity < 0:
            raise InsufficientStock(self.label, -new_quantity, 0, product_id=self.product_id)
        row = self.ensure_row()
        setattr(row, self._counter, new_quantity)
        return new_quantity


class ProductStockHandle(StockHandle):
    _counter = "stock"


class InventoryHandle(StockHandle):
    """Handle on one (store, product) record. The record is created at 0 on first write."""

    def __init__(self, row, transaction, *, label: str, product_id: int, store_id: int):
        super().__init__(row, transaction, label=label, product_id=product_id)
        self.store_id = store_id

    def ensure_row(self):
        if self._row is None:
            self._row = _insert_record(self.store_id, self.product_id)
        return self._row


def _current_transaction():
    begin_exclusive()
    # Autobegin so the handle has a transaction to bind to
    db.session.connection()
    return db.session().get_transaction()


def _insert_record(store_id: int, product_id: int) -> InventoryRecord:
    """
    Create the (store, product) record at zero.

    SQLite writers are already serialized by BEGIN IMMEDIATE. Elsewhere a
    concurrent creator surfaces as a unique violation inside the savepoint;
    the winner's row is then locked instead.
    """
    if db.engine.dialect.name == "sqlite":
        record = InventoryRecord(store_id=store_id, product_id=product_id, quantity=0)
        db.session.add(record)
        return record
    try:
        with db.session.begin_nested():
            record = InventoryRecord(store_id=store_id, product_id=product_id, quantity=0)
            db.session.add(record)
    except IntegrityError:
        record = lock_for_update(
            db.session.query(InventoryRecord).filter_by(store_id=store_id, product_id=product_id)
        ).one()
    return record


def lock_product_stocks(product_ids) -> dict[int, ProductStockHandle]:
    """
    Lock every product's stock row in ascending id order.

    Returns {product_id: handle}. Raises NotFound for the first missing id.
    """
    tx = _current_transaction()
    ordered = sorted(set(product_ids))
    handles: dict[int, ProductStockHandle] = {}
    for product_id in ordered:
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if product is None:
            raise NotFound("Product", product_id)
        handles[product_id] = ProductStockHandle(product, tx, label=product.name, product_id=product_id)
    return handles


def lock_product_stock(product_id: int) -> ProductStockHandle:
    return lock_product_stocks([product_id])[product_id]


def lock_inventories(keys) -> dict[tuple[int, int], InventoryHandle]:
    """
    Lock the inventory records for (store_id, product_id) pairs in canonical order.

    Missing records are not created here; the handle creates one on first
    write. Stores and products must exist.
    """
    tx = _current_transaction()
    ordered = sorted(set(keys))
    handles: dict[tuple[int, int], InventoryHandle] = {}
    for store_id, product_id in ordered:
        if db.session.get(Store, store_id) is None:
            raise NotFound("Store", store_id)
        product = db.session.get(Product, product_id)
        if product is None:
            raise NotFound("Product", product_id)
        record = lock_for_update(
            db.session.query(InventoryRecord).filter_by(store_id=store_id, product_id=product_id)
        ).first()
        handles[(store_id, product_id)] = InventoryHandle(
            record, tx, label=product.name, product_id=product_id, store_id=store_id
        )
    return handles


def lock_inventory(store_id: int, product_id: int) -> InventoryHandle:
    return lock_inventories([(store_id, product_id)])[(store_id, product_id)]


# -- Ledger primitives (caller owns the transaction) --


def get_quantity(store_id: int, product_id: int) -> int:
    """On-hand quantity at a store; 0 when no record exists."""
    record = db.session.query(InventoryRecord).filter_by(store_id=store_id, product_id=product_id).first()
    return record.quantity if record else 0


def reserve_and_decrement(store_id: int, product_id: int, quantity: int) -> int:
    """Take stock at a store inside the current transaction. Returns the new quantity."""
    quantity = require_positive_int(quantity, "quantity")
    return lock_inventory(store_id, product_id).decrement(quantity)


def increment(store_id: int, product_id: int, quantity: int) -> int:
    """Add stock at a store inside the current transaction, creating the record if absent."""
    quantity = require_positive_int(quantity, "quantity")
    return lock_inventory(store_id, product_id).increment(quantity)


# -- Administrative operations (own transaction) --


def set_quantity(store_id: int, product_id: int, quantity: int, *, role: str | None = None) -> InventoryRecord:
    """Overwrite a store's on-hand quantity for a product."""
    if role is not None:
        authorize("MANAGE_INVENTORY", role)
    quantity = require_non_negative_int(quantity, "quantity")

    def _op():
        begin_exclusive()
        handle = lock_inventory(store_id, product_id)
        old = handle.quantity
        handle.set(quantity)
        record = handle.row
        db.session.commit()
        current_app.logger.info(
            "Inventory set store=%s product=%s %s -> %s", store_id, product_id, old, quantity
        )
        return record

    return run_with_retry(_op)


def set_product_stock(product_id: int, quantity: int, *, role: str | None = None) -> Product:
    """Overwrite a product's sellable stock counter."""
    if role is not None:
        authorize("MANAGE_INVENTORY", role)
    quantity = require_non_negative_int(quantity, "stock")

    def _op():
        begin_exclusive()
        handle = lock_product_stock(product_id)
        old = handle.quantity
        handle.set(quantity)
        product = handle.row
        db.session.commit()
        current_app.logger.info("Product stock set product=%s %s -> %s", product_id, old, quantity)
        return product

    return run_with_retry(_op)


def delete_record(store_id: int, product_id: int, *, role: str | None = None) -> None:
    """Remove a (store, product) record; afterwards get_quantity reports 0."""
    if role is not None:
        authorize("MANAGE_INVENTORY", role)

    def _op():
        begin_exclusive()
        handle = lock_inventory(store_id, product_id)
        record = handle.row
        if record is None:
            raise NotFound("InventoryRecord", f"{store_id}/{product_id}")
        db.session.delete(record)
        db.session.commit()
        current_app.logger.info("Inventory record deleted store=%s product=%s", store_id, product_id)

    run_with_retry(_op)


def get_record(store_id: int, product_id: int) -> InventoryRecord:
    record = db.session.query(InventoryRecord).filter_by(store_id=store_id, product_id=product_id).first()
    if record is None:
        raise NotFound("InventoryRecord", f"{store_id}/{product_id}")
    return record


def list_records(*, store_id: int | None = None, product_id: int | None = None) -> list[InventoryRecord]:
    query = db.session.query(InventoryRecord)
    if store_id is not None:
        query = query.filter_by(store_id=store_id)
    if product_id is not None:
        query = query.filter_by(product_id=product_id)
    return query.order_by(InventoryRecord.store_id.asc(), InventoryRecord.product_id.asc()).all()
