from __future__ import annotations

from ..extensions import db
from pgims.money import format_cents
from pgims.time_utils import to_iso_date, to_utc_z

PO_STATUS_PENDING = "pending"
PO_STATUS_APPROVED = "approved"
PO_STATUS_RECEIVED = "received"
PO_STATUS_CANCELLED = "cancelled"

PO_STATUSES = (PO_STATUS_PENDING, PO_STATUS_APPROVED, PO_STATUS_RECEIVED, PO_STATUS_CANCELLED)


class Supplier(db.Model):
    """Vendor we buy stock from."""
    __tablename__ = "suppliers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    contact_name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact_name": self.contact_name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class PurchaseOrder(db.Model):
    """
    Order placed with a supplier.

    Receiving a purchase order does not touch inventory; stock is adjusted
    explicitly through the inventory endpoints.
    """
    __tablename__ = "purchase_orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, index=True)
    order_number = db.Column(db.String(64), nullable=False, unique=True)
    status = db.Column(db.String(16), nullable=False, default=PO_STATUS_PENDING, index=True)
    total_cents = db.Column(db.Integer, nullable=False, default=0)
    order_date = db.Column(db.Date, nullable=False)
    expected_date = db.Column(db.Date, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    supplier = db.relationship(
        "Supplier",
        backref=db.backref("purchase_orders", lazy=True, passive_deletes=True),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplier_id": self.supplier_id,
            "order_number": self.order_number,
            "status": self.status,
            "total_cents": self.total_cents,
            "total_amount": format_cents(self.total_cents),
            "order_date": to_iso_date(self.order_date),
            "expected_date": to_iso_date(self.expected_date),
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
