from __future__ import annotations

from ..extensions import db
from pgims.time_utils import to_utc_z

REQUISITION_STATUS_PENDING = "pending"
REQUISITION_STATUS_APPROVED = "approved"
REQUISITION_STATUS_REJECTED = "rejected"
REQUISITION_STATUS_COMPLETED = "completed"


class StockRequisition(db.Model):
    """
    Internal stock-transfer request between two stores.

    LIFECYCLE:
    1. pending: created, items may still be added
    2. approved: manager signed off; no stock has moved yet
    3. completed: stock moved from from_store to to_store (terminal)
    4. rejected: declined while pending (terminal)
    """
    __tablename__ = "stock_requisitions"
    __table_args__ = (
        db.CheckConstraint("from_store_id <> to_store_id", name="ck_requisitions_distinct_stores"),
        db.Index("ix_requisitions_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    from_store_id = db.Column(db.Integer, db.ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    to_store_id = db.Column(db.Integer, db.ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)

    status = db.Column(db.String(16), nullable=False, default=REQUISITION_STATUS_PENDING, index=True)
    notes = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    rejected_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    version_id = db.Column(db.Integer, nullable=False, default=1)

    from_store = db.relationship("Store", foreign_keys=[from_store_id])
    to_store = db.relationship("Store", foreign_keys=[to_store_id])
    creator = db.relationship("User", foreign_keys=[created_by])
    approver = db.relationship("User", foreign_keys=[approved_by])
    items = db.relationship(
        "RequisitionItem",
        back_populates="requisition",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RequisitionItem.id",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self, *, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "from_store_id": self.from_store_id,
            "to_store_id": self.to_store_id,
            "status": self.status,
            "notes": self.notes,
            "created_by": self.created_by,
            "approved_by": self.approved_by,
            "created_at": to_utc_z(self.created_at),
            "approved_at": to_utc_z(self.approved_at) if self.approved_at else None,
            "completed_at": to_utc_z(self.completed_at) if self.completed_at else None,
            "rejected_at": to_utc_z(self.rejected_at) if self.rejected_at else None,
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
            data["from_store"] = self.from_store.to_dict() if self.from_store else None
            data["to_store"] = self.to_store.to_dict() if self.to_store else None
            data["approver"] = self.approver.to_dict() if self.approver else None
        return data


class RequisitionItem(db.Model):
    """One product line on a requisition."""
    __tablename__ = "stock_requisition_items"
    __table_args__ = (
        db.UniqueConstraint("requisition_id", "product_id", name="uq_requisition_items_requisition_product"),
        db.CheckConstraint("quantity >= 1", name="ck_requisition_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    requisition_id = db.Column(
        db.Integer,
        db.ForeignKey("stock_requisitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    requisition = db.relationship("StockRequisition", back_populates="items")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "requisition_id": self.requisition_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "created_at": to_utc_z(self.created_at),
        }
