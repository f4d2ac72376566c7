from __future__ import annotations

from ..extensions import db
from pgims.money import format_cents
from pgims.time_utils import to_iso_date, to_utc_z

GENDERS = ("male", "female", "other")


class Customer(db.Model):
    """
    Customer master data plus a running account balance.

    balance_cents may go negative down to -credit_limit_cents; deposits and
    withdrawals are the only writers and both hold the row lock.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.CheckConstraint("credit_limit_cents >= 0", name="ck_customers_credit_limit_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    gender = db.Column(db.String(16), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(255), nullable=True, unique=True)
    address = db.Column(db.Text, nullable=True)
    birthday = db.Column(db.Date, nullable=True)

    balance_cents = db.Column(db.Integer, nullable=False, default=0)
    credit_limit_cents = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "gender": self.gender,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "birthday": to_iso_date(self.birthday),
            "balance_cents": self.balance_cents,
            "balance": format_cents(self.balance_cents),
            "credit_limit_cents": self.credit_limit_cents,
            "credit_limit": format_cents(self.credit_limit_cents),
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
