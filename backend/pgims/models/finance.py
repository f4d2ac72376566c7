from __future__ import annotations

from ..extensions import db
from pgims.money import format_cents
from pgims.time_utils import to_iso_date, to_utc_z

TRANSACTION_TYPE_CREDIT = "credit"
TRANSACTION_TYPE_DEBIT = "debit"
TRANSACTION_TYPES = (TRANSACTION_TYPE_CREDIT, TRANSACTION_TYPE_DEBIT)

PAYMENT_METHODS = ("cash", "bank_transfer", "check", "card", "other")


class BankAccount(db.Model):
    """
    Company bank account.

    balance_cents is recorded as entered; posting a Transaction does not
    move it.
    """
    __tablename__ = "bank_accounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    bank_name = db.Column(db.String(255), nullable=False)
    account_number = db.Column(db.String(64), nullable=False, unique=True)
    account_name = db.Column(db.String(255), nullable=False)
    branch = db.Column(db.String(255), nullable=True)
    account_type = db.Column(db.String(64), nullable=True)
    balance_cents = db.Column(db.Integer, nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "account_name": self.account_name,
            "branch": self.branch,
            "account_type": self.account_type,
            "balance_cents": self.balance_cents,
            "balance": format_cents(self.balance_cents),
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Transaction(db.Model):
    """Money movement recorded against a bank account."""
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_transactions_amount_positive"),
        db.Index("ix_transactions_account_date", "bank_account_id", "transaction_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    bank_account_id = db.Column(
        db.Integer,
        db.ForeignKey("bank_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type = db.Column(db.String(16), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(32), nullable=True)
    reference = db.Column(db.String(128), nullable=True)
    description = db.Column(db.Text, nullable=True)
    transaction_date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    bank_account = db.relationship(
        "BankAccount",
        backref=db.backref("transactions", lazy=True, passive_deletes=True),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bank_account_id": self.bank_account_id,
            "type": self.type,
            "amount_cents": self.amount_cents,
            "amount": format_cents(self.amount_cents),
            "payment_method": self.payment_method,
            "reference": self.reference,
            "description": self.description,
            "transaction_date": to_iso_date(self.transaction_date),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
