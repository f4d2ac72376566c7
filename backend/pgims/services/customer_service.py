# Overview: Customer balance ledger; deposits and withdrawals against one locked customer row.

from __future__ import annotations

from flask import current_app

from .. import money
from ..errors import CreditLimitExceeded, NotFound, ValidationError
from ..extensions import db
from ..models import Customer
from ..permissions import authorize
from .concurrency import begin_exclusive, lock_for_update, run_with_retry


def _require_positive_amount(amount_cents) -> int:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise ValidationError("amount must be a whole number of cents", field="amount")
    if amount_cents <= 0:
        raise ValidationError("amount must be greater than 0", field="amount")
    return amount_cents


def _locked_customer(customer_id: int) -> Customer:
    begin_exclusive()
    customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
    if customer is None:
        raise NotFound("Customer", customer_id)
    return customer


def deposit(customer_id: int, amount_cents: int, *, role: str | None = None) -> Customer:
    """
    Add `amount_cents` to the customer's balance.

    Only the customer's own row is locked, so this never waits on order or
    requisition locks.
    """
    if role is not None:
        authorize("DEPOSIT_BALANCE", role)
    amount_cents = _require_positive_amount(amount_cents)

    def _op():
        customer = _locked_customer(customer_id)
        customer.balance_cents = money.add(customer.balance_cents, amount_cents)
        db.session.commit()
        current_app.logger.info(
            "Deposit %s to customer %s, balance now %s",
            money.format_cents(amount_cents),
            customer_id,
            money.format_cents(customer.balance_cents),
        )
        return customer

    return run_with_retry(_op)


def withdraw(customer_id: int, amount_cents: int, *, role: str | None = None) -> Customer:
    """
    Take `amount_cents` from the balance.

    The balance may go negative but never below -credit_limit_cents.
    """
    if role is not None:
        authorize("DEPOSIT_BALANCE", role)
    amount_cents = _require_positive_amount(amount_cents)

    def _op():
        customer = _locked_customer(customer_id)
        new_balance = money.add(customer.balance_cents, -amount_cents)
        if new_balance < -customer.credit_limit_cents:
            raise CreditLimitExceeded(
                customer_id,
                customer.balance_cents,
                amount_cents,
                customer.credit_limit_cents,
            )
        customer.balance_cents = new_balance
        db.session.commit()
        current_app.logger.info(
            "Withdrawal %s from customer %s, balance now %s",
            money.format_cents(amount_cents),
            customer_id,
            money.format_cents(customer.balance_cents),
        )
        return customer

    return run_with_retry(_op)
