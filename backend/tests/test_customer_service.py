"""
Customer balance ledger tests.
"""

import pytest

from pgims.errors import CreditLimitExceeded, NotFound, PermissionDenied, ValidationError
from pgims.models import Customer
from pgims.services import customer_service


def _balance(db_session, customer_id: int) -> int:
    db_session.expire_all()
    return db_session.get(Customer, customer_id).balance_cents


class TestDeposit:

    def test_deposit_adds_to_balance(self, db_session, customer):
        updated = customer_service.deposit(customer.id, 50000)
        assert updated.balance_cents == 250000
        assert updated.to_dict()["balance"] == "2500.00"

    @pytest.mark.parametrize("amount", [0, -100, 1.5, "100", None, True])
    def test_rejects_non_positive_or_non_integer(self, db_session, customer, amount):
        with pytest.raises(ValidationError):
            customer_service.deposit(customer.id, amount)
        assert _balance(db_session, customer.id) == 200000

    def test_unknown_customer(self, db_session):
        with pytest.raises(NotFound):
            customer_service.deposit(424242, 100)

    def test_deposits_only_increase(self, db_session, customer):
        seen = [_balance(db_session, customer.id)]
        for amount in (1, 99, 12345):
            customer_service.deposit(customer.id, amount)
            seen.append(_balance(db_session, customer.id))
        assert seen == sorted(seen)
        assert seen[-1] == 200000 + 1 + 99 + 12345

    def test_role_check(self, db_session, customer):
        with pytest.raises(PermissionDenied):
            customer_service.deposit(customer.id, 100, role="finance")
        assert customer_service.deposit(customer.id, 100, role="cashier").balance_cents == 200100


class TestWithdraw:

    def test_withdraw_within_balance(self, customer):
        assert customer_service.withdraw(customer.id, 50000).balance_cents == 150000

    def test_withdraw_into_credit(self, db_session, customer):
        customer.credit_limit_cents = 10000
        db_session.commit()

        assert customer_service.withdraw(customer.id, 210000).balance_cents == -10000

    def test_credit_limit_exceeded(self, db_session, customer):
        customer.credit_limit_cents = 10000
        db_session.commit()

        with pytest.raises(CreditLimitExceeded):
            customer_service.withdraw(customer.id, 210001)
        assert _balance(db_session, customer.id) == 200000
