"""
Inventory ledger tests.

Verifies:
- Missing (store, product) records read as 0
- increment creates the record on first use
- A failed decrement leaves the counter untouched
- Stock handles refuse use after their transaction ends
- Administrative edits go through the same handles
"""

import pytest

from pgims.errors import InsufficientStock, NotFound, PermissionDenied, ValidationError
from pgims.models import InventoryRecord
from pgims.services import inventory_service
from pgims.services.inventory_service import HandleExpired


class TestLedgerPrimitives:

    def test_get_quantity_without_record_is_zero(self, store_a, product_x):
        assert inventory_service.get_quantity(store_a.id, product_x.id) == 0

    def test_increment_creates_record(self, db_session, store_a, product_x):
        assert inventory_service.increment(store_a.id, product_x.id, 5) == 5
        db_session.commit()

        record = db_session.query(InventoryRecord).filter_by(store_id=store_a.id, product_id=product_x.id).one()
        assert record.quantity == 5
        assert inventory_service.get_quantity(store_a.id, product_x.id) == 5

    def test_increment_then_decrement(self, db_session, store_a, product_x):
        inventory_service.increment(store_a.id, product_x.id, 8)
        db_session.commit()

        assert inventory_service.reserve_and_decrement(store_a.id, product_x.id, 3) == 5
        db_session.commit()
        assert inventory_service.get_quantity(store_a.id, product_x.id) == 5

    def test_insufficient_decrement_changes_nothing(self, db_session, store_a, product_x):
        inventory_service.increment(store_a.id, product_x.id, 2)
        db_session.commit()

        with pytest.raises(InsufficientStock) as exc:
            inventory_service.reserve_and_decrement(store_a.id, product_x.id, 3)
        db_session.rollback()

        assert exc.value.requested == 3
        assert exc.value.available == 2
        assert exc.value.product == "Product X"
        assert inventory_service.get_quantity(store_a.id, product_x.id) == 2

    def test_decrement_without_record_is_insufficient(self, db_session, store_a, product_x):
        with pytest.raises(InsufficientStock):
            inventory_service.reserve_and_decrement(store_a.id, product_x.id, 1)
        db_session.rollback()
        assert db_session.query(InventoryRecord).count() == 0

    @pytest.mark.parametrize("quantity", [0, -1, "two", "²", 1.5, None])
    def test_rejects_non_positive_quantities(self, store_a, product_x, quantity):
        with pytest.raises(ValidationError):
            inventory_service.increment(store_a.id, product_x.id, quantity)

    def test_unknown_store_or_product(self, db_session, store_a, product_x):
        with pytest.raises(NotFound):
            inventory_service.increment(store_a.id + 999, product_x.id, 1)
        db_session.rollback()
        with pytest.raises(NotFound):
            inventory_service.increment(store_a.id, product_x.id + 999, 1)
        db_session.rollback()


class TestStockHandles:

    def test_handle_expires_after_commit(self, db_session, product_x):
        handle = inventory_service.lock_product_stock(product_x.id)
        assert handle.quantity == 10
        db_session.commit()

        with pytest.raises(HandleExpired):
            handle.decrement(1)

    def test_handle_expires_after_rollback(self, db_session, store_a, product_x):
        handle = inventory_service.lock_inventory(store_a.id, product_x.id)
        db_session.rollback()

        with pytest.raises(HandleExpired):
            handle.increment(1)

    def test_handles_are_keyed_by_product(self, db_session, product_x, product_y):
        handles = inventory_service.lock_product_stocks([product_y.id, product_x.id, product_y.id])
        assert sorted(handles) == sorted([product_x.id, product_y.id])
        assert handles[product_x.id].quantity == 10
        db_session.rollback()

    def test_handle_never_goes_negative(self, db_session, product_x):
        handle = inventory_service.lock_product_stock(product_x.id)
        with pytest.raises(InsufficientStock):
            handle.decrement(11)
        assert handle.quantity == 10
        db_session.rollback()


class TestAdministrativeEdits:

    def test_set_quantity(self, store_a, product_x):
        record = inventory_service.set_quantity(store_a.id, product_x.id, 12)
        assert record.quantity == 12
        assert inventory_service.get_quantity(store_a.id, product_x.id) == 12

        inventory_service.set_quantity(store_a.id, product_x.id, 0)
        assert inventory_service.get_quantity(store_a.id, product_x.id) == 0

    def test_set_quantity_rejects_negative(self, store_a, product_x):
        with pytest.raises(ValidationError):
            inventory_service.set_quantity(store_a.id, product_x.id, -1)

    def test_set_product_stock(self, product_x):
        product = inventory_service.set_product_stock(product_x.id, 3)
        assert product.stock == 3

    def test_delete_record(self, store_a, product_x):
        inventory_service.set_quantity(store_a.id, product_x.id, 4)
        inventory_service.delete_record(store_a.id, product_x.id)
        assert inventory_service.get_quantity(store_a.id, product_x.id) == 0

        with pytest.raises(NotFound):
            inventory_service.delete_record(store_a.id, product_x.id)

    def test_role_check(self, store_a, product_x):
        with pytest.raises(PermissionDenied):
            inventory_service.set_quantity(store_a.id, product_x.id, 1, role="cashier")
        assert inventory_service.get_quantity(store_a.id, product_x.id) == 0
