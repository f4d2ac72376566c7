"""
Concurrency tests against a file-backed SQLite database.

Two workers race to sell 6 units each from a stock of 10. Writers are
serialized, so exactly one order succeeds and the stock ends at 4.
"""

import threading

import pytest

from pgims import create_app
from pgims.errors import InsufficientStock
from pgims.extensions import db
from pgims.models import Customer, Order, Product
from pgims.services import customer_service, order_service


@pytest.fixture
def race_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'race.sqlite3'}",
        'BCRYPT_ROUNDS': 4,
        'LOCK_TIMEOUT_MS': 10000,
        'LOCK_RETRY_BACKOFF': 0.01,
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def _run_concurrently(app, workers):
    barrier = threading.Barrier(len(workers))
    results = [None] * len(workers)

    def _worker(i, fn):
        with app.app_context():
            barrier.wait()
            try:
                results[i] = fn()
            except Exception as exc:
                results[i] = exc
            finally:
                db.session.remove()

    threads = [threading.Thread(target=_worker, args=(i, fn)) for i, fn in enumerate(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


def test_two_orders_race_for_last_units(race_app):
    with race_app.app_context():
        product = Product(sku="RACE-1", name="Race Product", price_cents=500, stock=10)
        db.session.add(product)
        db.session.commit()
        product_id = product.id

    def _order():
        order = order_service.place_order(None, [{"product_id": product_id, "quantity": 6}])
        return order.id

    results = _run_concurrently(race_app, [_order, _order])

    successes = [r for r in results if isinstance(r, int)]
    failures = [r for r in results if isinstance(r, InsufficientStock)]
    assert len(successes) == 1, results
    assert len(failures) == 1, results
    assert failures[0].available == 4

    with race_app.app_context():
        assert db.session.get(Product, product_id).stock == 4
        assert db.session.query(Order).count() == 1


def test_concurrent_deposits_are_not_lost(race_app):
    with race_app.app_context():
        customer = Customer(name="Race Customer", balance_cents=0)
        db.session.add(customer)
        db.session.commit()
        customer_id = customer.id

    def _deposit():
        return customer_service.deposit(customer_id, 100).balance_cents

    results = _run_concurrently(race_app, [_deposit] * 4)
    assert all(isinstance(r, int) for r in results), results

    with race_app.app_context():
        assert db.session.get(Customer, customer_id).balance_cents == 400
