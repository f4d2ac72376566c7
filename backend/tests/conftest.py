"""
Pytest fixtures for PGIMS backend tests.

Provides test database setup, role-scoped users, catalog fixtures, and test client.
"""

import pytest
from pgims import create_app
from pgims.extensions import db
from pgims.models import Customer, Product, Store
from pgims.services import auth_service, session_service


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'LOCK_RETRY_BACKOFF': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: make_user("cashier") -> User with that role."""
    def _make(role: str, email: str | None = None):
        return auth_service.create_user(
            name=f"{role.title()} User",
            email=email or f"{role}@pgims.test",
            password=PASSWORD,
            role=role,
        )
    return _make


@pytest.fixture(scope='function')
def headers_for(make_user):
    """Factory: headers_for("manager") -> Authorization headers for a fresh user of that role."""
    def _headers(role: str):
        user = make_user(role)
        _, token = session_service.create_session(user.id)
        return auth_headers(token)
    return _headers


@pytest.fixture(scope='function')
def admin_headers(headers_for):
    return headers_for("admin")


@pytest.fixture(scope='function')
def manager_headers(headers_for):
    return headers_for("manager")


@pytest.fixture(scope='function')
def cashier_headers(headers_for):
    return headers_for("cashier")


@pytest.fixture(scope='function')
def store_a(db_session):
    store = Store(name="Main Store", code="MAIN")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def store_b(db_session):
    store = Store(name="Branch Store", code="BR1")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def product_x(db_session):
    """10.00 each, 10 in stock."""
    product = Product(sku="PX-001", name="Product X", price_cents=1000, stock=10)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def product_y(db_session):
    """2.50 each, 10 in stock."""
    product = Product(sku="PY-001", name="Product Y", price_cents=250, stock=10)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def customer(db_session):
    customer = Customer(name="Jane Customer", email="jane@example.com", balance_cents=200000)
    db_session.add(customer)
    db_session.commit()
    return customer


def get_auth_token(client, email: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
