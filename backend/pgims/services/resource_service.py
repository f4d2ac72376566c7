# Overview: Uniform list/create/read/update/delete for the boilerplate resources.

"""
Generic CRUD driven by model metadata.

Each resource is a ResourceSpec: the model, its validation policy, the
permission codes guarding reads and writes, and the few rules metadata cannot
express (money ranges, foreign-key existence, fields only settable on
create). Engines own the stateful fields: Product.stock is set on create and
afterwards only through the stock endpoint, Customer.balance_cents only
through deposit/withdraw.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import InUse, NotFound, UniquenessConflict, ValidationError
from ..extensions import db
from ..models import BankAccount, Customer, Product, PurchaseOrder, Store, Supplier, Transaction, User
from ..models.customers import GENDERS
from ..models.finance import PAYMENT_METHODS, TRANSACTION_TYPES
from ..models.purchasing import PO_STATUSES
from ..permissions import Role, authorize
from ..validation import ModelValidationPolicy, enforce_money_range, enforce_unique, validate_payload
from . import auth_service, session_service


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    model: Any
    policy: ModelValidationPolicy
    write_permission: str
    read_permission: str | None = None
    create_only_fields: frozenset = frozenset()
    money_fields: tuple = ()
    # column -> (model, entity name) that must exist
    references: dict = field(default_factory=dict)
    order_by: str = "id"
    # (payload, creating) -> (payload without extra keys, extra attributes to set)
    prepare: Callable[[dict, bool], tuple[dict, dict]] | None = None

    @property
    def reader(self) -> str:
        return self.read_permission or self.write_permission


def _check_references(resource: ResourceSpec, patch: dict) -> None:
    for column, (model, entity) in resource.references.items():
        value = patch.get(column)
        if value is not None and db.session.get(model, value) is None:
            raise NotFound(entity, value)


def _validated(resource: ResourceSpec, payload, *, creating: bool, exclude_id=None) -> tuple[dict, dict]:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    extras: dict = {}
    if resource.prepare is not None:
        payload, extras = resource.prepare(dict(payload), creating)

    if not creating:
        for k in payload:
            if k in resource.create_only_fields:
                raise ValidationError(f"Field not allowed on update: {k}", field=k)

    patch = validate_payload(model=resource.model, payload=payload, policy=resource.policy, partial=not creating)
    enforce_money_range(patch, resource.money_fields)
    _check_references(resource, patch)
    enforce_unique(resource.model, patch, resource.policy, exclude_id=exclude_id)
    return patch, extras


def _is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg reports SQLSTATE 23505; sqlite only has the message text
    return getattr(exc.orig, "pgcode", None) == "23505" or "UNIQUE constraint failed" in str(exc.orig)


def _commit_checked(resource: ResourceSpec, patch: dict) -> None:
    """
    Commit, translating constraint failures that slipped past validation
    (a concurrent writer, usually) into typed errors.
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if _is_unique_violation(exc):
            message = str(exc.orig)
            field_name = next((f for f in sorted(resource.policy.unique_fields) if f in message), None)
            raise UniquenessConflict(field_name, patch.get(field_name) if field_name else None) from exc
        current_app.logger.warning("%s write rejected by the database: %s", resource.name, exc.orig)
        raise ValidationError(f"{resource.name} violates a database constraint") from exc


def list_items(resource: ResourceSpec, filters: dict | None = None, *, role: str | None = None) -> list:
    """List rows, filtered by equality on any real column named in `filters`."""
    if role is not None:
        authorize(resource.reader, role)
    query = db.session.query(resource.model)
    columns = {c.key: c for c in resource.model.__mapper__.columns}
    for key, value in (filters or {}).items():
        if key in columns and value not in (None, ""):
            query = query.filter(getattr(resource.model, key) == value)
    return query.order_by(getattr(resource.model, resource.order_by).asc(), resource.model.id.asc()).all()


def get_item(resource: ResourceSpec, item_id: int, *, role: str | None = None):
    if role is not None:
        authorize(resource.reader, role)
    obj = db.session.get(resource.model, item_id)
    if obj is None:
        raise NotFound(resource.name, item_id)
    return obj


def create_item(resource: ResourceSpec, payload, *, role: str | None = None):
    if role is not None:
        authorize(resource.write_permission, role)
    patch, extras = _validated(resource, payload, creating=True)

    obj = resource.model(**patch, **extras)
    db.session.add(obj)
    _commit_checked(resource, patch)
    current_app.logger.info("%s %s created", resource.name, obj.id)
    return obj


def update_item(resource: ResourceSpec, item_id: int, payload, *, role: str | None = None):
    if role is not None:
        authorize(resource.write_permission, role)
    obj = db.session.get(resource.model, item_id)
    if obj is None:
        raise NotFound(resource.name, item_id)
    patch, extras = _validated(resource, payload, creating=False, exclude_id=item_id)

    for k, v in {**patch, **extras}.items():
        setattr(obj, k, v)
    _commit_checked(resource, patch)
    current_app.logger.info("%s %s updated: %s", resource.name, item_id, ", ".join(sorted(patch)))
    return obj


def delete_item(resource: ResourceSpec, item_id: int, *, role: str | None = None) -> None:
    if role is not None:
        authorize(resource.write_permission, role)
    obj = db.session.get(resource.model, item_id)
    if obj is None:
        raise NotFound(resource.name, item_id)
    db.session.delete(obj)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise InUse(resource.name, item_id)
    current_app.logger.info("%s %s deleted", resource.name, item_id)


# -- Resource definitions --


def _prepare_user(payload: dict, creating: bool) -> tuple[dict, dict]:
    """Turn a plaintext password into password_hash; normalize email and role."""
    extras: dict = {}
    password = payload.pop("password", None)
    if creating and password is None:
        raise ValidationError("Missing required fields: password", field="password")
    if password is not None:
        extras["password_hash"] = auth_service.hash_password(password)
    if isinstance(payload.get("email"), str):
        payload["email"] = payload["email"].strip().lower()
    if "role" in payload and payload["role"] is not None:
        payload["role"] = auth_service.normalize_role(payload["role"])
    return payload, extras


def _revoke_if_deactivated(user: User) -> None:
    if not user.is_active:
        session_service.revoke_user_sessions(user.id, "User account deactivated")


PRODUCTS = ResourceSpec(
    name="Product",
    model=Product,
    policy=ModelValidationPolicy(
        writable_fields={"sku", "name", "description", "price_cents", "stock"},
        required_on_create={"name", "price_cents"},
        min_values={"price_cents": 0, "stock": 0},
        unique_fields={"sku"},
    ),
    write_permission="MANAGE_PRODUCTS",
    read_permission="VIEW_PRODUCTS",
    create_only_fields=frozenset({"stock"}),
    money_fields=("price_cents",),
    order_by="name",
)

STORES = ResourceSpec(
    name="Store",
    model=Store,
    policy=ModelValidationPolicy(
        writable_fields={"name", "code", "address", "phone"},
        required_on_create={"name"},
        unique_fields={"code"},
    ),
    write_permission="MANAGE_STORES",
    order_by="name",
)

SUPPLIERS = ResourceSpec(
    name="Supplier",
    model=Supplier,
    policy=ModelValidationPolicy(
        writable_fields={"name", "contact_name", "phone", "email", "address"},
        required_on_create={"name"},
    ),
    write_permission="MANAGE_SUPPLIERS",
    order_by="name",
)

CUSTOMERS = ResourceSpec(
    name="Customer",
    model=Customer,
    policy=ModelValidationPolicy(
        writable_fields={
            "name", "gender", "phone", "email", "address", "birthday",
            "balance_cents", "credit_limit_cents", "notes",
        },
        required_on_create={"name"},
        choices={"gender": GENDERS},
        min_values={"balance_cents": 0, "credit_limit_cents": 0},
        unique_fields={"email"},
    ),
    write_permission="MANAGE_CUSTOMERS",
    # Opening balance only; afterwards deposit/withdraw own it
    create_only_fields=frozenset({"balance_cents"}),
    money_fields=("balance_cents", "credit_limit_cents"),
    order_by="name",
)

BANK_ACCOUNTS = ResourceSpec(
    name="BankAccount",
    model=BankAccount,
    policy=ModelValidationPolicy(
        writable_fields={
            "bank_name", "account_number", "account_name", "branch",
            "account_type", "balance_cents", "description",
        },
        required_on_create={"bank_name", "account_number", "account_name"},
        unique_fields={"account_number"},
    ),
    write_permission="MANAGE_BANK_ACCOUNTS",
    money_fields=("balance_cents",),
    order_by="bank_name",
)

TRANSACTIONS = ResourceSpec(
    name="Transaction",
    model=Transaction,
    policy=ModelValidationPolicy(
        writable_fields={
            "bank_account_id", "type", "amount_cents", "payment_method",
            "reference", "description", "transaction_date",
        },
        required_on_create={"bank_account_id", "type", "amount_cents", "transaction_date"},
        choices={"type": TRANSACTION_TYPES, "payment_method": PAYMENT_METHODS},
        min_values={"amount_cents": 1},
    ),
    write_permission="MANAGE_TRANSACTIONS",
    money_fields=("amount_cents",),
    references={"bank_account_id": (BankAccount, "BankAccount")},
    order_by="transaction_date",
)

PURCHASE_ORDERS = ResourceSpec(
    name="PurchaseOrder",
    model=PurchaseOrder,
    policy=ModelValidationPolicy(
        writable_fields={
            "supplier_id", "order_number", "status", "total_cents",
            "order_date", "expected_date", "notes",
        },
        required_on_create={"supplier_id", "order_number", "order_date"},
        choices={"status": PO_STATUSES},
        min_values={"total_cents": 0},
        unique_fields={"order_number"},
    ),
    write_permission="MANAGE_PURCHASE_ORDERS",
    money_fields=("total_cents",),
    references={"supplier_id": (Supplier, "Supplier")},
    order_by="order_date",
)

USERS = ResourceSpec(
    name="User",
    model=User,
    policy=ModelValidationPolicy(
        writable_fields={"name", "email", "role", "is_active"},
        required_on_create={"name", "email"},
        choices={"role": Role.values()},
        unique_fields={"email"},
    ),
    write_permission="MANAGE_USERS",
    order_by="name",
    prepare=_prepare_user,
)

RESOURCES = {
    "products": PRODUCTS,
    "stores": STORES,
    "suppliers": SUPPLIERS,
    "customers": CUSTOMERS,
    "bank-accounts": BANK_ACCOUNTS,
    "transactions": TRANSACTIONS,
    "purchase-orders": PURCHASE_ORDERS,
    "users": USERS,
}


def update_user(user_id: int, payload, *, role: str | None = None) -> User:
    """update_item for users, plus session revocation on deactivation."""
    user = update_item(USERS, user_id, payload, role=role)
    _revoke_if_deactivated(user)
    return user
