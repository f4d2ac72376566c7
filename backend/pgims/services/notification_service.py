# Overview: Service-layer operations for notifications; typed targets instead of free-form class names.

from __future__ import annotations

from enum import Enum

from ..errors import NotFound, ValidationError
from ..extensions import db
from ..models import Customer, Notification, Store, Supplier, User
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, require_positive_int, validate_payload


class NotifiableKind(str, Enum):
    """Entity types a notification may be addressed to."""
    USER = "user"
    CUSTOMER = "customer"
    STORE = "store"
    SUPPLIER = "supplier"


_KIND_MODELS = {
    NotifiableKind.USER: User,
    NotifiableKind.CUSTOMER: Customer,
    NotifiableKind.STORE: Store,
    NotifiableKind.SUPPLIER: Supplier,
}

NOTIFICATION_POLICY = ModelValidationPolicy(
    writable_fields={"type", "title", "message", "is_read"},
    required_on_create={"type", "title", "message"},
)


def parse_kind(value) -> NotifiableKind:
    try:
        return NotifiableKind(value)
    except ValueError:
        allowed = ", ".join(k.value for k in NotifiableKind)
        raise ValidationError(f"notifiable_type must be one of: {allowed}", field="notifiable_type")


def resolve_notifiable(kind, notifiable_id: int):
    """Load the target entity. Raises NotFound if it does not exist."""
    kind = parse_kind(kind)
    target = db.session.get(_KIND_MODELS[kind], notifiable_id)
    if target is None:
        raise NotFound(kind.value.capitalize(), notifiable_id)
    return target


def _split_target(payload: dict) -> tuple[dict, NotifiableKind | None, int | None]:
    payload = dict(payload)
    has_kind = "notifiable_type" in payload
    has_id = "notifiable_id" in payload
    kind = payload.pop("notifiable_type", None)
    target_id = payload.pop("notifiable_id", None)
    if has_kind != has_id:
        raise ValidationError("notifiable_type and notifiable_id must be given together", field="notifiable_type")
    if not has_kind:
        return payload, None, None
    return payload, parse_kind(kind), require_positive_int(target_id, "notifiable_id")


def create_notification(payload: dict) -> Notification:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    fields, kind, target_id = _split_target(payload)
    if kind is None:
        raise ValidationError("Missing required fields: notifiable_id, notifiable_type", field="notifiable_type")
    patch = validate_payload(model=Notification, payload=fields, policy=NOTIFICATION_POLICY, partial=False)

    resolve_notifiable(kind, target_id)
    notification = Notification(notifiable_kind=kind.value, notifiable_id=target_id, **patch)
    db.session.add(notification)
    db.session.commit()
    return notification


def update_notification(notification_id: int, payload: dict) -> Notification:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    fields, kind, target_id = _split_target(payload)
    patch = validate_payload(model=Notification, payload=fields, policy=NOTIFICATION_POLICY, partial=True)

    notification = get_notification(notification_id)
    if kind is not None:
        resolve_notifiable(kind, target_id)
        notification.notifiable_kind = kind.value
        notification.notifiable_id = target_id
    for k, v in patch.items():
        setattr(notification, k, v)
    if patch.get("is_read") and notification.read_at is None:
        notification.read_at = utcnow()
    db.session.commit()
    return notification


def mark_read(notification_id: int) -> Notification:
    notification = get_notification(notification_id)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        db.session.commit()
    return notification


def get_notification(notification_id: int) -> Notification:
    notification = db.session.get(Notification, notification_id)
    if notification is None:
        raise NotFound("Notification", notification_id)
    return notification


def delete_notification(notification_id: int) -> None:
    notification = get_notification(notification_id)
    db.session.delete(notification)
    db.session.commit()


def list_notifications(*, kind=None, notifiable_id: int | None = None, unread_only: bool = False) -> list[Notification]:
    query = db.session.query(Notification)
    if kind is not None:
        query = query.filter(Notification.notifiable_kind == parse_kind(kind).value)
    if notifiable_id is not None:
        query = query.filter(Notification.notifiable_id == notifiable_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()
