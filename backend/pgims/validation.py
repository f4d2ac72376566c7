from __future__ import annotations
from datetime import date, datetime
from pgims.time_utils import parse_iso_date, parse_iso_datetime

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import UniquenessConflict, ValidationError


# Maximum money amount: 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_AMOUNT_CENTS = 999_999_999

EMAIL_FIELDS = {"email"}


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - choices: closed value sets for enum-like string columns
    - min_values: inclusive lower bounds for integer columns
    - unique_fields: columns checked for duplicates before insert/update
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    choices: dict[str, tuple] = field(default_factory=dict)
    min_values: dict[str, int] = field(default_factory=dict)
    unique_fields: set[str] = field(default_factory=set)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer", field=col.key)
            # Reject scientific notation (e.g., "1e15", "1E10")
            if 'e' in stripped.lower():
                raise ValidationError(
                    f"{col.key} must be a plain integer (scientific notation not allowed)", field=col.key
                )
            # Reject decimal points (e.g., "12.5")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)", field=col.key)
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer", field=col.key)
        # Reject floats explicitly
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal", field=col.key)
        raise ValidationError(f"{col.key} must be an integer", field=col.key)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes"):
            return True
        if isinstance(value, str) and value.strip().lower() in ("false", "0", "no"):
            return False
        if isinstance(value, int):
            return bool(value)
        raise ValidationError(f"{col.key} must be a boolean", field=col.key)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", field=col.key)
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", field=col.key)
            return dt
        raise ValidationError(f"{col.key} must be a datetime", field=col.key)

    # Dates ("YYYY-MM-DD")
    if isinstance(coltype, Date):
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                d = parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be a YYYY-MM-DD date", field=col.key)
            if d is None:
                raise ValidationError(f"{col.key} must be a YYYY-MM-DD date", field=col.key)
            return d
        raise ValidationError(f"{col.key} must be a date", field=col.key)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string", field=col.key)
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    - choices / min_values from the policy
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", field=missing[0])

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}", field=k)
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}", field=k)

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null", field=k)
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank", field=k)

        # Blank optional strings are stored as NULL so unique columns don't collide on ""
        if isinstance(col.type, (String, Text)) and col.nullable and val == "":
            val = None

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}", field=k)

        if k in policy.choices and val is not None and val not in policy.choices[k]:
            allowed = ", ".join(policy.choices[k])
            raise ValidationError(f"{k} must be one of: {allowed}", field=k)

        if k in policy.min_values and val is not None and val < policy.min_values[k]:
            raise ValidationError(f"{k} must be >= {policy.min_values[k]}", field=k)

        if k in EMAIL_FIELDS and isinstance(val, str) and "@" not in val:
            raise ValidationError(f"{k} must be a valid email address", field=k)

        patch[k] = val

    return patch


def enforce_unique(model: DeclarativeMeta, patch: dict, policy: ModelValidationPolicy, *, exclude_id=None) -> None:
    """Raise UniquenessConflict when a unique field's new value is already taken."""
    for k in sorted(policy.unique_fields):
        value = patch.get(k)
        if value is None:
            continue
        query = model.query.filter(getattr(model, k) == value)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        if query.first() is not None:
            raise UniquenessConflict(k, value)


def enforce_money_range(patch: dict, fields: tuple[str, ...]) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    for k in fields:
        if k in patch and patch[k] is not None and abs(patch[k]) > MAX_AMOUNT_CENTS:
            raise ValidationError(
                f"{k} cannot exceed {MAX_AMOUNT_CENTS} ({MAX_AMOUNT_CENTS / 100:,.2f})", field=k
            )


def require_positive_int(value, field: str) -> int:
    """Quantities and ids in request bodies: plain ints >= 1."""
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, str) and value.strip().isdecimal():
            value = int(value.strip())
        else:
            raise ValidationError(f"{field} must be an integer", field=field)
    if value < 1:
        raise ValidationError(f"{field} must be >= 1", field=field)
    return value


def require_non_negative_int(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, str) and value.strip().isdecimal():
            value = int(value.strip())
        else:
            raise ValidationError(f"{field} must be an integer", field=field)
    if value < 0:
        raise ValidationError(f"{field} must be >= 0", field=field)
    return value
