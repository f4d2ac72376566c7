# Overview: Service-layer operations for auth; password hashing and user accounts.

"""
Authentication service.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters required
- Must contain uppercase, lowercase, digit, and special char
- Session tokens managed separately (see session_service.py)
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app

from ..errors import UniquenessConflict, ValidationError
from ..extensions import db
from ..models import User
from ..permissions import Role
from ..time_utils import utcnow


def validate_password_strength(password) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)

    Raises ValidationError if requirements not met.
    """
    if not isinstance(password, str):
        raise ValidationError("Password is required", field="password")

    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long", field="password")

    if not re.search(r'[A-Z]', password):
        raise ValidationError("Password must contain at least one uppercase letter", field="password")

    if not re.search(r'[a-z]', password):
        raise ValidationError("Password must contain at least one lowercase letter", field="password")

    if not re.search(r'\d', password):
        raise ValidationError("Password must contain at least one digit", field="password")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise ValidationError("Password must contain at least one special character", field="password")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. A malformed stored hash counts as a
    mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_role(role) -> str:
    try:
        return Role(role).value
    except ValueError:
        raise ValidationError(f"role must be one of: {', '.join(Role.values())}", field="role")


def create_user(name: str, email: str, password: str, role: str = Role.USER.value) -> User:
    """
    Create a user with a bcrypt password hash.

    Raises:
        ValidationError: blank name/email or weak password
        UniquenessConflict: email already registered
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required", field="name")
    if not isinstance(email, str) or "@" not in email:
        raise ValidationError("email must be a valid email address", field="email")
    email = email.strip().lower()
    role = normalize_role(role)
    password_hash = hash_password(password)

    if db.session.query(User).filter(User.email == email).first():
        raise UniquenessConflict("email", email)

    user = User(name=name.strip(), email=email, password_hash=password_hash, role=role)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("User %s created with role %s", user.id, role)
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Return the active user for these credentials, or None.

    Updates last_login_at on success.
    """
    if not email or not password:
        return None

    user = db.session.query(User).filter(
        User.email == email.strip().lower(),
        User.is_active.is_(True),
    ).first()
    if user is None or not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user
