# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/pgims/routes/auth.py
"""
Authentication API routes.

Register and login return a bearer token; send it as
`Authorization: Bearer <token>` on every protected route.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import bearer_token, require_auth
from ..permissions import Role, permissions_for_role
from ..services import auth_service
from ..services import session_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user, token: str, session) -> dict:
    return {
        "user": user.to_dict(),
        "token": token,
        "expires_at": session.to_dict()["expires_at"],
    }


@auth_bp.post("/register")
def register_route():
    """
    Self-registration. New accounts always get the `user` role.

    Request body:
    {
        "name": str,
        "email": str,
        "password": str
    }
    """
    data = request.get_json(silent=True) or {}

    user = auth_service.create_user(
        name=data.get("name"),
        email=data.get("email"),
        password=data.get("password"),
        role=Role.USER.value,
    )
    session, token = session_service.create_session(user.id)

    return jsonify(_session_payload(user, token, session)), 201


@auth_bp.post("/login")
def login_route():
    """Authenticate with email + password and create a session token."""
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400

    user = auth_service.authenticate(email, password)
    if user is None:
        current_app.logger.warning("Failed login for %s from %s", email, request.remote_addr)
        return jsonify({"error": "Invalid credentials"}), 401

    session, token = session_service.create_session(user.id)
    return jsonify(_session_payload(user, token, session)), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """Revoke the token used for this request."""
    session_service.revoke_token(bearer_token(), reason="User logout")
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "permissions": permissions_for_role(user.role),
    }), 200
