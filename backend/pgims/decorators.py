# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .permissions import role_allows
from .services import session_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user to the authenticated User.

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required"}), 401

        user = session_service.validate_session(token)
        if user is None:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_permission(operation: str):
    """
    Require the caller's role to be allowed `operation` by the permission table.

    Must be stacked under @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            user = g.current_user
            if not role_allows(operation, user.role):
                current_app.logger.warning(
                    "Permission denied: user=%s role=%s operation=%s path=%s",
                    user.id, user.role, operation, request.path,
                )
                return jsonify({
                    "error": "permission_denied",
                    "operation": operation,
                    "role": user.role,
                    "message": f"Role {user.role!r} may not perform {operation}",
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
