# backend/pgims/routes/system.py
"""
System health endpoint.
"""

import time
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Product, Store, User

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Round-trip the database and count a few core tables."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        details = {
            "stores": db.session.query(Store).count(),
            "products": db.session.query(Product).count(),
            "users": db.session.query(User).count(),
        }
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    body = {
        "status": "ok" if healthy else "degraded",
        "checks": {"database": database},
    }
    return jsonify(body), (200 if healthy else 503)
