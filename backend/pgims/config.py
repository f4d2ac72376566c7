# backend/pgims/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/pgims.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///pgims.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upper bound on how long a request may wait for a row lock before the
    # datastore gives up (SQLite busy timeout / PostgreSQL lock_timeout).
    LOCK_TIMEOUT_MS = int(os.environ.get("LOCK_TIMEOUT_MS", "5000"))

    # Retry policy for lock timeouts, deadlocks and stale version conflicts
    LOCK_RETRY_ATTEMPTS = int(os.environ.get("LOCK_RETRY_ATTEMPTS", "3"))
    LOCK_RETRY_BACKOFF = float(os.environ.get("LOCK_RETRY_BACKOFF", "0.1"))

    SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", "24"))
    SESSION_IDLE_HOURS = int(os.environ.get("SESSION_IDLE_HOURS", "2"))

    # bcrypt cost factor; tests lower it to keep the suite fast
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Browser origins allowed to call the API (comma separated)
    CORS_ORIGINS = tuple(
        o.strip()
        for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
        if o.strip()
    )


def engine_options_for(uri: str, lock_timeout_ms: int) -> dict:
    """Dialect-specific engine options that bound lock waits."""
    if uri.startswith("sqlite"):
        return {"connect_args": {"timeout": lock_timeout_ms / 1000}}
    if uri.startswith("postgresql"):
        return {"connect_args": {"options": f"-c lock_timeout={lock_timeout_ms}"}}
    return {}
