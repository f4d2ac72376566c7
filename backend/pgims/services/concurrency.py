# Overview: Transaction helpers shared by every engine: row locks, exclusive begin and bounded retries.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import ConcurrencyConflict
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    populate_existing() makes rows already in the identity map reload from the
    locked SELECT instead of keeping values read before the lock was taken.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; begin_exclusive() covers it.
    """
    return query.with_for_update().populate_existing()


def begin_exclusive() -> None:
    """
    Start the write transaction.

    On SQLite this issues BEGIN IMMEDIATE so writers are serialized from the
    first read. Other dialects rely on lock_for_update row locks.
    """
    if db.engine.dialect.name != "sqlite":
        return
    dbapi_conn = db.session.connection().connection.dbapi_connection
    if not dbapi_conn.in_transaction:
        db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, lock timeouts) and StaleDataError
    (optimistic locking conflicts). The session is rolled back after every
    failure, so nothing from a failed attempt survives. When attempts run out
    the failure surfaces as ConcurrencyConflict.
    """
    if attempts is None:
        attempts = current_app.config.get("LOCK_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("LOCK_RETRY_BACKOFF", 0.1)
    attempts = max(1, attempts)

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                current_app.logger.warning(
                    "Giving up after %d attempts: %s", attempts, exc.__class__.__name__
                )
                raise ConcurrencyConflict() from exc
            current_app.logger.warning(
                "Concurrency conflict (%s), retrying attempt %d/%d",
                exc.__class__.__name__,
                attempt + 2,
                attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise


def commit_with_retry(*, attempts: int | None = None, backoff_base: float | None = None):
    """Commit current session with retry handling."""
    def _op():
        db.session.commit()
    return run_with_retry(_op, attempts=attempts, backoff_base=backoff_base)
