# Overview: Transaction helpers shared by services that write under contention.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

logger = logging.getLogger(__name__)

# Lock timeouts/deadlocks and optimistic version conflicts
CONFLICT_ERRORS = (OperationalError, StaleDataError)

# Additionally retried by writers whose idempotency guard is a unique key:
# a racing twin inserted the same key first and the retry will observe it.
UNIQUE_CONFLICT_ERRORS = CONFLICT_ERRORS + (IntegrityError,)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, retry_on=CONFLICT_ERRORS):
    """
    Execute a unit of work, rolling back and re-running it on conflicts.

    `func` must be safe to re-run from scratch: it re-reads everything it
    needs and commits once at the end. Domain errors propagate immediately.
    """
    for attempt in range(attempts):
        try:
            return func()
        except retry_on as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            logger.warning(
                "Retrying after %s (attempt %d of %d)",
                type(exc).__name__, attempt + 1, attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))

