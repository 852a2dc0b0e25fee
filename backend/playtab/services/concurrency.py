# Overview: Transaction helpers shared by every session-core mutation.

"""
Every mutation (start, pause, resume, transfer, close, tab add/remove,
discount apply) is one unit of work: read under lock, write, commit once.

Lock waits and lost optimistic-version races are the only failures worth
repeating; the unit is rolled back and re-run against fresh state. Any
other failure rolls back and propagates, so no half-applied unit is ever
committed.
"""

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    SELECT ... FOR UPDATE on engines that support it.

    SQLite drops the clause; there PlaySession.version_id turns a lost
    race into StaleDataError at flush instead.
    """
    return query.with_for_update()


def run_with_retry(unit, *, attempts: int = 3, backoff_base: float = 0.1):
    """Run `unit()` as one transaction, retrying lock/version conflicts."""
    for attempt in range(1, attempts + 1):
        try:
            return unit()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            if attempt == attempts:
                raise
            current_app.logger.warning(
                "Retrying %s after %s (attempt %d/%d)",
                getattr(unit, "__qualname__", "unit"), type(exc).__name__, attempt, attempts,
            )
            time.sleep(backoff_base * (2 ** (attempt - 1)))
        except Exception:
            db.session.rollback()
            raise
