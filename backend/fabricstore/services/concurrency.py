# Overview: Commit helpers; translate storage-level constraint violations into API errors.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from ..errors import ConflictError, DatabaseError

logger = logging.getLogger(__name__)


def run_with_retry(func, *, session, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a self-contained DB operation with retry on lock contention.

    `func` must rebuild all of its state on each call: the session is rolled
    back between attempts. Used for bulk maintenance, not request handlers.
    """
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))


def commit_or_conflict(session, conflict: ConflictError | None = None) -> None:
    """
    Commit the unit of work.

    A uniqueness violation raised by storage (partial unique index on active
    barcodes, unique code/email) is the authoritative conflict signal: the
    session is rolled back and `conflict` is raised in its place.
    Any other storage failure becomes a non-operational DatabaseError.
    """
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if conflict is None:
            raise DatabaseError("Integrity constraint violated") from exc
        logger.warning(
            "Storage constraint rejected write (%s): %s",
            conflict.conflicting_field,
            exc.orig,
        )
        raise conflict from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise DatabaseError("Database operation failed") from exc
