"""Helpers shared by the SQLAlchemy repositories."""

import logging

from sqlalchemy.exc import IntegrityError

from kingdom_hospital.core.exceptions import DuplicateRecordError

logger = logging.getLogger(__name__)

# SQLSTATE unique_violation (PostgreSQL)
UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True when the database rejected the write for a duplicate key."""
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    # SQLite reports "UNIQUE constraint failed: <table>.<columns>"
    return "unique constraint" in str(orig or error).lower()


def commit_or_raise_duplicate(db, message: str) -> None:
    """
    Commit the session, turning a uniqueness violation into DuplicateRecordError.

    The session is rolled back before raising so it stays usable. Other
    integrity errors (foreign keys, NOT NULL) are re-raised unchanged.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        constraint = str(getattr(e, "orig", e))
        if not is_unique_violation(e):
            logger.error(
                "Write rejected by database integrity check",
                extra={"context": {"constraint": constraint}},
            )
            raise
        logger.warning(
            "Write rejected by unique constraint",
            extra={"context": {"constraint": constraint}},
        )
        raise DuplicateRecordError(message, constraint=constraint) from e
