"""Unit tests for the commit helper shared by the repositories."""

import sqlite3
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError

from kingdom_hospital.core.exceptions import DuplicateRecordError
from kingdom_hospital.repositories.base import (
    UNIQUE_VIOLATION,
    commit_or_raise_duplicate,
    is_unique_violation,
)


def _integrity_error(orig) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, orig)


def _session_failing_with(error: IntegrityError) -> Mock:
    db = Mock()
    db.commit.side_effect = error
    return db


@pytest.mark.unit
@pytest.mark.repositories
class TestUniqueViolationDetection:
    def test_sqlite_unique_message(self):
        error = _integrity_error(
            sqlite3.IntegrityError("UNIQUE constraint failed: consultations.doctor_id")
        )

        assert is_unique_violation(error)

    def test_sqlite_foreign_key_message(self):
        error = _integrity_error(sqlite3.IntegrityError("FOREIGN KEY constraint failed"))

        assert not is_unique_violation(error)

    def test_postgres_sqlstate(self):
        orig = Mock(pgcode=UNIQUE_VIOLATION)
        orig.__str__ = Mock(return_value="duplicate key value")

        assert is_unique_violation(_integrity_error(orig))

    def test_postgres_foreign_key_sqlstate(self):
        orig = Mock(pgcode="23503")
        orig.__str__ = Mock(
            return_value='insert violates foreign key constraint "fk_doctor"'
        )

        assert not is_unique_violation(_integrity_error(orig))


@pytest.mark.unit
@pytest.mark.repositories
class TestCommitOrRaiseDuplicate:
    def test_commits(self):
        db = Mock()

        commit_or_raise_duplicate(db, "duplicate")

        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_unique_violation_becomes_duplicate_record(self):
        db = _session_failing_with(
            _integrity_error(sqlite3.IntegrityError("UNIQUE constraint failed: medications.name"))
        )

        with pytest.raises(DuplicateRecordError) as exc_info:
            commit_or_raise_duplicate(db, "duplicate")

        assert exc_info.value.message == "duplicate"
        assert "UNIQUE constraint failed" in exc_info.value.constraint
        db.rollback.assert_called_once()

    def test_foreign_key_violation_propagates(self):
        error = _integrity_error(sqlite3.IntegrityError("FOREIGN KEY constraint failed"))
        db = _session_failing_with(error)

        with pytest.raises(IntegrityError) as exc_info:
            commit_or_raise_duplicate(db, "duplicate")

        assert exc_info.value is error
        db.rollback.assert_called_once()
