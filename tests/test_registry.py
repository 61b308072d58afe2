"""
Tests for the unit-of-work wrapper and the hashing collaborator.
"""
import logging

import pytest
from sqlalchemy.exc import OperationalError

from database import Grade, User
from services import (
    add_grade,
    create_group,
    authenticate,
    SubjectNotTaught,
    UpstreamFailure,
)
from services.passwords import hash_password


def _failing_commit():
    raise OperationalError("INSERT INTO grades", {}, Exception("disk I/O error"))


class TestUnitOfWork:
    """Failures roll the session back and surface as service errors."""

    def test_database_failure(self, db, monkeypatch):
        monkeypatch.setattr(db, "commit", _failing_commit)
        with pytest.raises(UpstreamFailure) as exc_info:
            add_grade(db, "7th")
        monkeypatch.undo()

        assert exc_info.value.kind == "UpstreamFailure"
        assert exc_info.value.dependency == "database"
        assert db.query(Grade).count() == 0

    def test_database_failure_logged(self, db, monkeypatch, caplog):
        monkeypatch.setattr(db, "commit", _failing_commit)
        with caplog.at_level(logging.ERROR, logger="services.registry"):
            with pytest.raises(UpstreamFailure):
                add_grade(db, "7th")

        assert "Database failure in add_grade" in caplog.text

    def test_rejection_logged_with_kind(self, db, make_teacher, schedule, caplog):
        teacher = make_teacher(subjects=["Math"])
        with caplog.at_level(logging.INFO, logger="services.registry"):
            with pytest.raises(SubjectNotTaught):
                create_group(db, "Physics 9A", teacher.id, "Physics", schedule)

        records = [r for r in caplog.records if r.name == "services.registry"]
        assert [r.levelno for r in records] == [logging.INFO]
        assert records[0].getMessage() == "Rejected create_group: SubjectNotTaught"


class TestPasswordHashing:
    """Hashing errors are reported as an upstream failure."""

    def test_hash_failure(self):
        with pytest.raises(UpstreamFailure) as exc_info:
            hash_password(None)
        assert exc_info.value.dependency == "password_hashing"

    def test_corrupt_digest(self, db, make_user, password):
        user = make_user(email="boss@academy.test")
        user.password_digest = "not-a-known-hash"
        db.commit()

        with pytest.raises(UpstreamFailure) as exc_info:
            authenticate(db, "boss@academy.test", password)

        assert exc_info.value.dependency == "password_hashing"
        assert db.query(User).one().password_digest == "not-a-known-hash"
