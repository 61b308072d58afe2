"""
Tests for programs offered per year level.
"""
import pytest
from sqlalchemy.exc import OperationalError

from database import Program
from services import (
    create_program,
    update_program,
    delete_program,
    list_programs,
    MissingField,
    FieldTooLong,
    UnknownGrade,
    NotFound,
    UpstreamFailure,
)


class TestPrograms:

    def test_create_with_image(self, db, images, make_grade):
        grade = make_grade("9th")
        result = create_program(db, images, "Brevet preparation", grade.id, image=b"cover")

        program = result["program"]
        assert program["year_level"] == {"id": grade.id, "name": "9th"}
        assert program["image"].startswith(images.base_url)
        assert list(images.objects.values()) == [b"cover"]

    def test_required_fields(self, db, images, make_grade):
        grade = make_grade()
        with pytest.raises(MissingField):
            create_program(db, images, "", grade.id)
        with pytest.raises(MissingField):
            create_program(db, images, "Brevet", None)

    def test_name_length(self, db, images, make_grade):
        grade = make_grade()
        with pytest.raises(FieldTooLong):
            create_program(db, images, "x" * 101, grade.id)

    def test_unknown_year_level(self, db, images):
        with pytest.raises(UnknownGrade) as exc_info:
            create_program(db, images, "Brevet", "no-such-grade")
        assert exc_info.value.field == "year_level"
        assert db.query(Program).count() == 0

    def test_update_replaces_image(self, db, images, make_grade):
        seventh = make_grade("7th")
        ninth = make_grade("9th")
        program = create_program(db, images, "Brevet", seventh.id, image=b"v1")["program"]

        result = update_program(db, images, program["id"], year_level_id=ninth.id, image=b"v2")

        assert result["program"]["name"] == "Brevet"
        assert result["program"]["year_level"]["id"] == ninth.id
        assert list(images.objects.values()) == [b"v2"]

    def test_failed_commit_discards_image(self, db, images, make_grade, monkeypatch):
        grade = make_grade()

        def failing_commit():
            raise OperationalError("INSERT INTO programs", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)
        with pytest.raises(UpstreamFailure) as exc_info:
            create_program(db, images, "Brevet", grade.id, image=b"cover")
        monkeypatch.undo()

        assert exc_info.value.dependency == "database"
        assert images.objects == {}
        assert db.query(Program).count() == 0

    def test_update_unknown(self, db, images):
        with pytest.raises(NotFound):
            update_program(db, images, "no-such-program", name="Brevet")

    def test_delete_removes_image(self, db, images, make_grade):
        grade = make_grade()
        program = create_program(db, images, "Brevet", grade.id, image=b"cover")["program"]

        delete_program(db, images, program["id"])

        assert list_programs(db) == []
        assert images.objects == {}
