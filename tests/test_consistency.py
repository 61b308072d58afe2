"""
Tests for the relationship invariants between grades, groups, teachers,
students and registrations.
"""
import pytest

from database import Grade, Group, Registration, Student, StudentGroup, Program
from services import (
    add_grade,
    delete_grade,
    list_grades,
    get_groups_by_grade,
    get_students_by_grade,
    create_group,
    update_group_schedule,
    get_students_by_group,
    delete_group,
    list_groups,
    add_student,
    add_group_to_student,
    get_student,
    delete_student,
    create_registration,
    update_registration_status,
    list_registrations,
    MissingField,
    InvalidEmailFormat,
    InvalidStatus,
    NotFound,
    UnknownGrade,
    UnknownTeacher,
    UnknownGroup,
    SubjectNotTaught,
    TeacherGroupMismatch,
    GradeMismatch,
    AlreadyEnrolled,
    GradeInUse,
    GradeHasGroups,
    GradeHasPrograms,
    GradeExists,
)


class TestGroups:
    """A group's subject must be one its teacher teaches."""

    def test_create_group(self, db, make_teacher, make_grade, schedule):
        teacher = make_teacher(subjects=["Math"])
        grade = make_grade("7th")

        group = create_group(db, "Math 7A", teacher.id, "Math", schedule, grade_id=grade.id)

        assert group["subject"] == "Math"
        assert group["teacher"]["id"] == teacher.id
        assert group["grade"] == {"id": grade.id, "name": "7th"}
        assert group["schedule"] == schedule

    def test_list_groups(self, db, make_teacher, make_group):
        teacher = make_teacher()
        make_group(teacher, name="B group")
        make_group(teacher, name="A group")
        assert [g["name"] for g in list_groups(db)] == ["A group", "B group"]

    def test_create_group_without_grade(self, db, make_teacher, schedule):
        teacher = make_teacher()
        group = create_group(db, "Math open", teacher.id, "Math", schedule)
        assert group["grade"] is None

    def test_subject_not_taught(self, db, make_teacher, schedule):
        teacher = make_teacher(subjects=["Math"])
        create_group(db, "G", teacher.id, "Math", schedule)

        with pytest.raises(SubjectNotTaught):
            create_group(db, "G2", teacher.id, "Physics", schedule)
        assert db.query(Group).count() == 1

    def test_missing_fields(self, db, make_teacher, schedule):
        teacher = make_teacher()
        with pytest.raises(MissingField) as exc_info:
            create_group(db, "  ", teacher.id, "Math", schedule)
        assert exc_info.value.field == "name"

        with pytest.raises(MissingField) as exc_info:
            create_group(db, "G", teacher.id, "Math", {"day": "Monday", "starting_time": "16:00"})
        assert exc_info.value.field == "schedule.ending_time"

    def test_unknown_references(self, db, make_teacher, schedule):
        teacher = make_teacher()
        with pytest.raises(UnknownGrade):
            create_group(db, "G", teacher.id, "Math", schedule, grade_id="no-such-grade")
        with pytest.raises(UnknownTeacher):
            create_group(db, "G", "no-such-teacher", "Math", schedule)
        assert db.query(Group).count() == 0

    def test_grade_checked_before_teacher(self, db, schedule):
        with pytest.raises(UnknownGrade):
            create_group(db, "G", "no-such-teacher", "Math", schedule, grade_id="no-such-grade")

    def test_update_schedule(self, db, make_teacher, make_group):
        group = make_group(make_teacher())
        new_schedule = {"day": "Friday", "starting_time": "09:00", "ending_time": "10:00"}

        result = update_group_schedule(db, group.id, new_schedule)
        assert result["schedule"] == new_schedule

    def test_partial_schedule_rejected(self, db, make_teacher, make_group):
        group = make_group(make_teacher())
        with pytest.raises(MissingField):
            update_group_schedule(db, group.id, {"day": "Friday"})
        db.refresh(group)
        assert group.schedule_day == "Monday"

    def test_update_schedule_unknown_group(self, db, schedule):
        with pytest.raises(NotFound):
            update_group_schedule(db, "no-such-group", schedule)

    def test_students_by_group(self, db, make_teacher, make_grade, make_group, make_student):
        grade = make_grade()
        group = make_group(make_teacher(), grade)
        student = make_student(grade, [group])

        students = get_students_by_group(db, group.id)
        assert [s["id"] for s in students] == [student.id]

        with pytest.raises(NotFound):
            get_students_by_group(db, "no-such-group")

    def test_delete_group_removes_enrollments(
        self, db, make_teacher, make_grade, make_group, make_student, parent_info
    ):
        grade = make_grade()
        group = make_group(make_teacher(), grade)
        student = make_student(grade, [group])
        create_registration(
            db,
            {"first_name": "Lina", "last_name": "Fares", "grade": "7th"},
            parent_info,
            group.id,
        )

        group_id = group.id
        delete_group(db, group_id)

        assert db.query(Group).count() == 0
        assert db.query(StudentGroup).count() == 0
        assert get_student(db, student.id)["groups"] == []
        registration = db.query(Registration).one()
        assert registration.group_id == group_id


class TestStudents:
    """Students join groups of the declared teacher and of their own grade."""

    def test_add_student(self, db, make_teacher, make_grade, make_group, parent_info):
        teacher = make_teacher()
        grade = make_grade()
        group = make_group(teacher, grade)

        result = add_student(db, "Omar", "Khalil", parent_info, grade.id, [group.id], teacher.id)

        student = result["student"]
        assert result["success"] is True
        assert student["parent_info"]["email"] == "samir@example.test"
        assert [g["id"] for g in student["groups"]] == [group.id]

    def test_every_group_checked_against_teacher(
        self, db, make_teacher, make_grade, make_group, parent_info
    ):
        karim = make_teacher(email="karim@academy.test")
        leila = make_teacher(email="leila@academy.test", subjects=["English"])
        grade = make_grade()
        own = make_group(karim, grade)
        other = make_group(leila, grade, subject="English", name="English 7B")

        with pytest.raises(TeacherGroupMismatch):
            add_student(db, "Omar", "Khalil", parent_info, grade.id, [own.id, other.id], karim.id)
        assert db.query(Student).count() == 0

    def test_unknown_group(self, db, make_teacher, make_grade, parent_info):
        teacher = make_teacher()
        grade = make_grade()
        with pytest.raises(UnknownGroup) as exc_info:
            add_student(db, "Omar", "Khalil", parent_info, grade.id, ["no-such-group"], teacher.id)
        assert exc_info.value.field == "groups"

    def test_requires_groups(self, db, make_teacher, make_grade, parent_info):
        teacher = make_teacher()
        grade = make_grade()
        with pytest.raises(MissingField) as exc_info:
            add_student(db, "Omar", "Khalil", parent_info, grade.id, [], teacher.id)
        assert exc_info.value.field == "groups"

    def test_parent_email_format(self, db, make_teacher, make_grade, make_group):
        teacher = make_teacher()
        grade = make_grade()
        group = make_group(teacher, grade)
        with pytest.raises(InvalidEmailFormat):
            add_student(
                db, "Omar", "Khalil", {"name": "Samir", "email": "samir-at-home"},
                grade.id, [group.id], teacher.id,
            )

    def test_duplicate_group_ids_collapse(self, db, make_teacher, make_grade, make_group, parent_info):
        teacher = make_teacher()
        grade = make_grade()
        group = make_group(teacher, grade)

        result = add_student(db, "Omar", "Khalil", parent_info, grade.id, [group.id, group.id], teacher.id)
        assert len(result["student"]["groups"]) == 1

    def test_add_group_to_student(self, db, make_teacher, make_grade, make_group, make_student):
        teacher = make_teacher()
        grade = make_grade()
        first = make_group(teacher, grade)
        second = make_group(teacher, grade, name="Math 7B")
        student = make_student(grade, [first])

        result = add_group_to_student(db, student.id, second.id, teacher.id)
        assert {g["id"] for g in result["student"]["groups"]} == {first.id, second.id}

    def test_grade_mismatch_leaves_groups_unchanged(
        self, db, make_teacher, make_grade, make_group, make_student
    ):
        teacher = make_teacher()
        seventh = make_grade("7th")
        ninth = make_grade("9th")
        own = make_group(teacher, seventh)
        other = make_group(teacher, ninth, name="Math 9A")
        student = make_student(seventh, [own])

        with pytest.raises(GradeMismatch):
            add_group_to_student(db, student.id, other.id, teacher.id)
        assert get_student(db, student.id)["groups"][0]["id"] == own.id
        assert len(get_student(db, student.id)["groups"]) == 1

    def test_teacher_mismatch(self, db, make_teacher, make_grade, make_group, make_student):
        karim = make_teacher(email="karim@academy.test")
        leila = make_teacher(email="leila@academy.test")
        grade = make_grade()
        group = make_group(karim, grade)
        student = make_student(grade)

        with pytest.raises(TeacherGroupMismatch):
            add_group_to_student(db, student.id, group.id, leila.id)

    def test_already_enrolled(self, db, make_teacher, make_grade, make_group, make_student):
        teacher = make_teacher()
        grade = make_grade()
        group = make_group(teacher, grade)
        student = make_student(grade)

        add_group_to_student(db, student.id, group.id, teacher.id)
        with pytest.raises(AlreadyEnrolled):
            add_group_to_student(db, student.id, group.id, teacher.id)
        assert get_student(db, student.id)["groups"] == [group.to_dict()]

    def test_add_group_unknown_student(self, db, make_teacher, make_grade, make_group):
        teacher = make_teacher()
        group = make_group(teacher, make_grade())
        with pytest.raises(NotFound):
            add_group_to_student(db, "no-such-student", group.id, teacher.id)

    def test_delete_student(self, db, make_teacher, make_grade, make_group, make_student):
        grade = make_grade()
        group = make_group(make_teacher(), grade)
        student = make_student(grade, [group])

        student_id = student.id
        delete_student(db, student_id)
        assert db.query(Student).count() == 0
        assert db.query(StudentGroup).count() == 0
        with pytest.raises(NotFound):
            delete_student(db, student_id)


class TestGrades:
    """Grades cannot be deleted while anything refers to them."""

    def test_add_and_list(self, db):
        add_grade(db, " 8th ")
        add_grade(db, "7th")
        assert [g["name"] for g in list_grades(db)] == ["7th", "8th"]

    def test_duplicate_name(self, db):
        add_grade(db, "7th")
        with pytest.raises(GradeExists):
            add_grade(db, "7th")

    def test_missing_name(self, db):
        with pytest.raises(MissingField):
            add_grade(db, "")

    def test_delete_unreferenced(self, db, make_grade):
        grade = make_grade()
        delete_grade(db, grade.id)
        assert db.query(Grade).count() == 0

    def test_delete_unknown(self, db):
        with pytest.raises(NotFound):
            delete_grade(db, "no-such-grade")

    def test_grade_in_use(self, db, make_teacher, make_grade, make_group, make_student):
        grade = make_grade("7th")
        group = make_group(make_teacher(), grade)
        make_student(grade, [group])

        with pytest.raises(GradeInUse) as exc_info:
            delete_grade(db, grade.id)
        assert exc_info.value.count == 1
        assert db.query(Grade).count() == 1

    def test_grade_has_groups(self, db, make_teacher, make_grade, make_group):
        grade = make_grade()
        make_group(make_teacher(), grade)
        with pytest.raises(GradeHasGroups):
            delete_grade(db, grade.id)

    def test_grade_has_programs(self, db, make_grade):
        grade = make_grade()
        db.add(Program(name="Brevet preparation", year_level_id=grade.id))
        db.commit()
        with pytest.raises(GradeHasPrograms):
            delete_grade(db, grade.id)

    def test_listing_by_grade(self, db, make_teacher, make_grade, make_group, make_student):
        grade = make_grade()
        group = make_group(make_teacher(), grade)
        student = make_student(grade, [group])

        assert [g["id"] for g in get_groups_by_grade(db, grade.id)] == [group.id]
        assert get_students_by_grade(db, grade.id) == [
            {"id": student.id, "first_name": "Omar", "last_name": "Khalil"}
        ]


class TestRegistrations:
    """Public registrations keep an opaque group reference."""

    STUDENT = {"first_name": "Lina", "last_name": "Fares", "grade": "7th"}

    def test_create_is_pending(self, db, parent_info):
        result = create_registration(db, self.STUDENT, parent_info, "any-group-id")
        registration = result["registration"]
        assert registration["status"] == "pending"
        assert registration["group_id"] == "any-group-id"
        assert registration["group"] is None

    def test_missing_student_field(self, db, parent_info):
        with pytest.raises(MissingField) as exc_info:
            create_registration(db, {"first_name": "Lina"}, parent_info, "g")
        assert exc_info.value.field == "student_info.last_name"

    def test_update_status(self, db, parent_info):
        registration = create_registration(db, self.STUDENT, parent_info, "g")["registration"]
        result = update_registration_status(db, registration["id"], "accepted")
        assert result["registration"]["status"] == "accepted"

    def test_invalid_status_checked_first(self, db):
        with pytest.raises(InvalidStatus):
            update_registration_status(db, "no-such-registration", "approved")

    def test_update_unknown(self, db):
        with pytest.raises(NotFound):
            update_registration_status(db, "no-such-registration", "rejected")

    def test_list(self, db, parent_info):
        create_registration(db, self.STUDENT, parent_info, "g")
        assert len(list_registrations(db)) == 1
