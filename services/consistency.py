"""
Consistency checks for the Academy backend.

Every mutation of a teacher, group, student, grade or registration is checked
here before anything is written. Checks run in a fixed order and stop at the
first failure, so the same bad request always reports the same error.

These checks are read-then-decide. Uniqueness races (duplicate enrollment,
duplicate grade name, duplicate email) are closed by the store's unique
constraints; the services translate those IntegrityErrors back into the
matching errors.
"""
import json
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from database import Grade, Group, Student, Teacher, Subject, RegistrationStatus
from . import registry
from .exceptions import (
    MissingField,
    InvalidEmailFormat,
    InvalidSubjects,
    InvalidStatus,
    FieldTooLong,
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
    TeacherHasGroups,
)

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")

SUBJECTS = [s.value for s in Subject]
MAX_SUBJECTS = 2
MAX_DEGREE_LENGTH = 100
MAX_BIO_LENGTH = 500
MAX_PROGRAM_NAME_LENGTH = 100

SCHEDULE_FIELDS = ("day", "starting_time", "ending_time")


# ============== Field helpers ==============

def is_present(value: Any) -> bool:
    """A value is present unless it is None, blank or an empty collection."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def require(value: Any, field: str) -> Any:
    """
    Return a required value, stripped if it is a string.

    Raises:
        MissingField: If the value is absent or empty
    """
    if not is_present(value):
        raise MissingField(field)
    return value.strip() if isinstance(value, str) else value


def optional_str(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def check_email(email: str, field: str = "email") -> str:
    """
    Normalize an email and check it has a local@domain.tld shape.

    Raises:
        InvalidEmailFormat: If the shape check fails
    """
    email = registry.normalize_email(email)
    if not EMAIL_PATTERN.match(email):
        raise InvalidEmailFormat(field)
    return email


def check_max_length(value: Optional[str], field: str, max_length: int) -> None:
    if value and len(value) > max_length:
        raise FieldTooLong(field, max_length)


def parse_subjects(value: Any) -> List[str]:
    """
    Parse subjects taught from a list or a JSON-encoded list.

    Duplicates are collapsed; the result must hold one or two known subjects.

    Raises:
        InvalidSubjects: If parsing fails or the subjects are not allowed
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise InvalidSubjects("Invalid subjects_taught format")
    if not isinstance(value, (list, tuple)):
        raise InvalidSubjects("Invalid subjects_taught format")

    subjects: List[str] = []
    for item in value:
        if item not in SUBJECTS:
            raise InvalidSubjects(f"Unknown subject: {item!r}")
        if item not in subjects:
            subjects.append(item)

    if not subjects:
        raise InvalidSubjects("At least one subject is required")
    if len(subjects) > MAX_SUBJECTS:
        raise InvalidSubjects(f"Maximum {MAX_SUBJECTS} subjects allowed")
    return subjects


def check_schedule(schedule: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Check a full schedule; partial schedules are rejected, never merged.

    Raises:
        MissingField: If the schedule or any of its fields is absent
    """
    schedule = schedule or {}
    return {
        key: require(schedule.get(key), f"schedule.{key}")
        for key in SCHEDULE_FIELDS
    }


def check_parent_info(parent_info: Optional[Dict[str, Any]]) -> Dict[str, Optional[str]]:
    parent_info = parent_info or {}
    name = require(parent_info.get("name"), "parent_info.name")
    email = require(parent_info.get("email"), "parent_info.email")
    return {
        "name": name,
        "email": email,
        "phone": optional_str(parent_info.get("phone")),
    }


# ============== Consistency validator ==============

class ConsistencyValidator:
    """
    Checks referenced records exist and relationship invariants hold
    before a mutation is committed.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---- resolution ----

    def resolve_grade(self, grade_id: str, field: str = "grade") -> Grade:
        grade = registry.find(self.db, Grade, grade_id)
        if grade is None:
            raise UnknownGrade(grade_id, field=field)
        return grade

    def resolve_teacher(self, teacher_id: str, field: str = "teacher") -> Teacher:
        teacher = registry.find(self.db, Teacher, teacher_id)
        if teacher is None:
            raise UnknownTeacher(teacher_id, field=field)
        return teacher

    def resolve_group(self, group_id: str, field: str = "group") -> Group:
        group = registry.find(self.db, Group, group_id)
        if group is None:
            raise UnknownGroup(group_id, field=field)
        return group

    # ---- groups ----

    def check_group_create(
        self,
        name: Optional[str],
        teacher_id: Optional[str],
        subject: Optional[str],
        grade_id: Optional[str],
        schedule: Optional[Dict[str, Any]],
    ) -> Tuple[Teacher, Optional[Grade], Dict[str, str]]:
        """
        Check a new group.

        Order: required fields, grade (if supplied), teacher, subject taught.

        Returns:
            The resolved teacher, the resolved grade (or None) and the schedule

        Raises:
            MissingField, UnknownGrade, UnknownTeacher, SubjectNotTaught
        """
        require(name, "name")
        require(teacher_id, "teacher")
        subject = require(subject, "subject")
        schedule = check_schedule(schedule)

        grade = None
        if is_present(grade_id):
            grade = self.resolve_grade(grade_id)

        teacher = self.resolve_teacher(teacher_id)
        if subject not in (teacher.subjects_taught or []):
            raise SubjectNotTaught(teacher.id, subject)

        return teacher, grade, schedule

    # ---- grades ----

    def check_grade_delete(self, grade_id: str) -> Grade:
        """
        Check a grade can be deleted.

        Raises:
            NotFound: If the grade does not exist
            GradeInUse: If students are in the grade
            GradeHasGroups: If groups belong to the grade
            GradeHasPrograms: If programs target the grade
        """
        grade = registry.get_or_404(self.db, Grade, grade_id, "Grade")

        students = registry.count_students_in_grade(self.db, grade.id)
        if students:
            raise GradeInUse(grade.id, students)

        groups = registry.count_groups_in_grade(self.db, grade.id)
        if groups:
            raise GradeHasGroups(grade.id, groups)

        programs = registry.count_programs_in_grade(self.db, grade.id)
        if programs:
            raise GradeHasPrograms(grade.id, programs)

        return grade

    # ---- students ----

    def check_student_create(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        parent_info: Optional[Dict[str, Any]],
        grade_id: Optional[str],
        group_ids: Optional[Iterable[str]],
        teacher_id: Optional[str],
    ) -> Tuple[Grade, Teacher, List[Group], Dict[str, Optional[str]]]:
        """
        Check a new student.

        Every requested group must exist and be led by the declared teacher.

        Returns:
            The resolved grade, teacher, groups (deduplicated) and parent info

        Raises:
            MissingField, InvalidEmailFormat, UnknownGrade, UnknownTeacher,
            UnknownGroup, TeacherGroupMismatch
        """
        require(first_name, "first_name")
        require(last_name, "last_name")
        parent = check_parent_info(parent_info)
        require(grade_id, "grade")
        group_ids = require(list(group_ids or []), "groups")
        require(teacher_id, "teacher")
        parent["email"] = check_email(parent["email"], "parent_info.email")

        grade = self.resolve_grade(grade_id)
        teacher = self.resolve_teacher(teacher_id)

        groups: List[Group] = []
        for group_id in group_ids:
            group = self.resolve_group(group_id, field="groups")
            if group.teacher_id != teacher.id:
                raise TeacherGroupMismatch(teacher.id, group.id)
            if group not in groups:
                groups.append(group)

        return grade, teacher, groups, parent

    def check_add_group(
        self,
        student_id: str,
        group_id: Optional[str],
        teacher_id: Optional[str],
    ) -> Tuple[Student, Group]:
        """
        Check a group can be added to an existing student.

        Returns:
            The resolved student and group

        Raises:
            MissingField, NotFound, UnknownGroup, UnknownTeacher,
            TeacherGroupMismatch, GradeMismatch, AlreadyEnrolled
        """
        require(group_id, "group")
        require(teacher_id, "teacher")

        student = registry.get_or_404(self.db, Student, student_id, "Student")
        group = self.resolve_group(group_id)
        teacher = self.resolve_teacher(teacher_id)

        if group.teacher_id != teacher.id:
            raise TeacherGroupMismatch(teacher.id, group.id)
        if group.grade_id != student.grade_id:
            raise GradeMismatch(group.id, student.id)
        if group.id in student.group_ids:
            raise AlreadyEnrolled(student.id, group.id)

        return student, group

    # ---- registrations ----

    def check_registration_create(
        self,
        student_info: Optional[Dict[str, Any]],
        parent_info: Optional[Dict[str, Any]],
        group_id: Optional[str],
    ) -> Dict[str, Any]:
        """
        Check a public registration. The group stays an opaque reference.

        Raises:
            MissingField, InvalidEmailFormat
        """
        student_info = student_info or {}
        first_name = require(student_info.get("first_name"), "student_info.first_name")
        last_name = require(student_info.get("last_name"), "student_info.last_name")
        grade = require(student_info.get("grade"), "student_info.grade")
        parent = check_parent_info(parent_info)
        group_id = require(group_id, "group")
        parent["email"] = check_email(parent["email"], "parent_info.email")

        return {
            "student_first_name": first_name,
            "student_last_name": last_name,
            "student_grade": str(grade),
            "parent_name": parent["name"],
            "parent_email": parent["email"],
            "parent_phone": parent["phone"],
            "group_id": str(group_id),
        }

    @staticmethod
    def check_registration_status(status: Optional[str]) -> str:
        """
        Raises:
            MissingField: If no status is given
            InvalidStatus: If the status is not pending, accepted or rejected
        """
        status = require(status, "status")
        if status not in {s.value for s in RegistrationStatus}:
            raise InvalidStatus(status)
        return status

    # ---- teachers ----

    @staticmethod
    def check_teacher_profile(
        full_name: Optional[str],
        subjects_taught: Any,
        degree: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Tuple[str, List[str]]:
        """
        Check the profile fields shared by teacher creation and updates.

        Raises:
            MissingField, InvalidSubjects, FieldTooLong
        """
        full_name = require(full_name, "full_name")
        require(subjects_taught, "subjects_taught")
        subjects = parse_subjects(subjects_taught)
        check_max_length(degree, "degree", MAX_DEGREE_LENGTH)
        check_max_length(bio, "bio", MAX_BIO_LENGTH)
        return full_name, subjects

    def check_teacher_delete(self, teacher_id: str) -> Teacher:
        """
        Raises:
            NotFound: If the teacher does not exist
            TeacherHasGroups: If groups still name the teacher
        """
        teacher = registry.get_or_404(self.db, Teacher, teacher_id, "Teacher")
        groups = registry.count_groups_of_teacher(self.db, teacher.id)
        if groups:
            raise TeacherHasGroups(teacher.id, groups)
        return teacher

    # ---- programs ----

    def check_program(
        self,
        name: Optional[str],
        year_level_id: Optional[str],
        partial: bool = False,
    ) -> Tuple[Optional[str], Optional[Grade]]:
        """
        Check program fields. With ``partial`` only supplied fields are checked.

        Raises:
            MissingField, FieldTooLong, UnknownGrade
        """
        if not partial:
            require(name, "name")
            require(year_level_id, "year_level")
        name = optional_str(name)
        check_max_length(name, "name", MAX_PROGRAM_NAME_LENGTH)
        grade = None
        if is_present(year_level_id):
            grade = self.resolve_grade(year_level_id, field="year_level")
        return name, grade
