"""
Student operations for the Academy backend.
"""
import logging
from typing import Dict, Any, List, Optional, Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import Student, StudentGroup
from . import registry
from .consistency import ConsistencyValidator
from .exceptions import AlreadyEnrolled

logger = logging.getLogger(__name__)


@registry.unit_of_work
def list_students(db: Session) -> List[Dict[str, Any]]:
    """Return all students with their grade and groups."""
    students = db.query(Student).order_by(Student.last_name, Student.first_name).all()
    return [s.to_dict() for s in students]


@registry.unit_of_work
def get_student(db: Session, student_id: str) -> Dict[str, Any]:
    """
    Raises:
        NotFound: If the student does not exist
    """
    return registry.get_or_404(db, Student, student_id, "Student").to_dict()


@registry.unit_of_work
def add_student(
    db: Session,
    first_name: Optional[str],
    last_name: Optional[str],
    parent_info: Optional[Dict[str, Any]],
    grade_id: Optional[str],
    group_ids: Optional[Iterable[str]],
    teacher_id: Optional[str],
) -> Dict[str, Any]:
    """
    Add a new student enrolled in one or more groups.

    Args:
        db: Database session
        first_name: Student first name
        last_name: Student last name
        parent_info: Dict with name, email and optional phone
        grade_id: ID of the student's grade
        group_ids: IDs of the groups to enroll in (at least one)
        teacher_id: ID of the teacher declared for the enrollment

    Returns:
        Created student data

    Raises:
        MissingField: If a required field is absent
        InvalidEmailFormat: If the parent email is malformed
        UnknownGrade / UnknownTeacher / UnknownGroup: If a reference does not resolve
        TeacherGroupMismatch: If a group is not led by the declared teacher
    """
    grade, teacher, groups, parent = ConsistencyValidator(db).check_student_create(
        first_name, last_name, parent_info, grade_id, group_ids, teacher_id
    )

    student = Student(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        parent_name=parent["name"],
        parent_email=parent["email"],
        parent_phone=parent["phone"],
        grade_id=grade.id,
    )
    student.enrollments = [StudentGroup(group_id=g.id) for g in groups]
    db.add(student)
    db.commit()
    db.refresh(student)

    logger.info(
        "Created student %s in grade %s with %d groups",
        student.id, grade.id, len(groups),
    )
    return {
        "success": True,
        "message": "Student added successfully",
        "student": student.to_dict(),
    }


@registry.unit_of_work
def add_group_to_student(
    db: Session,
    student_id: str,
    group_id: Optional[str],
    teacher_id: Optional[str],
) -> Dict[str, Any]:
    """
    Enroll an existing student in one more group.

    A second enrollment in the same group is an error, not a no-op.

    Raises:
        MissingField: If group or teacher is absent
        NotFound: If the student does not exist
        UnknownGroup / UnknownTeacher: If a reference does not resolve
        TeacherGroupMismatch: If the group is not led by the teacher
        GradeMismatch: If the group is not in the student's grade
        AlreadyEnrolled: If the student is already in the group
    """
    student, group = ConsistencyValidator(db).check_add_group(student_id, group_id, teacher_id)

    db.add(StudentGroup(student_id=student.id, group_id=group.id))
    try:
        db.commit()
    except IntegrityError as exc:
        # Enrolled concurrently between the check and the write
        raise AlreadyEnrolled(student.id, group.id) from exc
    db.refresh(student)

    logger.info("Added group %s to student %s", group.id, student.id)
    return {
        "success": True,
        "message": "Group added to student successfully",
        "student": student.to_dict(),
    }


@registry.unit_of_work
def delete_student(db: Session, student_id: str) -> Dict[str, Any]:
    """
    Raises:
        NotFound: If the student does not exist
    """
    student = registry.get_or_404(db, Student, student_id, "Student")
    db.delete(student)
    db.commit()

    logger.info("Deleted student %s", student_id)
    return {"success": True, "message": "Student deleted successfully"}
