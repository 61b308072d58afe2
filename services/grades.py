"""
Grade (year level) operations for the Academy backend.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import Grade, Group, Student
from . import registry
from .consistency import ConsistencyValidator, require
from .exceptions import GradeExists

logger = logging.getLogger(__name__)


@registry.unit_of_work
def list_grades(db: Session) -> List[Dict[str, Any]]:
    """Return all grades ordered by name."""
    grades = db.query(Grade).order_by(Grade.name).all()
    return [g.to_dict() for g in grades]


@registry.unit_of_work
def add_grade(db: Session, name: Optional[str]) -> Dict[str, Any]:
    """
    Add a new grade.

    Args:
        db: Database session
        name: Grade name (trimmed, unique)

    Returns:
        Created grade data

    Raises:
        MissingField: If the name is empty
        GradeExists: If a grade with that name already exists
    """
    name = require(name, "name")
    if registry.find_grade_by_name(db, name):
        raise GradeExists(name)

    grade = Grade(name=name)
    db.add(grade)
    try:
        db.commit()
    except IntegrityError as exc:
        raise GradeExists(name) from exc
    db.refresh(grade)

    logger.info("Created grade %s (%s)", grade.id, grade.name)
    return {
        "success": True,
        "message": "Grade added successfully",
        "grade": grade.to_dict(),
    }


@registry.unit_of_work
def delete_grade(db: Session, grade_id: str) -> Dict[str, Any]:
    """
    Delete a grade that nothing references.

    Raises:
        NotFound: If the grade does not exist
        GradeInUse: If students are in the grade
        GradeHasGroups: If groups belong to the grade
        GradeHasPrograms: If programs target the grade
    """
    grade = ConsistencyValidator(db).check_grade_delete(grade_id)
    db.delete(grade)
    db.commit()

    logger.info("Deleted grade %s", grade_id)
    return {"success": True, "message": "Grade deleted successfully"}


@registry.unit_of_work
def get_students_by_grade(db: Session, grade_id: str) -> List[Dict[str, Any]]:
    """Return the students in a grade (names only)."""
    students = (
        db.query(Student)
        .filter(Student.grade_id == grade_id)
        .order_by(Student.last_name, Student.first_name)
        .all()
    )
    return [
        {"id": s.id, "first_name": s.first_name, "last_name": s.last_name}
        for s in students
    ]


@registry.unit_of_work
def get_groups_by_grade(db: Session, grade_id: str) -> List[Dict[str, Any]]:
    """Return the groups belonging to a grade."""
    groups = db.query(Group).filter(Group.grade_id == grade_id).order_by(Group.name).all()
    return [g.to_dict() for g in groups]
