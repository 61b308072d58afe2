"""
Group (class section) operations for the Academy backend.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.orm import Session

from database import Group, Student, StudentGroup
from . import registry
from .consistency import ConsistencyValidator, check_schedule, require

logger = logging.getLogger(__name__)


@registry.unit_of_work
def list_groups(db: Session) -> List[Dict[str, Any]]:
    """Return all groups with their teacher and grade."""
    groups = db.query(Group).order_by(Group.name).all()
    return [g.to_dict() for g in groups]


@registry.unit_of_work
def create_group(
    db: Session,
    name: Optional[str],
    teacher_id: Optional[str],
    subject: Optional[str],
    schedule: Optional[Dict[str, Any]],
    grade_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a new group.

    Args:
        db: Database session
        name: Group name
        teacher_id: ID of the teacher leading the group
        subject: Subject taught; must be one of the teacher's subjects
        schedule: Dict with day, starting_time and ending_time
        grade_id: ID of the grade (optional)

    Returns:
        Created group data

    Raises:
        MissingField: If a required field is absent
        UnknownGrade: If the grade does not exist
        UnknownTeacher: If the teacher does not exist
        SubjectNotTaught: If the teacher does not teach the subject
    """
    teacher, grade, schedule = ConsistencyValidator(db).check_group_create(
        name, teacher_id, subject, grade_id, schedule
    )

    group = Group(
        name=name.strip(),
        teacher_id=teacher.id,
        subject=subject.strip(),
        grade_id=grade.id if grade else None,
        schedule_day=schedule["day"],
        schedule_starting_time=schedule["starting_time"],
        schedule_ending_time=schedule["ending_time"],
    )
    db.add(group)
    db.commit()
    db.refresh(group)

    logger.info("Created group %s for teacher %s", group.id, teacher.id)
    return group.to_dict()


@registry.unit_of_work
def update_group_schedule(
    db: Session,
    group_id: str,
    schedule: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Replace a group's schedule. Partial schedules are rejected.

    Raises:
        MissingField: If any schedule field is absent
        NotFound: If the group does not exist
    """
    schedule = check_schedule(schedule)
    group = registry.get_or_404(db, Group, group_id, "Group")

    group.schedule_day = schedule["day"]
    group.schedule_starting_time = schedule["starting_time"]
    group.schedule_ending_time = schedule["ending_time"]
    db.commit()
    db.refresh(group)

    logger.info("Updated schedule of group %s", group.id)
    return group.to_dict()


@registry.unit_of_work
def get_students_by_group(db: Session, group_id: str) -> List[Dict[str, Any]]:
    """
    Return the students enrolled in a group.

    Raises:
        NotFound: If the group does not exist
    """
    group = registry.get_or_404(db, Group, group_id, "Group")
    students = (
        db.query(Student)
        .join(StudentGroup, Student.id == StudentGroup.student_id)
        .filter(StudentGroup.group_id == group.id)
        .order_by(Student.last_name, Student.first_name)
        .all()
    )
    return [
        {
            "id": s.id,
            "first_name": s.first_name,
            "last_name": s.last_name,
            "parent_info": {
                "name": s.parent_name,
                "email": s.parent_email,
                "phone": s.parent_phone,
            },
            "grade": s.grade.to_dict() if s.grade else None,
        }
        for s in students
    ]


@registry.unit_of_work
def delete_group(db: Session, group_id: str) -> Dict[str, Any]:
    """
    Delete a group.

    Deletion is not blocked by enrolled students or registrations. The group
    is removed from every student's group set; registrations keep their
    opaque reference.

    Raises:
        NotFound: If the group does not exist
    """
    group = registry.get_or_404(db, Group, require(group_id, "group"), "Group")

    removed = (
        db.query(StudentGroup)
        .filter(StudentGroup.group_id == group.id)
        .delete(synchronize_session=False)
    )
    db.delete(group)
    db.commit()

    logger.info("Deleted group %s (%d enrollments removed)", group_id, removed)
    return {"success": True, "message": "Group deleted successfully"}
