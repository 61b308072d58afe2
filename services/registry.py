"""
Entity registry helpers for the Academy backend.
Lookups, dependent-reference counts and the unit-of-work wrapper shared by
every service operation.
"""
import functools
import logging
from typing import Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import Grade, Group, Student, Program
from .exceptions import AcademyError, NotFound, UpstreamFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Trim and lower-case an email; emails are case-insensitive keys."""
    if email is None:
        return None
    return email.strip().lower()


def find(db: Session, model: Type[T], entity_id: Optional[str]) -> Optional[T]:
    """Return the record with the given id, or None."""
    if not entity_id:
        return None
    return db.get(model, str(entity_id))


def get_or_404(db: Session, model: Type[T], entity_id: Optional[str], entity: str = None) -> T:
    """
    Return the record with the given id.

    Raises:
        NotFound: If no record has that id
    """
    record = find(db, model, entity_id)
    if record is None:
        raise NotFound(entity or model.__name__, entity_id)
    return record


def count_students_in_grade(db: Session, grade_id: str) -> int:
    return db.query(Student).filter(Student.grade_id == grade_id).count()


def count_groups_in_grade(db: Session, grade_id: str) -> int:
    return db.query(Group).filter(Group.grade_id == grade_id).count()


def count_programs_in_grade(db: Session, grade_id: str) -> int:
    return db.query(Program).filter(Program.year_level_id == grade_id).count()


def count_groups_of_teacher(db: Session, teacher_id: str) -> int:
    return db.query(Group).filter(Group.teacher_id == teacher_id).count()


def find_grade_by_name(db: Session, name: str) -> Optional[Grade]:
    return db.query(Grade).filter(Grade.name == name).first()


def unit_of_work(func):
    """
    Run a service operation as one bounded unit of work.

    Any failure rolls the session back so the store is left unchanged.
    Database errors are surfaced as UpstreamFailure.
    """
    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except AcademyError as exc:
            db.rollback()
            logger.info("Rejected %s: %s", func.__name__, exc.kind)
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Database failure in %s: %s", func.__name__, exc)
            raise UpstreamFailure("database") from exc
    return wrapper
