"""Database module."""
from .models import (
    Base,
    Role,
    Subject,
    RegistrationStatus,
    User,
    Grade,
    Teacher,
    TeacherImage,
    Group,
    Student,
    StudentGroup,
    Registration,
    Program,
)
from .connection import engine, SessionLocal, get_db, get_db_context, init_db

__all__ = [
    "Base",
    "Role",
    "Subject",
    "RegistrationStatus",
    "User",
    "Grade",
    "Teacher",
    "TeacherImage",
    "Group",
    "Student",
    "StudentGroup",
    "Registration",
    "Program",
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "init_db",
]
