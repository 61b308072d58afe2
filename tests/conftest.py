"""
Shared fixtures for the Academy backend tests.
"""
import os

# Must be set before the application modules read their settings.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["PASSWORD_SCHEMES"] = '["pbkdf2_sha256"]'
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, Grade, Teacher, Group, Student, StudentGroup, User
from services import InMemoryImageStore
from services.passwords import hash_password

PASSWORD = "secret123"


@pytest.fixture
def engine():
    """A fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def images():
    return InMemoryImageStore()


@pytest.fixture
def make_grade(db):
    def factory(name="7th"):
        grade = Grade(name=name)
        db.add(grade)
        db.commit()
        return grade
    return factory


@pytest.fixture
def make_teacher(db):
    def factory(email="teacher@academy.test", subjects=("Math",), full_name="Karim Haddad"):
        teacher = Teacher(
            full_name=full_name,
            email=email,
            password_digest=hash_password(PASSWORD),
            subjects_taught=list(subjects),
        )
        db.add(teacher)
        db.commit()
        return teacher
    return factory


@pytest.fixture
def make_group(db):
    def factory(teacher, grade=None, subject="Math", name="Math 7A"):
        group = Group(
            name=name,
            teacher_id=teacher.id,
            subject=subject,
            grade_id=grade.id if grade else None,
            schedule_day="Monday",
            schedule_starting_time="16:00",
            schedule_ending_time="17:30",
        )
        db.add(group)
        db.commit()
        return group
    return factory


@pytest.fixture
def make_student(db):
    def factory(grade, groups=(), first_name="Omar", last_name="Khalil"):
        student = Student(
            first_name=first_name,
            last_name=last_name,
            parent_name="Samir Khalil",
            parent_email="samir@example.test",
            grade_id=grade.id,
        )
        student.enrollments = [StudentGroup(group_id=g.id) for g in groups]
        db.add(student)
        db.commit()
        return student
    return factory


@pytest.fixture
def make_user(db):
    def factory(email="admin@academy.test", role="admin", full_name="Front Desk"):
        user = User(
            full_name=full_name,
            email=email,
            password_digest=hash_password(PASSWORD),
            role=role,
        )
        db.add(user)
        db.commit()
        return user
    return factory


@pytest.fixture
def password():
    """Plain password of every principal made by the factories."""
    return PASSWORD


@pytest.fixture
def parent_info():
    return {"name": "Samir Khalil", "email": "Samir@Example.test", "phone": "0600000001"}


@pytest.fixture
def schedule():
    return {"day": "Monday", "starting_time": "16:00", "ending_time": "17:30"}
