"""
Database models for the Academy backend.
Defines the SQLAlchemy models for principals, the core school records
(grades, groups, teachers, students, registrations) and programs.
"""
import uuid
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Enum, ForeignKey, JSON
)
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def new_id() -> str:
    """Generate an opaque identifier for a new record."""
    return str(uuid.uuid4())


class Role(str, PyEnum):
    """Principal roles."""
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    TEACHER = "teacher"


class Subject(str, PyEnum):
    """Subjects a teacher can teach and a group can cover."""
    MATH = "Math"
    PHYSICS = "Physics"
    SCIENCE = "Science"
    ARABIC = "Arabic"
    ENGLISH = "English"
    FRENCH = "French"
    ISLAMIC = "Islamic"
    HISTORY = "History"
    GEOGRAPHY = "Geography"
    PHILOSOPHY = "Philosophy"


class RegistrationStatus(str, PyEnum):
    """Review states of a public registration."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class User(Base):
    """
    Administrative principals (superadmins and admins).

    Attributes:
        id: Unique identifier
        full_name: Display name
        email: Login email, stored trimmed and lower-cased
        password_digest: Output of the password hashing primitive
        role: Either 'superadmin' or 'admin'
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True)
    password_digest = Column(String(255), nullable=False)
    role = Column(Enum("superadmin", "admin", name="user_role"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

    def to_dict(self):
        """Convert admin to dictionary for API responses (no digest)."""
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Grade(Base):
    """
    Grades (year levels) table.

    Attributes:
        id: Unique identifier
        name: Grade name (e.g., "7th"), unique
    """
    __tablename__ = "grades"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=func.now())

    def __repr__(self):
        return f"<Grade(id={self.id}, name='{self.name}')>"

    def to_dict(self):
        return {"id": self.id, "name": self.name}


class Teacher(Base):
    """
    Teachers table. Teachers are principals in their own login namespace.

    Attributes:
        id: Unique identifier
        full_name: Teacher's full name
        email: Login email, unique, stored trimmed and lower-cased
        password_digest: Output of the password hashing primitive
        subjects_taught: One or two Subject values
        degree: Optional degree (max 100 chars)
        bio: Optional biography (max 500 chars)
        photo_url / photo_id: Optional profile photo in the image store
    """
    __tablename__ = "teachers"

    id = Column(String(36), primary_key=True, default=new_id)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_digest = Column(String(255), nullable=False)
    subjects_taught = Column(JSON, nullable=False, default=list)
    degree = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)
    photo_url = Column(String(500), nullable=True)
    photo_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    # Relationships
    gallery_images = relationship(
        "TeacherImage",
        back_populates="teacher",
        order_by="TeacherImage.position",
        cascade="all, delete-orphan",
    )
    # Derived on read from Group.teacher_id; never written through.
    groups = relationship("Group", viewonly=True)

    @property
    def role(self) -> str:
        return Role.TEACHER.value

    def __repr__(self):
        return f"<Teacher(id={self.id}, email='{self.email}')>"

    def to_dict(self, include_groups: bool = False):
        """Convert teacher to dictionary for API responses (no digest)."""
        data = {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role,
            "subjects_taught": list(self.subjects_taught or []),
            "degree": self.degree,
            "bio": self.bio,
            "photo": {"url": self.photo_url, "id": self.photo_id} if self.photo_url else None,
            "gallery_images": [img.to_dict() for img in self.gallery_images],
        }
        if include_groups:
            data["groups"] = [g.to_dict() for g in self.groups]
        return data


class TeacherImage(Base):
    """
    Ordered gallery images of a teacher.

    Attributes:
        teacher_id: Owning teacher
        position: Order within the gallery
        url: Public URL returned by the image store
        external_id: Identifier in the image store, used for deletion
    """
    __tablename__ = "teacher_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(String(36), ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    url = Column(String(500), nullable=False)
    external_id = Column(String(255), nullable=False)

    teacher = relationship("Teacher", back_populates="gallery_images")

    def to_dict(self):
        return {"url": self.url, "external_id": self.external_id}


class Group(Base):
    """
    Groups (class sections) table.

    Attributes:
        id: Unique identifier
        name: Group name
        teacher_id: Teacher leading the group (required)
        subject: Subject taught in the group, one of the teacher's subjects
        grade_id: Grade the group belongs to (optional)
        schedule_day / schedule_starting_time / schedule_ending_time: Weekly slot
    """
    __tablename__ = "groups"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    teacher_id = Column(String(36), ForeignKey("teachers.id"), nullable=False)
    subject = Column(String(50), nullable=False)
    grade_id = Column(String(36), ForeignKey("grades.id"), nullable=True)
    schedule_day = Column(String(20), nullable=False)
    schedule_starting_time = Column(String(20), nullable=False)
    schedule_ending_time = Column(String(20), nullable=False)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    # Relationships
    teacher = relationship("Teacher")
    grade = relationship("Grade")

    def __repr__(self):
        return f"<Group(id={self.id}, name='{self.name}', subject='{self.subject}')>"

    def to_dict(self):
        """Convert group to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "subject": self.subject,
            "teacher": {
                "id": self.teacher.id,
                "full_name": self.teacher.full_name,
                "subjects_taught": list(self.teacher.subjects_taught or []),
            } if self.teacher else None,
            "grade": self.grade.to_dict() if self.grade else None,
            "schedule": {
                "day": self.schedule_day,
                "starting_time": self.schedule_starting_time,
                "ending_time": self.schedule_ending_time,
            },
        }


class StudentGroup(Base):
    """
    Association table linking students to their groups.
    The composite primary key forbids enrolling a student twice in a group.

    Attributes:
        student_id: Foreign key to students table
        group_id: Foreign key to groups table
    """
    __tablename__ = "student_groups"

    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    group_id = Column(String(36), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=func.now())

    # Relationships
    student = relationship("Student", back_populates="enrollments")
    group = relationship("Group")

    def __repr__(self):
        return f"<StudentGroup(student_id={self.student_id}, group_id={self.group_id})>"


class Student(Base):
    """
    Students table.

    Attributes:
        id: Unique identifier
        first_name / last_name: Student name
        parent_name / parent_email / parent_phone: Parent contact
        grade_id: Grade the student is in (required)
    """
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=new_id)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    parent_name = Column(String(255), nullable=False)
    parent_email = Column(String(255), nullable=False)
    parent_phone = Column(String(50), nullable=True)
    grade_id = Column(String(36), ForeignKey("grades.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    # Relationships
    grade = relationship("Grade")
    enrollments = relationship(
        "StudentGroup",
        back_populates="student",
        order_by="StudentGroup.created_at",
        cascade="all, delete-orphan",
    )

    @property
    def group_ids(self) -> list:
        return [e.group_id for e in self.enrollments]

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.first_name} {self.last_name}')>"

    def to_dict(self):
        """Convert student to dictionary for API responses."""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "parent_info": {
                "name": self.parent_name,
                "email": self.parent_email,
                "phone": self.parent_phone,
            },
            "grade": self.grade.to_dict() if self.grade else None,
            "groups": [e.group.to_dict() for e in self.enrollments if e.group is not None],
        }


class Registration(Base):
    """
    Public enrollment requests awaiting admin review.
    The group is kept as an opaque reference; it is not validated on submission.

    Attributes:
        student_first_name / student_last_name / student_grade: Student info (grade is free text)
        parent_name / parent_email / parent_phone: Parent contact
        group_id: Requested group
        status: pending, accepted or rejected
    """
    __tablename__ = "registrations"

    id = Column(String(36), primary_key=True, default=new_id)
    student_first_name = Column(String(255), nullable=False)
    student_last_name = Column(String(255), nullable=False)
    student_grade = Column(String(100), nullable=False)
    parent_name = Column(String(255), nullable=False)
    parent_email = Column(String(255), nullable=False)
    parent_phone = Column(String(50), nullable=True)
    group_id = Column(String(36), nullable=False)
    status = Column(
        Enum("pending", "accepted", "rejected", name="registration_status"),
        nullable=False,
        default="pending",
    )
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    group = relationship(
        "Group",
        primaryjoin="foreign(Registration.group_id) == Group.id",
        viewonly=True,
    )

    def __repr__(self):
        return f"<Registration(id={self.id}, status='{self.status}')>"

    def to_dict(self):
        """Convert registration to dictionary for API responses."""
        return {
            "id": self.id,
            "student_info": {
                "first_name": self.student_first_name,
                "last_name": self.student_last_name,
                "grade": self.student_grade,
            },
            "parent_info": {
                "name": self.parent_name,
                "email": self.parent_email,
                "phone": self.parent_phone,
            },
            "group_id": self.group_id,
            "group": self.group.to_dict() if self.group else None,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Program(Base):
    """
    Programs offered per year level.

    Attributes:
        name: Program name (1-100 chars)
        year_level_id: Grade the program targets
        image_url / image_id: Optional image in the image store
    """
    __tablename__ = "programs"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    year_level_id = Column(String(36), ForeignKey("grades.id"), nullable=False)
    image_url = Column(String(500), nullable=True)
    image_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    year_level = relationship("Grade")

    def __repr__(self):
        return f"<Program(id={self.id}, name='{self.name}')>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "year_level": self.year_level.to_dict() if self.year_level else None,
            "image": self.image_url,
        }
