"""
Pydantic schemas for API requests and responses.

Request fields are optional so that absent input is reported as MissingField
by the services rather than rejected by the framework.
"""
from datetime import datetime
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field


# Request schemas
class LoginRequest(BaseModel):
    """Credentials for either login namespace."""
    email: Optional[str] = Field(None, description="Login email (case-insensitive)")
    password: Optional[str] = Field(None, description="Plain password")


class RegisterUserRequest(BaseModel):
    """Request to register a superadmin or an admin."""
    full_name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Login email")
    password: Optional[str] = Field(None, description="Plain password")


class UpdateAdminRequest(BaseModel):
    full_name: Optional[str] = Field(None, description="New display name")
    password: Optional[str] = Field(None, description="New password")


class GradeCreateRequest(BaseModel):
    name: Optional[str] = Field(None, description="Grade name, e.g. '7th'")


class Schedule(BaseModel):
    """Weekly slot of a group."""
    day: Optional[str] = None
    starting_time: Optional[str] = None
    ending_time: Optional[str] = None


class GroupCreateRequest(BaseModel):
    """Request to create a group."""
    name: Optional[str] = Field(None, description="Group name")
    teacher: Optional[str] = Field(None, description="ID of the teaching teacher")
    subject: Optional[str] = Field(None, description="Subject taught to the group")
    grade: Optional[str] = Field(None, description="ID of the grade (optional)")
    schedule: Optional[Schedule] = Field(None, description="Weekly schedule")


class ScheduleUpdateRequest(BaseModel):
    schedule: Optional[Schedule] = None


class ParentInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class StudentCreateRequest(BaseModel):
    """Request to create a student enrolled in one or more groups."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    parent_info: Optional[ParentInfo] = None
    grade: Optional[str] = Field(None, description="ID of the student's grade")
    groups: Optional[List[str]] = Field(None, description="IDs of the groups to enroll in")
    teacher: Optional[str] = Field(None, description="ID of the teacher of every group")


class AddGroupRequest(BaseModel):
    group: Optional[str] = Field(None, description="ID of the group to add")
    teacher: Optional[str] = Field(None, description="ID of the group's teacher")


class StudentInfo(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    grade: Optional[str] = Field(None, description="Free-text grade of the applicant")


class RegistrationCreateRequest(BaseModel):
    """Public registration request."""
    student_info: Optional[StudentInfo] = None
    parent_info: Optional[ParentInfo] = None
    group: Optional[str] = Field(None, description="ID of the requested group")


class RegistrationStatusRequest(BaseModel):
    status: Optional[str] = Field(None, description="pending, accepted or rejected")


# Response schemas
class TokenResponse(BaseModel):
    """Session token issued at login."""
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: Dict[str, Any]


class ErrorResponse(BaseModel):
    """Body of every service error response (see api/errors.py)."""
    detail: str
    kind: str
    field: Optional[str] = None
