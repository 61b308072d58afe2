"""
Custom exceptions for the Academy backend.

Every error carries a stable ``kind`` so the request layer can map it to its
own status codes without inspecting messages.
"""


class AcademyError(Exception):
    """Base class for every error raised by the services layer."""

    kind = "AcademyError"

    def __init__(self, message: str, field: str = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


# ============== Authentication ==============

class AuthenticationError(AcademyError):
    """Raised when no valid principal can be established (Unauthenticated)."""

    kind = "Unauthenticated"


class MissingToken(AuthenticationError):
    kind = "MissingToken"

    def __init__(self):
        super().__init__("No token provided")


class MalformedToken(AuthenticationError):
    kind = "MalformedToken"

    def __init__(self, reason: str = "Malformed token"):
        super().__init__(reason)


class InvalidSignature(AuthenticationError):
    kind = "InvalidSignature"

    def __init__(self):
        super().__init__("Invalid token")


class ExpiredToken(AuthenticationError):
    kind = "ExpiredToken"

    def __init__(self):
        super().__init__("Token expired")


class InvalidCredentials(AuthenticationError):
    """Unknown email and wrong password produce the same error."""

    kind = "InvalidCredentials"

    def __init__(self):
        super().__init__("Invalid email or password")


# ============== Authorization ==============

class AuthorizationError(AcademyError):
    """Raised when a principal attempts an action its role does not allow."""

    kind = "Forbidden"

    def __init__(self, message: str, principal_id: str = None, action: str = None):
        self.principal_id = principal_id
        self.action = action
        super().__init__(message)


class Forbidden(AuthorizationError):

    def __init__(self, role: str, action: str, principal_id: str = None):
        self.role = role
        message = f"Access denied: role '{role}' cannot perform '{action}'"
        super().__init__(message, principal_id=principal_id, action=action)


# ============== Input validation ==============

class ValidationError(AcademyError):
    """Raised when input validation fails."""

    kind = "ValidationError"


class MissingField(ValidationError):
    kind = "MissingField"

    def __init__(self, field: str):
        super().__init__(f"Field '{field}' is required", field=field)


class InvalidEmailFormat(ValidationError):
    kind = "InvalidEmailFormat"

    def __init__(self, field: str = "email"):
        super().__init__("Invalid email format", field=field)


class WeakPassword(ValidationError):
    kind = "WeakPassword"

    def __init__(self, min_length: int):
        super().__init__(f"Password must be at least {min_length} characters", field="password")


class InvalidSubjects(ValidationError):
    kind = "InvalidSubjects"

    def __init__(self, reason: str):
        super().__init__(reason, field="subjects_taught")


class FieldTooLong(ValidationError):
    kind = "FieldTooLong"

    def __init__(self, field: str, max_length: int):
        super().__init__(f"Field '{field}' cannot exceed {max_length} characters", field=field)


class InvalidStatus(ValidationError):
    kind = "InvalidStatus"

    def __init__(self, status):
        super().__init__(f"Invalid registration status: {status!r}", field="status")


# ============== References ==============

class ReferenceNotFound(AcademyError):
    """Raised when a referenced id does not resolve."""

    kind = "NotFound"
    entity = "Record"

    def __init__(self, entity_id, field: str = None):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} with id {entity_id} not found", field=field)


class NotFound(ReferenceNotFound):

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        super().__init__(entity_id)


class UnknownGrade(ReferenceNotFound):
    kind = "UnknownGrade"
    entity = "Grade"

    def __init__(self, entity_id, field: str = "grade"):
        super().__init__(entity_id, field=field)


class UnknownTeacher(ReferenceNotFound):
    kind = "UnknownTeacher"
    entity = "Teacher"

    def __init__(self, entity_id, field: str = "teacher"):
        super().__init__(entity_id, field=field)


class UnknownGroup(ReferenceNotFound):
    kind = "UnknownGroup"
    entity = "Group"

    def __init__(self, entity_id, field: str = "group"):
        super().__init__(entity_id, field=field)


# ============== Relationship invariants ==============

class InvariantViolation(AcademyError):
    """Raised when a mutation would break a relationship between records."""

    kind = "InvariantViolation"


class SubjectNotTaught(InvariantViolation):
    kind = "SubjectNotTaught"

    def __init__(self, teacher_id: str, subject: str):
        self.teacher_id = teacher_id
        self.subject = subject
        super().__init__(f"Teacher {teacher_id} does not teach {subject}", field="subject")


class TeacherGroupMismatch(InvariantViolation):
    kind = "TeacherGroupMismatch"

    def __init__(self, teacher_id: str, group_id: str):
        self.teacher_id = teacher_id
        self.group_id = group_id
        super().__init__(f"Teacher {teacher_id} does not teach group {group_id}", field="teacher")


class GradeMismatch(InvariantViolation):
    kind = "GradeMismatch"

    def __init__(self, group_id: str, student_id: str):
        self.group_id = group_id
        self.student_id = student_id
        super().__init__(
            f"Grade of group {group_id} does not match grade of student {student_id}",
            field="group",
        )


class AlreadyEnrolled(InvariantViolation):
    kind = "AlreadyEnrolled"

    def __init__(self, student_id: str, group_id: str):
        self.student_id = student_id
        self.group_id = group_id
        super().__init__(f"Student {student_id} is already in group {group_id}", field="group")


# ============== Deletion guards ==============

class DeletionBlocked(AcademyError):
    """Raised when dependent records still reference the record being deleted."""

    kind = "DeletionBlocked"
    dependents = "records"

    def __init__(self, entity_id: str, count: int):
        self.entity_id = entity_id
        self.count = count
        super().__init__(f"Cannot delete {entity_id}: {count} {self.dependents} still reference it")


class GradeInUse(DeletionBlocked):
    kind = "GradeInUse"
    dependents = "students"


class GradeHasGroups(DeletionBlocked):
    kind = "GradeHasGroups"
    dependents = "groups"


class GradeHasPrograms(DeletionBlocked):
    kind = "GradeHasPrograms"
    dependents = "programs"


class TeacherHasGroups(DeletionBlocked):
    kind = "TeacherHasGroups"
    dependents = "groups"


# ============== Conflicts ==============

class ConflictError(AcademyError):
    """Raised when a unique value is already taken."""

    kind = "Conflict"


class EmailTaken(ConflictError):
    kind = "EmailTaken"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already in use", field="email")


class GradeExists(ConflictError):
    kind = "GradeExists"

    def __init__(self, name: str):
        super().__init__(f"Grade '{name}' already exists", field="name")


# ============== Collaborators ==============

class UpstreamFailure(AcademyError):
    """Raised when a collaborator (database, image store, hashing) fails."""

    kind = "UpstreamFailure"

    def __init__(self, dependency: str):
        self.dependency = dependency
        super().__init__(f"Upstream dependency failed: {dependency}")
