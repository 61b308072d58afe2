"""
Services module for the Academy backend.

This module provides the session, role-policy and consistency layers plus
every operation on the school records. Each operation checks its input and
the relationships it touches before anything is written.
"""
from .exceptions import (
    AcademyError,
    AuthenticationError,
    MissingToken,
    MalformedToken,
    InvalidSignature,
    ExpiredToken,
    InvalidCredentials,
    AuthorizationError,
    Forbidden,
    ValidationError,
    MissingField,
    InvalidEmailFormat,
    WeakPassword,
    InvalidSubjects,
    FieldTooLong,
    InvalidStatus,
    ReferenceNotFound,
    NotFound,
    UnknownGrade,
    UnknownTeacher,
    UnknownGroup,
    InvariantViolation,
    SubjectNotTaught,
    TeacherGroupMismatch,
    GradeMismatch,
    AlreadyEnrolled,
    DeletionBlocked,
    GradeInUse,
    GradeHasGroups,
    GradeHasPrograms,
    TeacherHasGroups,
    ConflictError,
    EmailTaken,
    GradeExists,
    UpstreamFailure,
)

from .policy import (
    Tier,
    Capability,
    CAPABILITIES,
    is_allowed,
    is_public,
)

from .sessions import (
    Namespace,
    Principal,
    IssuedToken,
    issue_token,
    validate_token,
    authenticate,
    authorize,
)

from .consistency import ConsistencyValidator

from .images import (
    ImageStore,
    ImageStoreError,
    StoredImage,
    LocalImageStore,
    InMemoryImageStore,
    UploadBatch,
    get_image_store,
)

from .admins import (
    register_superadmin,
    register_admin,
    list_admins,
    update_admin,
    delete_admin,
)

from .grades import (
    list_grades,
    add_grade,
    delete_grade,
    get_students_by_grade,
    get_groups_by_grade,
)

from .groups import (
    list_groups,
    create_group,
    update_group_schedule,
    get_students_by_group,
    delete_group,
)

from .teachers import (
    list_teachers,
    create_teacher,
    update_teacher,
    update_teacher_profile,
    delete_teacher,
    get_teacher_profile,
    get_teacher_groups,
    manage_gallery_images,
)

from .students import (
    list_students,
    get_student,
    add_student,
    add_group_to_student,
    delete_student,
)

from .registrations import (
    list_registrations,
    create_registration,
    update_registration_status,
)

from .programs import (
    list_programs,
    create_program,
    update_program,
    delete_program,
)

__all__ = [
    # Exceptions
    "AcademyError",
    "AuthenticationError",
    "MissingToken",
    "MalformedToken",
    "InvalidSignature",
    "ExpiredToken",
    "InvalidCredentials",
    "AuthorizationError",
    "Forbidden",
    "ValidationError",
    "MissingField",
    "InvalidEmailFormat",
    "WeakPassword",
    "InvalidSubjects",
    "FieldTooLong",
    "InvalidStatus",
    "ReferenceNotFound",
    "NotFound",
    "UnknownGrade",
    "UnknownTeacher",
    "UnknownGroup",
    "InvariantViolation",
    "SubjectNotTaught",
    "TeacherGroupMismatch",
    "GradeMismatch",
    "AlreadyEnrolled",
    "DeletionBlocked",
    "GradeInUse",
    "GradeHasGroups",
    "GradeHasPrograms",
    "TeacherHasGroups",
    "ConflictError",
    "EmailTaken",
    "GradeExists",
    "UpstreamFailure",
    # Policy
    "Tier",
    "Capability",
    "CAPABILITIES",
    "is_allowed",
    "is_public",
    # Sessions
    "Namespace",
    "Principal",
    "IssuedToken",
    "issue_token",
    "validate_token",
    "authenticate",
    "authorize",
    # Consistency
    "ConsistencyValidator",
    # Images
    "ImageStore",
    "ImageStoreError",
    "StoredImage",
    "LocalImageStore",
    "InMemoryImageStore",
    "UploadBatch",
    "get_image_store",
    # Admins
    "register_superadmin",
    "register_admin",
    "list_admins",
    "update_admin",
    "delete_admin",
    # Grades
    "list_grades",
    "add_grade",
    "delete_grade",
    "get_students_by_grade",
    "get_groups_by_grade",
    # Groups
    "list_groups",
    "create_group",
    "update_group_schedule",
    "get_students_by_group",
    "delete_group",
    # Teachers
    "list_teachers",
    "create_teacher",
    "update_teacher",
    "update_teacher_profile",
    "delete_teacher",
    "get_teacher_profile",
    "get_teacher_groups",
    "manage_gallery_images",
    # Students
    "list_students",
    "get_student",
    "add_student",
    "add_group_to_student",
    "delete_student",
    # Registrations
    "list_registrations",
    "create_registration",
    "update_registration_status",
    # Programs
    "list_programs",
    "create_program",
    "update_program",
    "delete_program",
]
