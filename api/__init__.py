"""API module for the Academy backend."""
from .routes import (
    users_router,
    teachers_router,
    grades_router,
    groups_router,
    students_router,
    registrations_router,
    programs_router,
)
from .errors import academy_error_handler, status_for
from .dependencies import get_images, get_token, require

routers = [
    users_router,
    teachers_router,
    grades_router,
    groups_router,
    students_router,
    registrations_router,
    programs_router,
]

__all__ = [
    # Routers
    "routers",
    "users_router",
    "teachers_router",
    "grades_router",
    "groups_router",
    "students_router",
    "registrations_router",
    "programs_router",
    # Errors
    "academy_error_handler",
    "status_for",
    # Dependencies
    "get_images",
    "get_token",
    "require",
]
