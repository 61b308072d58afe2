"""
Translation of service errors to HTTP responses.
"""
import logging
from typing import List, Tuple, Type

from fastapi import Request
from fastapi.responses import JSONResponse

from services import (
    AcademyError,
    AuthenticationError,
    AuthorizationError,
    NotFound,
    ReferenceNotFound,
    ValidationError,
    InvariantViolation,
    DeletionBlocked,
    ConflictError,
    UpstreamFailure,
)

logger = logging.getLogger(__name__)

# First matching class wins; subclasses must come before their bases.
STATUS_BY_ERROR: List[Tuple[Type[AcademyError], int]] = [
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFound, 404),
    (ReferenceNotFound, 400),
    (ValidationError, 400),
    (InvariantViolation, 400),
    (DeletionBlocked, 409),
    (ConflictError, 409),
    (UpstreamFailure, 503),
]


def status_for(exc: AcademyError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


async def academy_error_handler(request: Request, exc: AcademyError) -> JSONResponse:
    """Render a service error as JSON with its kind."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind, "field": exc.field},
        headers=headers,
    )
