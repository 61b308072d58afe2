"""
Password hashing for the Academy backend.
Wraps passlib's CryptContext; hashing failures surface as UpstreamFailure.
"""
import logging
from functools import lru_cache

from passlib.context import CryptContext

from config import settings
from .exceptions import UpstreamFailure, WeakPassword

logger = logging.getLogger(__name__)


@lru_cache()
def get_password_context() -> CryptContext:
    """Get the cached CryptContext built from the configured schemes."""
    return CryptContext(schemes=settings.password_schemes, deprecated="auto")


def hash_password(password: str) -> str:
    try:
        return get_password_context().hash(password)
    except (ValueError, TypeError) as exc:
        logger.error("Password hashing failed: %s", exc)
        raise UpstreamFailure("password_hashing") from exc


def verify_password(password: str, digest: str) -> bool:
    """Check a plain password against a stored digest."""
    try:
        return get_password_context().verify(password, digest)
    except (ValueError, TypeError) as exc:
        logger.error("Password verification failed: %s", exc)
        raise UpstreamFailure("password_hashing") from exc


def dummy_verify() -> None:
    """Spend the time of one verification when there is no digest to check."""
    get_password_context().dummy_verify()


def check_password_strength(password: str) -> None:
    """
    Enforce the minimum password length.

    Raises:
        WeakPassword: If the password is shorter than the configured minimum
    """
    if len(password or "") < settings.min_password_length:
        raise WeakPassword(settings.min_password_length)
