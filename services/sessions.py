"""
Session issuance and validation for the Academy backend.

Tokens are signed JWTs carrying the principal id and role. Validation is
stateless: there is no server-side session store, so a token stays valid
until it expires.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Dict, Any

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from config import settings
from database import User, Teacher
from .exceptions import (
    MissingToken,
    MalformedToken,
    InvalidSignature,
    ExpiredToken,
    InvalidCredentials,
    Forbidden,
)
from .passwords import verify_password, dummy_verify
from .policy import Capability, is_allowed, is_public
from .registry import normalize_email

logger = logging.getLogger(__name__)

_ROLES = {"superadmin", "admin", "teacher"}


class Namespace(str, Enum):
    """Login namespaces: administrative users and teachers."""
    STAFF = "staff"
    TEACHER = "teacher"


@dataclass(frozen=True)
class Principal:
    """An authenticated actor."""
    principal_id: str
    role: str


@dataclass(frozen=True)
class IssuedToken:
    """A minted session token with its resolved principal."""
    token: str
    principal: Principal
    expires_at: datetime
    profile: Dict[str, Any]


def issue_token(
    principal: Principal,
    issued_at: Optional[datetime] = None,
    profile: Optional[Dict[str, Any]] = None,
) -> IssuedToken:
    """
    Mint a signed session token for a principal.

    Args:
        principal: The principal to encode
        issued_at: Issue time (defaults to now, UTC)
        profile: Public profile returned alongside the token

    Returns:
        IssuedToken with the encoded token and its expiry
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(hours=settings.token_ttl_hours)
    claims = {
        "sub": principal.principal_id,
        "role": principal.role,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return IssuedToken(token=token, principal=principal, expires_at=expires_at, profile=profile or {})


def validate_token(token: Optional[str]) -> Principal:
    """
    Verify a session token and rebuild its principal.

    Raises:
        MissingToken: If no token was supplied
        MalformedToken: If the token cannot be decoded or lacks claims
        InvalidSignature: If the signature does not verify
        ExpiredToken: If the token is past its expiry
    """
    if not token:
        raise MissingToken()

    try:
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise MalformedToken() from exc

    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise ExpiredToken() from exc
    except JWTError as exc:
        raise InvalidSignature() from exc

    principal_id = claims.get("sub")
    role = claims.get("role")
    if not principal_id:
        raise MalformedToken("Invalid token: principal id missing")
    if role not in _ROLES:
        raise MalformedToken("Invalid token: unknown role")
    return Principal(principal_id=principal_id, role=role)


def authenticate(
    db: Session,
    email: Optional[str],
    password: Optional[str],
    namespace: Namespace = Namespace.STAFF,
) -> IssuedToken:
    """
    Verify credentials and mint a session token.

    Unknown emails and wrong passwords raise the same error.

    Args:
        db: Database session
        email: Login email (case-insensitive)
        password: Plain password
        namespace: Which principal table to look the email up in

    Raises:
        InvalidCredentials: If the email is unknown or the password is wrong
    """
    email = normalize_email(email)
    if not email or not password:
        raise InvalidCredentials()

    model = Teacher if Namespace(namespace) is Namespace.TEACHER else User
    record = db.query(model).filter(model.email == email).first()
    if record is None:
        # Keep unknown emails as slow as wrong passwords
        dummy_verify()
    if record is None or not verify_password(password, record.password_digest):
        logger.info("Rejected %s login", Namespace(namespace).value)
        raise InvalidCredentials()

    principal = Principal(principal_id=record.id, role=record.role)
    issued = issue_token(principal, profile={
        "id": record.id,
        "full_name": record.full_name,
        "email": record.email,
        "role": record.role,
    })
    logger.info("Issued %s session for %s", principal.role, principal.principal_id)
    return issued


def authorize(token: Optional[str], capability: Capability) -> Optional[Principal]:
    """
    Resolve the principal for a request and check it may perform a capability.

    Public capabilities skip session validation entirely.

    Returns:
        The authenticated Principal, or None for a public capability

    Raises:
        AuthenticationError: If a gated capability has no valid principal
        Forbidden: If the principal's role may not perform the capability
    """
    if is_public(capability):
        return None

    principal = validate_token(token)
    if not is_allowed(principal.role, capability):
        logger.warning(
            "Denied %s to %s %s",
            Capability(capability).value, principal.role, principal.principal_id,
        )
        raise Forbidden(principal.role, Capability(capability).value, principal.principal_id)
    return principal
