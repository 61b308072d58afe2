"""
Administrative principal operations for the Academy backend.
Superadmins provision and manage admins.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import User, Role
from . import registry
from .consistency import check_email, optional_str, require
from .exceptions import EmailTaken, Forbidden, NotFound
from .passwords import hash_password, check_password_strength

logger = logging.getLogger(__name__)


def _create_user(
    db: Session,
    full_name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    role: Role,
) -> User:
    email = check_email(require(email, "email"))
    password = require(password, "password")
    check_password_strength(password)
    if db.query(User).filter(User.email == email).first():
        raise EmailTaken(email)

    user = User(
        full_name=optional_str(full_name),
        email=email,
        password_digest=hash_password(password),
        role=role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        raise EmailTaken(email) from exc
    db.refresh(user)
    return user


@registry.unit_of_work
def register_superadmin(
    db: Session,
    full_name: Optional[str],
    email: Optional[str],
    password: Optional[str],
) -> Dict[str, Any]:
    """
    Register the first superadmin. Only allowed while none exists.

    Raises:
        Forbidden: If a superadmin already exists
        MissingField, InvalidEmailFormat, WeakPassword, EmailTaken
    """
    exists = db.query(User).filter(User.role == Role.SUPERADMIN.value).first()
    if exists:
        raise Forbidden("anonymous", "register_superadmin")

    user = _create_user(db, full_name, email, password, Role.SUPERADMIN)
    logger.info("Registered superadmin %s", user.id)
    return {
        "success": True,
        "message": "Superadmin registered successfully",
        "user": user.to_dict(),
    }


@registry.unit_of_work
def register_admin(
    db: Session,
    full_name: Optional[str],
    email: Optional[str],
    password: Optional[str],
) -> Dict[str, Any]:
    """
    Register an admin (superadmin only).

    Raises:
        MissingField, InvalidEmailFormat, WeakPassword, EmailTaken
    """
    user = _create_user(db, full_name, email, password, Role.ADMIN)
    logger.info("Registered admin %s", user.id)
    return {
        "success": True,
        "message": "Admin registered successfully",
        "user": user.to_dict(),
    }


@registry.unit_of_work
def list_admins(db: Session) -> List[Dict[str, Any]]:
    admins = db.query(User).filter(User.role == Role.ADMIN.value).order_by(User.email).all()
    return [a.to_dict() for a in admins]


def _get_admin(db: Session, admin_id: str) -> User:
    admin = registry.find(db, User, admin_id)
    if admin is None or admin.role != Role.ADMIN.value:
        raise NotFound("Admin", admin_id)
    return admin


@registry.unit_of_work
def update_admin(
    db: Session,
    admin_id: str,
    full_name: Optional[str] = None,
    password: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Update an admin's name and/or password (superadmin only).

    Raises:
        NotFound: If no admin has that id
        WeakPassword: If a new password is too short
    """
    admin = _get_admin(db, admin_id)
    if password:
        check_password_strength(password)

    if optional_str(full_name):
        admin.full_name = optional_str(full_name)
    if password:
        admin.password_digest = hash_password(password)
    db.commit()
    db.refresh(admin)

    logger.info("Updated admin %s", admin.id)
    return {
        "success": True,
        "message": "Admin updated successfully",
        "user": admin.to_dict(),
    }


@registry.unit_of_work
def delete_admin(db: Session, admin_id: str) -> Dict[str, Any]:
    """
    Raises:
        NotFound: If no admin has that id
    """
    admin = _get_admin(db, admin_id)
    db.delete(admin)
    db.commit()

    logger.info("Deleted admin %s", admin_id)
    return {"success": True, "message": "Admin deleted successfully"}
