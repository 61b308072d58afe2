"""
Registration operations for the Academy backend.
Registrations are public enrollment requests reviewed by admins.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.orm import Session

from database import Registration, RegistrationStatus
from . import registry
from .consistency import ConsistencyValidator

logger = logging.getLogger(__name__)


@registry.unit_of_work
def list_registrations(db: Session) -> List[Dict[str, Any]]:
    """Return all registrations, newest first."""
    registrations = (
        db.query(Registration)
        .order_by(Registration.created_at.desc())
        .all()
    )
    return [r.to_dict() for r in registrations]


@registry.unit_of_work
def create_registration(
    db: Session,
    student_info: Optional[Dict[str, Any]],
    parent_info: Optional[Dict[str, Any]],
    group_id: Optional[str],
) -> Dict[str, Any]:
    """
    Submit a registration. The status is always 'pending' on creation and
    the group is not checked for existence.

    Raises:
        MissingField: If a required field is absent
        InvalidEmailFormat: If the parent email is malformed
    """
    fields = ConsistencyValidator(db).check_registration_create(student_info, parent_info, group_id)

    registration = Registration(status=RegistrationStatus.PENDING.value, **fields)
    db.add(registration)
    db.commit()
    db.refresh(registration)

    logger.info("Received registration %s for group %s", registration.id, registration.group_id)
    return {
        "success": True,
        "message": "Registration submitted successfully",
        "registration": registration.to_dict(),
    }


@registry.unit_of_work
def update_registration_status(
    db: Session,
    registration_id: str,
    status: Optional[str],
) -> Dict[str, Any]:
    """
    Overwrite a registration's status.

    Raises:
        MissingField: If no status is given
        InvalidStatus: If the status is not pending, accepted or rejected
        NotFound: If the registration does not exist
    """
    status = ConsistencyValidator.check_registration_status(status)
    registration = registry.get_or_404(db, Registration, registration_id, "Registration")

    registration.status = status
    db.commit()
    db.refresh(registration)

    logger.info("Registration %s set to %s", registration.id, status)
    return {
        "success": True,
        "message": "Registration updated",
        "registration": registration.to_dict(),
    }
