"""
Program operations for the Academy backend.
Programs are offered per year level (grade) and may carry an image.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.orm import Session

from database import Program
from . import registry
from .consistency import ConsistencyValidator
from .images import ImageStore, UploadBatch, delete_image

logger = logging.getLogger(__name__)


@registry.unit_of_work
def list_programs(db: Session) -> List[Dict[str, Any]]:
    programs = db.query(Program).order_by(Program.name).all()
    return [p.to_dict() for p in programs]


@registry.unit_of_work
def create_program(
    db: Session,
    images: ImageStore,
    name: Optional[str],
    year_level_id: Optional[str],
    image: Optional[bytes] = None,
) -> Dict[str, Any]:
    """
    Create a program for a year level.

    Raises:
        MissingField, FieldTooLong, UnknownGrade, UpstreamFailure
    """
    name, grade = ConsistencyValidator(db).check_program(name, year_level_id)

    program = Program(name=name, year_level_id=grade.id)
    with UploadBatch(images) as uploads:
        if image:
            stored = uploads.upload(image)
            program.image_url, program.image_id = stored.url, stored.id
        db.add(program)
        db.commit()
    db.refresh(program)

    logger.info("Created program %s for grade %s", program.id, grade.id)
    return {
        "success": True,
        "message": "Program created successfully",
        "program": program.to_dict(),
    }


@registry.unit_of_work
def update_program(
    db: Session,
    images: ImageStore,
    program_id: str,
    name: Optional[str] = None,
    year_level_id: Optional[str] = None,
    image: Optional[bytes] = None,
) -> Dict[str, Any]:
    """
    Update the supplied fields of a program. A new image replaces the old one.

    Raises:
        NotFound, FieldTooLong, UnknownGrade, UpstreamFailure
    """
    program = registry.get_or_404(db, Program, program_id, "Program")
    name, grade = ConsistencyValidator(db).check_program(name, year_level_id, partial=True)

    stale = None
    with UploadBatch(images) as uploads:
        if image:
            stale = program.image_id
            stored = uploads.upload(image)
            program.image_url, program.image_id = stored.url, stored.id
        if name:
            program.name = name
        if grade is not None:
            program.year_level_id = grade.id
        db.commit()
    db.refresh(program)
    if stale:
        delete_image(images, stale)

    logger.info("Updated program %s", program.id)
    return {
        "success": True,
        "message": "Program updated successfully",
        "program": program.to_dict(),
    }


@registry.unit_of_work
def delete_program(db: Session, images: ImageStore, program_id: str) -> Dict[str, Any]:
    """
    Raises:
        NotFound, UpstreamFailure
    """
    program = registry.get_or_404(db, Program, program_id, "Program")
    stale = program.image_id
    db.delete(program)
    db.commit()
    if stale:
        delete_image(images, stale)

    logger.info("Deleted program %s", program_id)
    return {"success": True, "message": "Program deleted successfully"}
