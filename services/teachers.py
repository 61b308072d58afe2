"""
Teacher operations for the Academy backend.

Teachers are managed by admins and can edit their own profile. Photos and
gallery images live in the image store; new images are uploaded before the
record is committed (and discarded again if the commit fails) and replaced
images are deleted after it.
"""
import logging
from typing import Dict, Any, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import Teacher, TeacherImage, Group
from . import registry
from .consistency import (
    ConsistencyValidator,
    check_email,
    optional_str,
    require,
)
from .exceptions import EmailTaken
from .images import ImageStore, StoredImage, UploadBatch, delete_image
from .passwords import hash_password, check_password_strength

logger = logging.getLogger(__name__)


def _email_taken(db: Session, email: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(Teacher).filter(Teacher.email == email)
    if exclude_id:
        query = query.filter(Teacher.id != exclude_id)
    return query.first() is not None


def _append_gallery(teacher: Teacher, uploads: Sequence[StoredImage]) -> None:
    start = len(teacher.gallery_images)
    for offset, image in enumerate(uploads):
        teacher.gallery_images.append(
            TeacherImage(position=start + offset, url=image.url, external_id=image.id)
        )


def _commit_teacher(db: Session, teacher: Teacher) -> None:
    email = teacher.email
    try:
        db.commit()
    except IntegrityError as exc:
        # Email claimed concurrently between the check and the write
        raise EmailTaken(email) from exc
    db.refresh(teacher)


@registry.unit_of_work
def list_teachers(db: Session) -> List[Dict[str, Any]]:
    """Return all teachers with their groups (no password digests)."""
    teachers = db.query(Teacher).order_by(Teacher.full_name).all()
    return [t.to_dict(include_groups=True) for t in teachers]


@registry.unit_of_work
def create_teacher(
    db: Session,
    images: ImageStore,
    full_name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    subjects_taught: Any,
    degree: Optional[str] = None,
    bio: Optional[str] = None,
    photo: Optional[bytes] = None,
    gallery: Optional[Sequence[bytes]] = None,
) -> Dict[str, Any]:
    """
    Create a new teacher.

    Args:
        db: Database session
        images: Image store for photo and gallery uploads
        full_name: Teacher's full name
        email: Login email
        password: Plain password (hashed before storage)
        subjects_taught: One or two subjects, as a list or JSON-encoded list
        degree: Optional degree (max 100 chars)
        bio: Optional biography (max 500 chars)
        photo: Optional profile photo bytes
        gallery: Optional gallery image bytes

    Returns:
        Created teacher data

    Raises:
        MissingField, InvalidSubjects, FieldTooLong, WeakPassword,
        InvalidEmailFormat, EmailTaken, UpstreamFailure
    """
    require(email, "email")
    require(password, "password")
    full_name, subjects = ConsistencyValidator.check_teacher_profile(
        full_name, subjects_taught, degree, bio
    )
    check_password_strength(password)
    email = check_email(email)
    if _email_taken(db, email):
        raise EmailTaken(email)

    digest = hash_password(password)
    teacher = Teacher(
        full_name=full_name,
        email=email,
        password_digest=digest,
        subjects_taught=subjects,
        degree=optional_str(degree),
        bio=optional_str(bio),
    )
    with UploadBatch(images) as uploads:
        if photo:
            stored = uploads.upload(photo)
            teacher.photo_url, teacher.photo_id = stored.url, stored.id
        _append_gallery(teacher, [uploads.upload(data) for data in gallery or []])

        db.add(teacher)
        _commit_teacher(db, teacher)

    logger.info("Created teacher %s", teacher.id)
    return teacher.to_dict()


def _apply_profile(
    uploads: UploadBatch,
    teacher: Teacher,
    full_name: str,
    subjects: List[str],
    password: Optional[str],
    degree: Optional[str],
    bio: Optional[str],
    remove_photo: bool,
    photo: Optional[bytes],
    remove_gallery_images: bool,
    gallery: Optional[Sequence[bytes]],
) -> List[str]:
    """Apply checked profile changes; returns image ids to delete after commit."""
    stale: List[str] = []

    teacher.full_name = full_name
    teacher.subjects_taught = subjects
    teacher.degree = optional_str(degree)
    teacher.bio = optional_str(bio)
    if password:
        teacher.password_digest = hash_password(password)

    if remove_photo or photo:
        if teacher.photo_id:
            stale.append(teacher.photo_id)
        teacher.photo_url = teacher.photo_id = None
        if photo and not remove_photo:
            stored = uploads.upload(photo)
            teacher.photo_url, teacher.photo_id = stored.url, stored.id

    if remove_gallery_images:
        stale.extend(img.external_id for img in teacher.gallery_images)
        teacher.gallery_images = []
    elif gallery:
        _append_gallery(teacher, [uploads.upload(data) for data in gallery])

    return stale


def _delete_images(images: ImageStore, image_ids: Sequence[str]) -> None:
    for image_id in image_ids:
        delete_image(images, image_id)


@registry.unit_of_work
def update_teacher(
    db: Session,
    images: ImageStore,
    teacher_id: str,
    full_name: Optional[str],
    subjects_taught: Any,
    email: Optional[str] = None,
    password: Optional[str] = None,
    degree: Optional[str] = None,
    bio: Optional[str] = None,
    remove_photo: bool = False,
    photo: Optional[bytes] = None,
    remove_gallery_images: bool = False,
    gallery: Optional[Sequence[bytes]] = None,
) -> Dict[str, Any]:
    """
    Update a teacher (admin).

    Email uniqueness is only checked when the email changes.

    Raises:
        NotFound, MissingField, InvalidSubjects, FieldTooLong, WeakPassword,
        InvalidEmailFormat, EmailTaken, UpstreamFailure
    """
    teacher = registry.get_or_404(db, Teacher, teacher_id, "Teacher")
    full_name, subjects = ConsistencyValidator.check_teacher_profile(
        full_name, subjects_taught, degree, bio
    )

    new_email = None
    if optional_str(email):
        new_email = check_email(email)
        if new_email != teacher.email and _email_taken(db, new_email, exclude_id=teacher.id):
            raise EmailTaken(new_email)
    if password:
        check_password_strength(password)

    if new_email:
        teacher.email = new_email
    with UploadBatch(images) as uploads:
        stale = _apply_profile(
            uploads, teacher, full_name, subjects, password, degree, bio,
            remove_photo, photo, remove_gallery_images, gallery,
        )
        _commit_teacher(db, teacher)
    _delete_images(images, stale)

    logger.info("Updated teacher %s", teacher.id)
    return teacher.to_dict()


@registry.unit_of_work
def update_teacher_profile(
    db: Session,
    images: ImageStore,
    teacher_id: str,
    full_name: Optional[str],
    subjects_taught: Any,
    password: Optional[str] = None,
    degree: Optional[str] = None,
    bio: Optional[str] = None,
    remove_photo: bool = False,
    photo: Optional[bytes] = None,
    remove_gallery_images: bool = False,
    gallery: Optional[Sequence[bytes]] = None,
) -> Dict[str, Any]:
    """
    Update the authenticated teacher's own profile. The email cannot be changed here.

    Raises:
        NotFound, MissingField, InvalidSubjects, FieldTooLong, WeakPassword,
        UpstreamFailure
    """
    teacher = registry.get_or_404(db, Teacher, teacher_id, "Teacher")
    full_name, subjects = ConsistencyValidator.check_teacher_profile(
        full_name, subjects_taught, degree, bio
    )
    if password:
        check_password_strength(password)

    with UploadBatch(images) as uploads:
        stale = _apply_profile(
            uploads, teacher, full_name, subjects, password, degree, bio,
            remove_photo, photo, remove_gallery_images, gallery,
        )
        _commit_teacher(db, teacher)
    _delete_images(images, stale)

    logger.info("Teacher %s updated own profile", teacher.id)
    return teacher.to_dict()


@registry.unit_of_work
def delete_teacher(db: Session, images: ImageStore, teacher_id: str) -> Dict[str, Any]:
    """
    Delete a teacher and their stored images.

    Raises:
        NotFound: If the teacher does not exist
        TeacherHasGroups: If groups still name the teacher
        UpstreamFailure: If the image store fails
    """
    teacher = ConsistencyValidator(db).check_teacher_delete(teacher_id)
    stale = [img.external_id for img in teacher.gallery_images]
    if teacher.photo_id:
        stale.insert(0, teacher.photo_id)

    db.delete(teacher)
    db.commit()
    _delete_images(images, stale)

    logger.info("Deleted teacher %s", teacher_id)
    return {"success": True, "message": "Teacher deleted successfully"}


@registry.unit_of_work
def get_teacher_profile(db: Session, teacher_id: str) -> Dict[str, Any]:
    """
    Raises:
        NotFound: If the teacher does not exist
    """
    teacher = registry.get_or_404(db, Teacher, teacher_id, "Teacher")
    return teacher.to_dict(include_groups=True)


@registry.unit_of_work
def get_teacher_groups(db: Session, teacher_id: Optional[str]) -> List[Dict[str, Any]]:
    """
    Return the groups a teacher leads, derived from the groups themselves.

    Raises:
        MissingField: If no teacher id is given
    """
    teacher_id = require(teacher_id, "teacher")
    groups = db.query(Group).filter(Group.teacher_id == teacher_id).order_by(Group.name).all()
    return [g.to_dict() for g in groups]


@registry.unit_of_work
def manage_gallery_images(
    db: Session,
    images: ImageStore,
    teacher_id: str,
    remove_image_ids: Optional[Sequence[str]] = None,
    gallery: Optional[Sequence[bytes]] = None,
) -> Dict[str, Any]:
    """
    Remove and add gallery images of a teacher.

    Raises:
        NotFound: If the teacher does not exist
        UpstreamFailure: If the image store fails
    """
    teacher = registry.get_or_404(db, Teacher, teacher_id, "Teacher")

    remove = set(remove_image_ids or [])
    stale = [img.external_id for img in teacher.gallery_images if img.external_id in remove]
    if remove:
        kept = [img for img in teacher.gallery_images if img.external_id not in remove]
        for position, img in enumerate(kept):
            img.position = position
        teacher.gallery_images = kept
    with UploadBatch(images) as uploads:
        if gallery:
            _append_gallery(teacher, [uploads.upload(data) for data in gallery])
        _commit_teacher(db, teacher)
    _delete_images(images, stale)

    logger.info("Updated gallery of teacher %s (%d removed)", teacher.id, len(stale))
    return teacher.to_dict()
