"""
API routes for the Academy backend.

Handlers only translate transport details (bodies, multipart uploads, the
bearer token) into service calls. Service errors are rendered by the handler
registered in main.py. Handlers are plain functions because the services are
synchronous; FastAPI runs them in its threadpool.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from services import (
    Capability,
    ImageStore,
    Namespace,
    Principal,
    authenticate,
    register_superadmin,
    register_admin,
    list_admins,
    update_admin,
    delete_admin,
    list_grades,
    add_grade,
    delete_grade,
    get_students_by_grade,
    get_groups_by_grade,
    list_groups,
    create_group,
    update_group_schedule,
    get_students_by_group,
    delete_group,
    list_teachers,
    create_teacher,
    update_teacher,
    update_teacher_profile,
    delete_teacher,
    get_teacher_profile,
    get_teacher_groups,
    manage_gallery_images,
    list_students,
    get_student,
    add_student,
    add_group_to_student,
    delete_student,
    list_registrations,
    create_registration,
    update_registration_status,
    list_programs,
    create_program,
    update_program,
    delete_program,
)
from .dependencies import get_images, require
from .schemas import (
    LoginRequest,
    RegisterUserRequest,
    UpdateAdminRequest,
    GradeCreateRequest,
    GroupCreateRequest,
    ScheduleUpdateRequest,
    StudentCreateRequest,
    AddGroupRequest,
    RegistrationCreateRequest,
    RegistrationStatusRequest,
    TokenResponse,
    ErrorResponse,
)


# Error bodies every router may return (see api/errors.py)
ERROR_RESPONSES = {
    status_code: {"model": ErrorResponse}
    for status_code in (400, 401, 403, 404, 409, 503)
}

# Router for administrative users and their login
users_router = APIRouter(prefix="/api/users", tags=["Users"], responses=ERROR_RESPONSES)

# Router for teachers, their login and their own profile
teachers_router = APIRouter(prefix="/api/teachers", tags=["Teachers"], responses=ERROR_RESPONSES)

grades_router = APIRouter(prefix="/api/grades", tags=["Grades"], responses=ERROR_RESPONSES)
groups_router = APIRouter(prefix="/api/groups", tags=["Groups"], responses=ERROR_RESPONSES)
students_router = APIRouter(prefix="/api/students", tags=["Students"], responses=ERROR_RESPONSES)
registrations_router = APIRouter(prefix="/api/registrations", tags=["Registrations"], responses=ERROR_RESPONSES)
programs_router = APIRouter(prefix="/api/programs", tags=["Programs"], responses=ERROR_RESPONSES)


def _dump(model) -> Optional[dict]:
    return model.model_dump() if model is not None else None


def _read_upload(upload: Optional[UploadFile]) -> Optional[bytes]:
    """Return the bytes of an uploaded file, or None when nothing was sent."""
    if upload is None or not upload.filename:
        return None
    data = upload.file.read()
    return data or None


def _read_uploads(uploads: Optional[List[UploadFile]]) -> List[bytes]:
    files = []
    for upload in uploads or []:
        data = _read_upload(upload)
        if data:
            files.append(data)
    return files


def _token_response(issued) -> TokenResponse:
    return TokenResponse(token=issued.token, expires_at=issued.expires_at, user=issued.profile)


# ============== User Endpoints ==============

@users_router.post("/login", response_model=TokenResponse)
def login_user(request: LoginRequest, db: Session = Depends(get_db)):
    """Log in a superadmin or admin."""
    issued = authenticate(db, request.email, request.password, Namespace.STAFF)
    return _token_response(issued)


@users_router.post(
    "/register-superadmin",
    status_code=201,
    dependencies=[Depends(require(Capability.REGISTER_SUPERADMIN))],
)
def register_superadmin_endpoint(request: RegisterUserRequest, db: Session = Depends(get_db)):
    """Bootstrap the first superadmin. Refused once one exists."""
    return register_superadmin(db, request.full_name, request.email, request.password)


@users_router.post(
    "/register-admin",
    status_code=201,
    dependencies=[Depends(require(Capability.MANAGE_ADMINS))],
)
def register_admin_endpoint(request: RegisterUserRequest, db: Session = Depends(get_db)):
    return register_admin(db, request.full_name, request.email, request.password)


@users_router.get("/admins", dependencies=[Depends(require(Capability.MANAGE_ADMINS))])
def list_admins_endpoint(db: Session = Depends(get_db)):
    return list_admins(db)


@users_router.put("/admins/{admin_id}", dependencies=[Depends(require(Capability.MANAGE_ADMINS))])
def update_admin_endpoint(
    admin_id: str,
    request: UpdateAdminRequest,
    db: Session = Depends(get_db),
):
    return update_admin(db, admin_id, full_name=request.full_name, password=request.password)


@users_router.delete("/admins/{admin_id}", dependencies=[Depends(require(Capability.MANAGE_ADMINS))])
def delete_admin_endpoint(admin_id: str, db: Session = Depends(get_db)):
    return delete_admin(db, admin_id)


# ============== Teacher Endpoints ==============

@teachers_router.post("/login", response_model=TokenResponse)
def login_teacher(request: LoginRequest, db: Session = Depends(get_db)):
    """Log in a teacher."""
    issued = authenticate(db, request.email, request.password, Namespace.TEACHER)
    return _token_response(issued)


@teachers_router.get("", dependencies=[Depends(require(Capability.LIST_TEACHERS))])
def list_teachers_endpoint(db: Session = Depends(get_db)):
    """List teachers with the groups they lead."""
    return list_teachers(db)


@teachers_router.post(
    "",
    status_code=201,
    dependencies=[Depends(require(Capability.MANAGE_TEACHERS))],
)
def create_teacher_endpoint(
    full_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    subjects_taught: Optional[str] = Form(None, description="JSON list of subjects"),
    degree: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    gallery_images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_images),
):
    """Create a teacher from a multipart form with optional photo and gallery."""
    return create_teacher(
        db,
        images,
        full_name=full_name,
        email=email,
        password=password,
        subjects_taught=subjects_taught,
        degree=degree,
        bio=bio,
        photo=_read_upload(photo),
        gallery=_read_uploads(gallery_images),
    )


@teachers_router.get("/profile")
def get_profile_endpoint(
    principal: Principal = Depends(require(Capability.MANAGE_OWN_PROFILE)),
    db: Session = Depends(get_db),
):
    """Return the logged-in teacher's own profile."""
    return get_teacher_profile(db, principal.principal_id)


@teachers_router.put("/profile")
def update_profile_endpoint(
    full_name: Optional[str] = Form(None),
    subjects_taught: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    degree: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    remove_photo: bool = Form(False),
    photo: Optional[UploadFile] = File(None),
    remove_gallery_images: bool = Form(False),
    gallery_images: Optional[List[UploadFile]] = File(None),
    principal: Principal = Depends(require(Capability.MANAGE_OWN_PROFILE)),
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_images),
):
    """Update the logged-in teacher's own profile. The email cannot change here."""
    return update_teacher_profile(
        db,
        images,
        principal.principal_id,
        full_name=full_name,
        subjects_taught=subjects_taught,
        password=password,
        degree=degree,
        bio=bio,
        remove_photo=remove_photo,
        photo=_read_upload(photo),
        remove_gallery_images=remove_gallery_images,
        gallery=_read_uploads(gallery_images),
    )


@teachers_router.get("/profile/groups")
def get_own_groups_endpoint(
    principal: Principal = Depends(require(Capability.MANAGE_OWN_PROFILE)),
    db: Session = Depends(get_db),
):
    return get_teacher_groups(db, principal.principal_id)


@teachers_router.put("/profile/gallery")
def manage_gallery_endpoint(
    remove_image_ids: Optional[List[str]] = Form(None),
    gallery_images: Optional[List[UploadFile]] = File(None),
    principal: Principal = Depends(require(Capability.MANAGE_OWN_PROFILE)),
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_images),
):
    """Remove gallery images by external id and append uploaded ones."""
    return manage_gallery_images(
        db,
        images,
        principal.principal_id,
        remove_image_ids=remove_image_ids,
        gallery=_read_uploads(gallery_images),
    )


@teachers_router.get("/{teacher_id}/groups", dependencies=[Depends(require(Capability.VIEW_TEACHER_GROUPS))])
def get_teacher_groups_endpoint(teacher_id: str, db: Session = Depends(get_db)):
    return get_teacher_groups(db, teacher_id)


@teachers_router.put("/{teacher_id}", dependencies=[Depends(require(Capability.MANAGE_TEACHERS))])
def update_teacher_endpoint(
    teacher_id: str,
    full_name: Optional[str] = Form(None),
    subjects_taught: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    degree: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    remove_photo: bool = Form(False),
    photo: Optional[UploadFile] = File(None),
    remove_gallery_images: bool = Form(False),
    gallery_images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_images),
):
    return update_teacher(
        db,
        images,
        teacher_id,
        full_name=full_name,
        subjects_taught=subjects_taught,
        email=email,
        password=password,
        degree=degree,
        bio=bio,
        remove_photo=remove_photo,
        photo=_read_upload(photo),
        remove_gallery_images=remove_gallery_images,
        gallery=_read_uploads(gallery_images),
    )


@teachers_router.delete("/{teacher_id}", dependencies=[Depends(require(Capability.MANAGE_TEACHERS))])
def delete_teacher_endpoint(
    teacher_id: str,
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_images),
):
    return delete_teacher(db, images, teacher_id)


# ============== Grade Endpoints ==============

@grades_router.get("", dependencies=[Depends(require(Capability.LIST_GRADES))])
def list_grades_endpoint(db: Session = Depends(get_db)):
    return list_grades(db)


@grades_router.post("", status_code=201, dependencies=[Depends(require(Capability.MANAGE_GRADES))])
def add_grade_endpoint(request: GradeCreateRequest, db: Session = Depends(get_db)):
    return add_grade(db, request.name)


@grades_router.delete("/{grade_id}", dependencies=[Depends(require(Capability.MANAGE_GRADES))])
def delete_grade_endpoint(grade_id: str, db: Session = Depends(get_db)):
    """Delete a grade no student, group or program refers to."""
    return delete_grade(db, grade_id)


@grades_router.get("/{grade_id}/students", dependencies=[Depends(require(Capability.VIEW_GRADE_STUDENTS))])
def get_grade_students_endpoint(grade_id: str, db: Session = Depends(get_db)):
    return get_students_by_grade(db, grade_id)


@grades_router.get("/{grade_id}/groups", dependencies=[Depends(require(Capability.VIEW_GRADE_GROUPS))])
def get_grade_groups_endpoint(grade_id: str, db: Session = Depends(get_db)):
    return get_groups_by_grade(db, grade_id)


# ============== Group Endpoints ==============

@groups_router.get("", dependencies=[Depends(require(Capability.LIST_GROUPS))])
def list_groups_endpoint(db: Session = Depends(get_db)):
    return list_groups(db)


@groups_router.post("", status_code=201, dependencies=[Depends(require(Capability.MANAGE_GROUPS))])
def create_group_endpoint(request: GroupCreateRequest, db: Session = Depends(get_db)):
    """Create a group led by a teacher who teaches its subject."""
    return create_group(
        db,
        name=request.name,
        teacher_id=request.teacher,
        subject=request.subject,
        schedule=_dump(request.schedule),
        grade_id=request.grade,
    )


@groups_router.put("/{group_id}/schedule", dependencies=[Depends(require(Capability.MANAGE_GROUPS))])
def update_schedule_endpoint(
    group_id: str,
    request: ScheduleUpdateRequest,
    db: Session = Depends(get_db),
):
    return update_group_schedule(db, group_id, _dump(request.schedule))


@groups_router.get("/{group_id}/students", dependencies=[Depends(require(Capability.VIEW_GROUP_STUDENTS))])
def get_group_students_endpoint(group_id: str, db: Session = Depends(get_db)):
    return get_students_by_group(db, group_id)


@groups_router.delete("/{group_id}", dependencies=[Depends(require(Capability.MANAGE_GROUPS))])
def delete_group_endpoint(group_id: str, db: Session = Depends(get_db)):
    return delete_group(db, group_id)


# ============== Student Endpoints ==============

@students_router.get("", dependencies=[Depends(require(Capability.MANAGE_STUDENTS))])
def list_students_endpoint(db: Session = Depends(get_db)):
    return list_students(db)


@students_router.get("/{student_id}", dependencies=[Depends(require(Capability.MANAGE_STUDENTS))])
def get_student_endpoint(student_id: str, db: Session = Depends(get_db)):
    return get_student(db, student_id)


@students_router.post("", status_code=201, dependencies=[Depends(require(Capability.MANAGE_STUDENTS))])
def add_student_endpoint(request: StudentCreateRequest, db: Session = Depends(get_db)):
    """Create a student enrolled in groups that all belong to one teacher."""
    return add_student(
        db,
        first_name=request.first_name,
        last_name=request.last_name,
        parent_info=_dump(request.parent_info),
        grade_id=request.grade,
        group_ids=request.groups,
        teacher_id=request.teacher,
    )


@students_router.post("/{student_id}/groups", dependencies=[Depends(require(Capability.MANAGE_STUDENTS))])
def add_group_endpoint(
    student_id: str,
    request: AddGroupRequest,
    db: Session = Depends(get_db),
):
    return add_group_to_student(db, student_id, request.group, request.teacher)


@students_router.delete("/{student_id}", dependencies=[Depends(require(Capability.MANAGE_STUDENTS))])
def delete_student_endpoint(student_id: str, db: Session = Depends(get_db)):
    return delete_student(db, student_id)


# ============== Registration Endpoints ==============

@registrations_router.get("", dependencies=[Depends(require(Capability.REVIEW_REGISTRATIONS))])
def list_registrations_endpoint(db: Session = Depends(get_db)):
    """List registrations, newest first."""
    return list_registrations(db)


@registrations_router.post(
    "",
    status_code=201,
    dependencies=[Depends(require(Capability.SUBMIT_REGISTRATION))],
)
def create_registration_endpoint(request: RegistrationCreateRequest, db: Session = Depends(get_db)):
    """Submit a registration request (no login needed)."""
    return create_registration(
        db,
        student_info=_dump(request.student_info),
        parent_info=_dump(request.parent_info),
        group_id=request.group,
    )


@registrations_router.put(
    "/{registration_id}/status",
    dependencies=[Depends(require(Capability.REVIEW_REGISTRATIONS))],
)
def update_registration_status_endpoint(
    registration_id: str,
    request: RegistrationStatusRequest,
    db: Session = Depends(get_db),
):
    return update_registration_status(db, registration_id, request.status)


# ============== Program Endpoints ==============

@programs_router.get("", dependencies=[Depends(require(Capability.LIST_PROGRAMS))])
def list_programs_endpoint(db: Session = Depends(get_db)):
    return list_programs(db)


@programs_router.post("", status_code=201, dependencies=[Depends(require(Capability.MANAGE_PROGRAMS))])
def create_program_endpoint(
    name: Optional[str] = Form(None),
    year_level: Optional[str] = Form(None, description="ID of the grade"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_images),
):
    return create_program(db, images, name, year_level, image=_read_upload(image))


@programs_router.put("/{program_id}", dependencies=[Depends(require(Capability.MANAGE_PROGRAMS))])
def update_program_endpoint(
    program_id: str,
    name: Optional[str] = Form(None),
    year_level: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_images),
):
    return update_program(
        db,
        images,
        program_id,
        name=name,
        year_level_id=year_level,
        image=_read_upload(image),
    )


@programs_router.delete("/{program_id}", dependencies=[Depends(require(Capability.MANAGE_PROGRAMS))])
def delete_program_endpoint(
    program_id: str,
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_images),
):
    return delete_program(db, images, program_id)
