import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from api.core.auth import require_auth, require_role
from api.core.database import get_db
from api.models.user import User, UserRole
from api.schemas.admin import LecturerCreateByAdmin, StudentCreateByAdmin, SystemStats
from api.schemas.course import CourseResponse
from api.schemas.user import AdminProfile, AdminSetup, LecturerProfile, StudentProfile, to_profile
from api.services import admin_service, course_registry
from api.services.s3_service import get_s3_service

logger = logging.getLogger(__name__)
router = APIRouter()

admin_only = require_role(UserRole.admin)


@router.post("/setup", response_model=AdminProfile, status_code=status.HTTP_201_CREATED)
def setup_admin(
    payload: AdminSetup,
    subject: str = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """Create the first admin for the caller. Refused once any admin exists."""
    user = admin_service.setup_first_admin(db, subject, payload.full_name, payload.email)
    logger.info(f"Admin account bootstrapped: user {user.id}")
    return to_profile(user)


@router.get("/students", response_model=List[StudentProfile])
def list_students(user: User = Depends(admin_only), db: Session = Depends(get_db)):
    return [to_profile(u) for u in admin_service.list_users(db, UserRole.student)]


@router.get("/lecturers", response_model=List[LecturerProfile])
def list_lecturers(user: User = Depends(admin_only), db: Session = Depends(get_db)):
    return [to_profile(u) for u in admin_service.list_users(db, UserRole.lecturer)]


@router.get("/courses", response_model=List[CourseResponse])
def list_courses(user: User = Depends(admin_only), db: Session = Depends(get_db)):
    return admin_service.list_all_courses(db)


@router.post("/students", response_model=StudentProfile, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreateByAdmin, user: User = Depends(admin_only), db: Session = Depends(get_db)):
    """Attach a student profile to an existing identity."""
    student = admin_service.create_profile(
        db,
        auth_subject=payload.auth_subject,
        role=UserRole.student,
        full_name=payload.full_name,
        email=payload.email,
        matriculation_number=payload.matriculation_number,
        class_level=payload.class_level,
    )
    return to_profile(student)


@router.post("/lecturers", response_model=LecturerProfile, status_code=status.HTTP_201_CREATED)
def create_lecturer(payload: LecturerCreateByAdmin, user: User = Depends(admin_only), db: Session = Depends(get_db)):
    lecturer = admin_service.create_profile(
        db,
        auth_subject=payload.auth_subject,
        role=UserRole.lecturer,
        full_name=payload.full_name,
        email=payload.email,
    )
    return to_profile(lecturer)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, user: User = Depends(admin_only), db: Session = Depends(get_db)):
    admin_service.delete_user(db, user_id, user)


@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: int, user: User = Depends(admin_only), db: Session = Depends(get_db)):
    """Delete a course and everything hanging off it, including its blobs."""
    course_registry.delete_course(db, course_id, blob_store=get_s3_service())


@router.get("/stats", response_model=SystemStats)
def system_stats(user: User = Depends(admin_only), db: Session = Depends(get_db)):
    return admin_service.system_stats(db)
