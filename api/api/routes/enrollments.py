import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from api.core.auth import get_current_user, require_role
from api.core.database import get_db
from api.models.user import User, UserRole
from api.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentStatusResponse,
    PendingEnrollmentList,
    StudentEnrollment,
)
from api.services import enrollment_service
from typing import List

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def request_enrollment(
    enrollment: EnrollmentCreate,
    user: User = Depends(require_role(UserRole.student)),
    db: Session = Depends(get_db),
):
    """Ask to join a course. Asking again returns the existing request."""
    return enrollment_service.request_enrollment(db, user.id, enrollment.course_id)


@router.get("/status", response_model=EnrollmentStatusResponse)
def enrollment_status(
    course_id: int = Query(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's enrollment state for a course: none, pending or enrolled."""
    enrollment = enrollment_service.check_status(db, user.id, course_id)
    return EnrollmentStatusResponse(
        state=enrollment_service.enrollment_state(enrollment),
        enrollment=EnrollmentResponse.model_validate(enrollment) if enrollment else None,
    )


@router.get("/mine", response_model=List[StudentEnrollment])
def list_my_enrollments(
    user: User = Depends(require_role(UserRole.student)),
    db: Session = Depends(get_db),
):
    """The student's enrollments with their courses."""
    return enrollment_service.list_for_student(db, user.id).items


@router.get("/pending", response_model=PendingEnrollmentList)
def list_pending(
    user: User = Depends(require_role(UserRole.lecturer, UserRole.admin)),
    db: Session = Depends(get_db),
):
    """Requests awaiting the lecturer's approval."""
    result = enrollment_service.list_pending_for_lecturer(db, user.id)
    if result.partial:
        logger.warning(f"Pending enrollments for lecturer {user.id}: skipped {result.skipped}")
    return PendingEnrollmentList(items=result.items, skipped=result.skipped)


@router.post("/{enrollment_id}/approve", response_model=EnrollmentResponse)
def approve_enrollment(
    enrollment_id: int,
    user: User = Depends(require_role(UserRole.lecturer, UserRole.admin)),
    db: Session = Depends(get_db),
):
    """Approve a request on one of the caller's courses."""
    return enrollment_service.approve(db, enrollment_id, user)
