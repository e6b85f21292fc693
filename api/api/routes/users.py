from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session
from api.core.auth import get_current_user, require_auth
from api.core.database import get_db
from api.models.user import User, UserRole
from api.schemas.user import StudentRegistration, UserProfile, UserRegistration, to_profile
from api.services import admin_service

router = APIRouter()


@router.post("/register", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
def register(
    registration: UserRegistration = Body(...),
    subject: str = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """Create the caller's student or lecturer profile. Admins are never self-registered."""
    if isinstance(registration, StudentRegistration):
        user = admin_service.create_profile(
            db,
            auth_subject=subject,
            role=UserRole.student,
            full_name=registration.full_name,
            email=registration.email,
            matriculation_number=registration.matriculation_number,
            class_level=registration.class_level,
        )
    else:
        user = admin_service.create_profile(
            db,
            auth_subject=subject,
            role=UserRole.lecturer,
            full_name=registration.full_name,
            email=registration.email,
        )
    return to_profile(user)


@router.get("/me", response_model=UserProfile)
def read_me(user: User = Depends(get_current_user)):
    """The caller's profile, shaped by role."""
    return to_profile(user)
