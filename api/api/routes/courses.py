from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from api.core.auth import get_current_user, require_role
from api.core.database import get_db
from api.core.errors import ValidationFailed
from api.models.user import User, UserRole
from api.schemas.course import CourseCreate, CourseResponse
from api.schemas.enrollment import CourseStudentList
from api.schemas.quiz import QuizResponse
from api.services import course_registry, enrollment_service, quiz_service

router = APIRouter()

lecturer_or_admin = require_role(UserRole.lecturer, UserRole.admin)


@router.post("/", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    course: CourseCreate,
    user: User = Depends(lecturer_or_admin),
    db: Session = Depends(get_db),
):
    """Create a course owned by the calling lecturer."""
    return course_registry.create_course(
        db,
        title=course.title,
        lecturer_id=user.id,
        required_class=course.required_class,
    )


@router.get("/mine", response_model=List[CourseResponse])
def list_my_courses(user: User = Depends(lecturer_or_admin), db: Session = Depends(get_db)):
    """Courses the caller teaches."""
    return course_registry.list_courses_for_lecturer(db, user.id)


@router.get("/available", response_model=List[CourseResponse])
def list_available_courses(
    user: User = Depends(require_role(UserRole.student)),
    db: Session = Depends(get_db),
):
    """Courses open to the student's class level. Materials stay hidden until enrolled."""
    if user.class_level is None:
        raise ValidationFailed("Student profile has no class level")
    courses = course_registry.list_available_for_class(db, user.class_level)
    return [
        CourseResponse.model_validate(course).model_copy(update={"files": []})
        for course in courses
    ]


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(course_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get a course with its materials."""
    course = course_registry.get_course(db, course_id)
    enrollment_service.ensure_course_access(db, course, user)
    return course


@router.get("/{course_id}/students", response_model=CourseStudentList)
def list_course_students(
    course_id: int,
    user: User = Depends(lecturer_or_admin),
    db: Session = Depends(get_db),
):
    """Approved students of a course."""
    course = course_registry.get_course(db, course_id)
    course_registry.ensure_owner(course, user)
    result = enrollment_service.list_approved_for_course(db, course_id)
    return CourseStudentList(items=result.items, skipped=result.skipped)


@router.get("/{course_id}/quizzes", response_model=List[QuizResponse])
def list_course_quizzes(course_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Quizzes on a course; answers are only shown to its lecturer and admins."""
    course = course_registry.get_course(db, course_id)
    enrollment_service.ensure_course_access(db, course, user)
    reveal = course_registry.can_manage(course, user)
    return [
        quiz_service.to_quiz_response(quiz, reveal_answers=reveal)
        for quiz in quiz_service.list_quizzes_for_course(db, course_id)
    ]
