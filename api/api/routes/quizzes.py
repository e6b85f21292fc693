from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from api.core.auth import get_current_user, require_role
from api.core.database import get_db
from api.models.user import User, UserRole
from api.schemas.quiz import (
    LecturerQuizResultList,
    QuizCreate,
    QuizResponse,
    QuizResultResponse,
    QuizSubmission,
    StudentQuizResultList,
)
from api.services import course_registry, enrollment_service, quiz_service

router = APIRouter()


@router.post("/", response_model=QuizResponse, status_code=status.HTTP_201_CREATED)
def create_quiz(
    quiz: QuizCreate,
    user: User = Depends(require_role(UserRole.lecturer, UserRole.admin)),
    db: Session = Depends(get_db),
):
    """
    Create a quiz on one of the caller's courses.

    Questions are checked in order and the first problem is reported by its
    1-based position; nothing is saved unless every question passes.
    """
    created = quiz_service.create_quiz(db, quiz.course_id, quiz.title, quiz.questions, user)
    return quiz_service.to_quiz_response(created, reveal_answers=True)


@router.get("/results/mine", response_model=StudentQuizResultList)
def list_my_results(
    user: User = Depends(require_role(UserRole.student)),
    db: Session = Depends(get_db),
):
    result = quiz_service.list_results_for_student(db, user.id)
    return StudentQuizResultList(items=result.items, skipped=result.skipped)


@router.get("/results/lecturer", response_model=LecturerQuizResultList)
def list_lecturer_results(
    user: User = Depends(require_role(UserRole.lecturer, UserRole.admin)),
    db: Session = Depends(get_db),
):
    """Every attempt on the caller's quizzes."""
    result = quiz_service.list_results_for_lecturer(db, user.id)
    return LecturerQuizResultList(items=result.items, skipped=result.skipped)


@router.get("/{quiz_id}", response_model=QuizResponse)
def get_quiz(quiz_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    quiz = quiz_service.get_quiz(db, quiz_id)
    course = course_registry.get_course(db, quiz.course_id)
    enrollment_service.ensure_course_access(db, course, user)
    return quiz_service.to_quiz_response(quiz, reveal_answers=course_registry.can_manage(course, user))


@router.post("/{quiz_id}/submit", response_model=QuizResultResponse, status_code=status.HTTP_201_CREATED)
def submit_quiz(
    quiz_id: int,
    submission: QuizSubmission,
    user: User = Depends(require_role(UserRole.student)),
    db: Session = Depends(get_db),
):
    """Grade the caller's answers and record the attempt."""
    course = course_registry.get_course(db, submission.course_id)
    enrollment_service.ensure_course_access(db, course, user)
    result = quiz_service.submit_result(db, user.id, quiz_id, submission.course_id, submission.answers)
    response = QuizResultResponse.model_validate(result)
    response.percentage = quiz_service.score_percentage(result)
    return response
