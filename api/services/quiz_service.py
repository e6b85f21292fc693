"""
Quiz workflow: authoring, submission and result listings.

Quizzes are validated up front so a bad question never leaves a half-written
quiz behind. Results are written once at submission and never updated.
"""
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.core.errors import NotFound, PartialResult, UpstreamFailure, ValidationFailed
from api.models.course import Course
from api.models.quiz import QuestionType, Quiz, QuizResult
from api.models.user import User
from api.schemas.quiz import (
    LecturerQuizResult,
    QuizQuestionCreate,
    QuizQuestionResponse,
    QuizResponse,
    StudentQuizResult,
)
from api.services import grading
from api.services.course_registry import ensure_owner, get_course

logger = logging.getLogger(__name__)

UNKNOWN_QUIZ = "Unknown Quiz"
UNKNOWN_COURSE = "Unknown Course"
UNKNOWN_STUDENT = "Unknown Student"


def _load_quiz(db: Session, quiz_id: int) -> Optional[Quiz]:
    return db.query(Quiz).filter(Quiz.id == quiz_id).first()


def _load_course(db: Session, course_id: int) -> Optional[Course]:
    return db.query(Course).filter(Course.id == course_id).first()


def _load_student(db: Session, student_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == student_id).first()


def validate_questions(questions: Sequence[QuizQuestionCreate]) -> None:
    """Raise ValidationFailed naming the first bad question (1-based)."""
    if not questions:
        raise ValidationFailed("At least one question is required")

    for i, q in enumerate(questions, start=1):
        if not q.question.strip():
            raise ValidationFailed(f"Question {i} is required")
        if not q.correct_answer.strip():
            raise ValidationFailed(f"Correct answer for question {i} is required")
        if q.type == QuestionType.mcq and q.options and any(not opt.strip() for opt in q.options):
            raise ValidationFailed(f"All options for question {i} are required")


def create_quiz(
    db: Session,
    course_id: int,
    title: str,
    questions: Sequence[QuizQuestionCreate],
    author: User,
) -> Quiz:
    """Create a quiz on a course the author owns; ids are assigned q1..qn."""
    course = get_course(db, course_id)
    ensure_owner(course, author)

    if not title or not title.strip():
        raise ValidationFailed("Quiz title is required")
    validate_questions(questions)

    stored = [
        {
            "id": f"q{index}",
            "question": q.question,
            "type": q.type.value,
            "options": list(q.options or []) if q.type == QuestionType.mcq else None,
            "correct_answer": q.correct_answer,
        }
        for index, q in enumerate(questions, start=1)
    ]

    quiz = Quiz(course_id=course.id, title=title.strip(), questions=stored)
    try:
        db.add(quiz)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    db.refresh(quiz)
    logger.info(f"Created quiz {quiz.id} with {len(stored)} questions on course {course.id}")
    return quiz


def list_quizzes_for_course(db: Session, course_id: int) -> List[Quiz]:
    return db.query(Quiz).filter(Quiz.course_id == course_id).order_by(Quiz.created_at, Quiz.id).all()


def get_quiz(db: Session, quiz_id: int) -> Quiz:
    quiz = _load_quiz(db, quiz_id)
    if not quiz:
        raise NotFound("Quiz not found")
    return quiz


def to_quiz_response(quiz: Quiz, reveal_answers: bool) -> QuizResponse:
    """Students taking a quiz never see the correct answers."""
    questions = []
    for q in quiz.questions or []:
        question = QuizQuestionResponse.model_validate(q)
        if not reveal_answers:
            question.correct_answer = None
        questions.append(question)
    return QuizResponse(
        id=quiz.id,
        course_id=quiz.course_id,
        title=quiz.title,
        questions=questions,
        created_at=quiz.created_at,
    )


def submit_result(
    db: Session,
    student_id: int,
    quiz_id: int,
    course_id: int,
    answers: Dict[str, str],
) -> QuizResult:
    """Grade a submission and store it as a new, immutable result."""
    quiz = get_quiz(db, quiz_id)
    if quiz.course_id != course_id:
        raise ValidationFailed("Quiz does not belong to this course")

    score, total = grading.score_answers(quiz.questions or [], answers or {})

    result = QuizResult(
        student_id=student_id,
        quiz_id=quiz.id,
        course_id=quiz.course_id,
        score=score,
        total_questions=total,
        answers=dict(answers or {}),
    )
    try:
        db.add(result)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    db.refresh(result)
    logger.info(f"Student {student_id} scored {score}/{total} on quiz {quiz.id}")
    return result


def score_percentage(result: QuizResult) -> int:
    return grading.score_percentage(result.score, result.total_questions)


def _result_fields(result: QuizResult) -> dict:
    return {
        "id": result.id,
        "student_id": result.student_id,
        "quiz_id": result.quiz_id,
        "course_id": result.course_id,
        "score": result.score,
        "total_questions": result.total_questions,
        "answers": result.answers or {},
        "completed_at": result.completed_at,
        "percentage": score_percentage(result),
    }


def list_results_for_student(db: Session, student_id: int) -> PartialResult[StudentQuizResult]:
    """A student's attempts, newest first, with quiz and course titles."""
    listing: PartialResult[StudentQuizResult] = PartialResult()
    results = db.query(QuizResult).filter(
        QuizResult.student_id == student_id
    ).order_by(QuizResult.completed_at.desc(), QuizResult.id.desc()).all()

    for result in results:
        try:
            quiz = _load_quiz(db, result.quiz_id)
            course = _load_course(db, result.course_id)
        except SQLAlchemyError as e:
            logger.error(f"Error processing quiz result {result.id}: {e}")
            listing.skipped += 1
            continue

        listing.items.append(StudentQuizResult(
            **_result_fields(result),
            quiz_title=quiz.title if quiz else UNKNOWN_QUIZ,
            course_name=course.title if course else UNKNOWN_COURSE,
        ))

    return listing


def list_results_for_lecturer(db: Session, lecturer_id: int) -> PartialResult[LecturerQuizResult]:
    """Every attempt on every quiz of the lecturer's courses."""
    listing: PartialResult[LecturerQuizResult] = PartialResult()
    courses = db.query(Course).filter(Course.lecturer_id == lecturer_id).order_by(Course.id).all()

    for course in courses:
        try:
            quizzes = list_quizzes_for_course(db, course.id)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching quizzes for course {course.id}: {e}")
            listing.skipped += 1
            continue

        for quiz in quizzes:
            try:
                results = db.query(QuizResult).filter(
                    QuizResult.quiz_id == quiz.id
                ).order_by(QuizResult.id).all()
            except SQLAlchemyError as e:
                logger.error(f"Error fetching results for quiz {quiz.id}: {e}")
                listing.skipped += 1
                continue

            for result in results:
                try:
                    student = _load_student(db, result.student_id)
                except SQLAlchemyError as e:
                    logger.error(f"Error processing quiz result {result.id}: {e}")
                    listing.skipped += 1
                    continue

                listing.items.append(LecturerQuizResult(
                    **_result_fields(result),
                    student_name=student.full_name if student else UNKNOWN_STUDENT,
                    quiz_title=quiz.title,
                    course_name=course.title,
                ))

    return listing
