from pydantic import BaseModel
from typing import Optional, List, Dict
from datetime import datetime
from api.models.quiz import QuestionType
from api.schemas.base import BaseSchema


# Request schemas
class QuizQuestionCreate(BaseModel):
    """Required-field checks happen in the quiz service so errors name the question."""
    question: str = ""
    type: QuestionType = QuestionType.mcq
    options: Optional[List[str]] = None
    correct_answer: str = ""


class QuizCreate(BaseModel):
    course_id: int
    title: str = ""
    questions: List[QuizQuestionCreate]


class QuizSubmission(BaseModel):
    course_id: int
    answers: Dict[str, str] = {}


# Response schemas
class QuizQuestionResponse(BaseModel):
    id: str
    question: str
    type: QuestionType
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = None  # Hidden from students before submission


class QuizResponse(BaseSchema):
    id: int
    course_id: int
    title: str
    questions: List[QuizQuestionResponse]
    created_at: Optional[datetime] = None


class QuizResultResponse(BaseSchema):
    id: int
    student_id: int
    quiz_id: int
    course_id: int
    score: int
    total_questions: int
    answers: Dict[str, str]
    completed_at: Optional[datetime] = None
    percentage: int = 0


class StudentQuizResult(QuizResultResponse):
    quiz_title: str
    course_name: str


class LecturerQuizResult(QuizResultResponse):
    student_name: str
    quiz_title: str
    course_name: str


class StudentQuizResultList(BaseModel):
    items: List[StudentQuizResult]
    skipped: int = 0


class LecturerQuizResultList(BaseModel):
    items: List[LecturerQuizResult]
    skipped: int = 0
