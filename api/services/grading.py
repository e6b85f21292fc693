"""Quiz grading strategies, keyed by question type.

Both question types use exact matching after trimming and lowercasing. A
different grader for short answers can be registered in ``GRADERS`` without
touching how multiple-choice questions are scored.
"""

from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from api.models.quiz import QuestionType

Grader = Callable[[dict, Optional[str]], bool]


def normalize_answer(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def exact_match(question: dict, answer: Optional[str]) -> bool:
    if not answer:
        return False
    return normalize_answer(answer) == normalize_answer(question.get("correct_answer"))


GRADERS: Dict[str, Grader] = {
    QuestionType.mcq.value: exact_match,
    QuestionType.short_answer.value: exact_match,
}


def grade_question(question: dict, answer: Optional[str]) -> bool:
    grader = GRADERS.get(question.get("type"), exact_match)
    return grader(question, answer)


def score_answers(questions: Iterable[dict], answers: Mapping[str, str]) -> Tuple[int, int]:
    """
    Score a submission.

    Returns:
        Tuple of (score, total_questions). Answers keyed by ids that are not
        in ``questions`` are ignored.
    """
    questions = list(questions)
    score = sum(1 for q in questions if grade_question(q, answers.get(q.get("id"))))
    return score, len(questions)


def score_percentage(score: int, total_questions: int) -> int:
    if total_questions <= 0:
        return 0
    # Halves round up
    return (score * 200 + total_questions) // (2 * total_questions)
