import pytest
from sqlalchemy.exc import OperationalError

from api.core.errors import Forbidden, NotFound, ValidationFailed
from api.models.quiz import Quiz, QuizResult
from api.models.user import UserRole
from api.schemas.quiz import QuizQuestionCreate
from api.services import quiz_service


def paris_and_42():
    return [
        QuizQuestionCreate(question="Capital of France?", type="mcq",
                           options=["Paris", "London", "Rome", "Berlin"], correct_answer="Paris"),
        QuizQuestionCreate(question="6 x 7?", type="short-answer", correct_answer="42"),
    ]


@pytest.fixture
def setup(make_user, make_course):
    lecturer = make_user(UserRole.lecturer, full_name="Dr. Ada")
    student = make_user(UserRole.student, full_name="Tunde Bello")
    course = make_course(lecturer, title="Geography")
    return lecturer, student, course


@pytest.fixture
def quiz(db, setup):
    lecturer, _, course = setup
    return quiz_service.create_quiz(db, course.id, "Week 1", paris_and_42(), lecturer)


def test_question_ids_follow_input_order(quiz):
    assert [q["id"] for q in quiz.questions] == ["q1", "q2"]
    assert quiz.questions[1]["options"] is None


def test_correct_answers_score_full_marks(db, setup, quiz):
    _, student, course = setup
    result = quiz_service.submit_result(db, student.id, quiz.id, course.id, {"q1": "paris", "q2": " 42 "})

    assert (result.score, result.total_questions) == (2, 2)
    assert quiz_service.score_percentage(result) == 100


def test_wrong_answer_scores_zero(db, setup, quiz):
    _, student, course = setup
    result = quiz_service.submit_result(db, student.id, quiz.id, course.id, {"q1": "London"})

    assert (result.score, result.total_questions) == (0, 2)
    assert result.answers == {"q1": "London"}


def test_each_submission_is_a_new_result(db, setup, quiz):
    _, student, course = setup
    quiz_service.submit_result(db, student.id, quiz.id, course.id, {"q1": "Paris"})
    quiz_service.submit_result(db, student.id, quiz.id, course.id, {"q1": "London"})

    assert db.query(QuizResult).count() == 2


@pytest.mark.parametrize(
    "questions, message",
    [
        ([QuizQuestionCreate(question="", correct_answer="x")], "Question 1 is required"),
        ([QuizQuestionCreate(question="Q", correct_answer="x", options=["x", "y"]),
          QuizQuestionCreate(question="Q2", correct_answer=" ", type="short-answer")],
         "Correct answer for question 2 is required"),
        ([QuizQuestionCreate(question="Q", correct_answer="a", options=["a", "b"]),
          QuizQuestionCreate(question="Q2", correct_answer="a", options=["a", " "])],
         "All options for question 2 are required"),
    ],
)
def test_invalid_questions_are_rejected_before_writing(db, setup, questions, message):
    lecturer, _, course = setup
    with pytest.raises(ValidationFailed) as excinfo:
        quiz_service.create_quiz(db, course.id, "Broken", questions, lecturer)

    assert excinfo.value.message == message
    assert db.query(Quiz).count() == 0


def test_quiz_title_is_required(db, setup):
    lecturer, _, course = setup
    with pytest.raises(ValidationFailed):
        quiz_service.create_quiz(db, course.id, "  ", paris_and_42(), lecturer)


def test_mcq_without_options_is_scored_on_the_answer(db, setup):
    lecturer, student, course = setup
    questions = [QuizQuestionCreate(question="Pick one", type="mcq", options=[], correct_answer="A")]
    quiz = quiz_service.create_quiz(db, course.id, "Odd", questions, lecturer)

    result = quiz_service.submit_result(db, student.id, quiz.id, course.id, {"q1": "A"})
    assert (result.score, result.total_questions) == (1, 1)


def test_only_course_owner_creates_quizzes(db, setup, make_user):
    _, _, course = setup
    with pytest.raises(Forbidden):
        quiz_service.create_quiz(db, course.id, "Week 1", paris_and_42(), make_user(UserRole.lecturer))


def test_submit_to_missing_quiz(db, setup):
    _, student, course = setup
    with pytest.raises(NotFound):
        quiz_service.submit_result(db, student.id, 999, course.id, {})


def test_submit_with_wrong_course(db, setup, quiz, make_course):
    lecturer, student, _ = setup
    other = make_course(lecturer, title="History")
    with pytest.raises(ValidationFailed):
        quiz_service.submit_result(db, student.id, quiz.id, other.id, {"q1": "Paris"})


def test_student_view_hides_answers(quiz):
    hidden = quiz_service.to_quiz_response(quiz, reveal_answers=False)
    shown = quiz_service.to_quiz_response(quiz, reveal_answers=True)

    assert all(q.correct_answer is None for q in hidden.questions)
    assert [q.correct_answer for q in shown.questions] == ["Paris", "42"]


def test_student_results_join_titles(db, setup, quiz):
    _, student, course = setup
    quiz_service.submit_result(db, student.id, quiz.id, course.id, {"q1": "Paris"})

    listing = quiz_service.list_results_for_student(db, student.id)
    assert listing.skipped == 0
    item = listing.items[0]
    assert (item.quiz_title, item.course_name, item.percentage) == ("Week 1", "Geography", 50)


def test_student_results_tolerate_missing_quiz(db, setup, quiz, monkeypatch):
    _, student, course = setup
    quiz_service.submit_result(db, student.id, quiz.id, course.id, {"q1": "Paris"})

    monkeypatch.setattr(quiz_service, "_load_quiz", lambda session, quiz_id: None)
    monkeypatch.setattr(quiz_service, "_load_course", lambda session, course_id: None)

    item = quiz_service.list_results_for_student(db, student.id).items[0]
    assert (item.quiz_title, item.course_name) == ("Unknown Quiz", "Unknown Course")


def test_lecturer_results_skip_failed_rows(db, setup, quiz, make_user, monkeypatch):
    _, student, course = setup
    other = make_user(UserRole.student, full_name="Broken Row")
    quiz_service.submit_result(db, student.id, quiz.id, course.id, {"q1": "Paris", "q2": "42"})
    quiz_service.submit_result(db, other.id, quiz.id, course.id, {})

    real_load = quiz_service._load_student

    def flaky_load(session, student_id):
        if student_id == other.id:
            raise OperationalError("SELECT", {}, Exception("timeout"))
        return real_load(session, student_id)

    monkeypatch.setattr(quiz_service, "_load_student", flaky_load)
    listing = quiz_service.list_results_for_lecturer(db, setup[0].id)

    assert listing.skipped == 1
    assert [(r.student_name, r.quiz_title, r.score) for r in listing.items] == [("Tunde Bello", "Week 1", 2)]
