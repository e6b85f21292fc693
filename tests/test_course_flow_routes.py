"""End-to-end flow over HTTP: course creation, enrollment approval, quiz taking."""
import pytest

from api.models.user import ClassLevel, UserRole


@pytest.fixture
def people(make_user):
    lecturer = make_user(UserRole.lecturer, subject="lecturer-sub", full_name="Dr. Ada")
    student = make_user(UserRole.student, subject="student-sub", full_name="Tunde Bello", class_level=ClassLevel.ND1)
    return lecturer, student


QUIZ = {
    "title": "Week 1",
    "questions": [
        {"question": "Capital of France?", "type": "mcq",
         "options": ["Paris", "London", "Rome", "Berlin"], "correct_answer": "Paris"},
        {"question": "6 x 7?", "type": "short-answer", "correct_answer": "42"},
    ],
}


def create_course(client, auth_header, title="Geography", required_class="ND1"):
    response = client.post(
        "/api/courses/",
        json={"title": title, "required_class": required_class},
        headers=auth_header("lecturer-sub"),
    )
    assert response.status_code == 201
    return response.json()


def test_full_course_flow(client, people, auth_header):
    lecturer = auth_header("lecturer-sub")
    student = auth_header("student-sub")
    course = create_course(client, auth_header)
    assert course["lecturer_name"] == "Dr. Ada"

    available = client.get("/api/courses/available", headers=student).json()
    assert [c["id"] for c in available] == [course["id"]]

    status = client.get("/api/enrollments/status", params={"course_id": course["id"]}, headers=student).json()
    assert status == {"state": "none", "enrollment": None}

    requested = client.post("/api/enrollments/", json={"course_id": course["id"]}, headers=student)
    assert requested.status_code == 201
    assert requested.json()["approved"] is False

    # Not yet approved: no quizzes, no course details
    assert client.get(f"/api/courses/{course['id']}/quizzes", headers=student).status_code == 403

    pending = client.get("/api/enrollments/pending", headers=lecturer).json()
    assert pending["skipped"] == 0
    assert [(p["student_name"], p["course_name"]) for p in pending["items"]] == [("Tunde Bello", "Geography")]

    approved = client.post(f"/api/enrollments/{requested.json()['id']}/approve", headers=lecturer)
    assert approved.json()["approved"] is True

    status = client.get("/api/enrollments/status", params={"course_id": course["id"]}, headers=student).json()
    assert status["state"] == "enrolled"

    students = client.get(f"/api/courses/{course['id']}/students", headers=lecturer).json()
    assert [s["student_email"] for s in students["items"]] == ["student2@school.edu"]

    quiz = client.post("/api/quizzes/", json={"course_id": course["id"], **QUIZ}, headers=lecturer)
    assert quiz.status_code == 201
    quiz_id = quiz.json()["id"]

    listed = client.get(f"/api/courses/{course['id']}/quizzes", headers=student).json()
    assert [q["correct_answer"] for q in listed[0]["questions"]] == [None, None]

    submitted = client.post(
        f"/api/quizzes/{quiz_id}/submit",
        json={"course_id": course["id"], "answers": {"q1": "paris", "q2": " 42 "}},
        headers=student,
    )
    assert submitted.status_code == 201
    assert (submitted.json()["score"], submitted.json()["total_questions"]) == (2, 2)
    assert submitted.json()["percentage"] == 100

    mine = client.get("/api/quizzes/results/mine", headers=student).json()
    assert [(r["quiz_title"], r["course_name"]) for r in mine["items"]] == [("Week 1", "Geography")]

    results = client.get("/api/quizzes/results/lecturer", headers=lecturer).json()
    assert [(r["student_name"], r["score"]) for r in results["items"]] == [("Tunde Bello", 2)]

    my_courses = client.get("/api/enrollments/mine", headers=student).json()
    assert my_courses[0]["course"]["title"] == "Geography"


def test_available_courses_hide_materials_and_filter_class(client, people, auth_header):
    create_course(client, auth_header, title="ND1 course", required_class="ND1")
    create_course(client, auth_header, title="HND2 course", required_class="HND2")

    available = client.get("/api/courses/available", headers=auth_header("student-sub")).json()
    assert [c["title"] for c in available] == ["ND1 course"]
    assert available[0]["files"] == []


def test_students_cannot_create_courses(client, people, auth_header):
    response = client.post(
        "/api/courses/", json={"title": "Mine", "required_class": "ND1"}, headers=auth_header("student-sub")
    )
    assert response.status_code == 403


def test_invalid_quiz_names_question(client, people, auth_header):
    course = create_course(client, auth_header)
    bad = {
        "course_id": course["id"],
        "title": "Broken",
        "questions": [
            QUIZ["questions"][0],
            {"question": "Pick", "type": "mcq", "options": ["a", ""], "correct_answer": "a"},
        ],
    }
    response = client.post("/api/quizzes/", json=bad, headers=auth_header("lecturer-sub"))

    assert response.status_code == 400
    assert response.json()["detail"] == "All options for question 2 are required"
    assert client.get(f"/api/courses/{course['id']}/quizzes", headers=auth_header("lecturer-sub")).json() == []


def test_other_lecturer_cannot_approve(client, people, make_user, auth_header):
    make_user(UserRole.lecturer, subject="rival-sub")
    course = create_course(client, auth_header)
    requested = client.post(
        "/api/enrollments/", json={"course_id": course["id"]}, headers=auth_header("student-sub")
    ).json()

    response = client.post(f"/api/enrollments/{requested['id']}/approve", headers=auth_header("rival-sub"))
    assert response.status_code == 403


def test_unenrolled_student_cannot_submit(client, people, auth_header):
    course = create_course(client, auth_header)
    quiz = client.post(
        "/api/quizzes/", json={"course_id": course["id"], **QUIZ}, headers=auth_header("lecturer-sub")
    ).json()

    response = client.post(
        f"/api/quizzes/{quiz['id']}/submit",
        json={"course_id": course["id"], "answers": {"q1": "Paris"}},
        headers=auth_header("student-sub"),
    )
    assert response.status_code == 403


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
