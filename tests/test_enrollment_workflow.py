import pytest
from sqlalchemy.exc import OperationalError

from api.core.errors import Forbidden, NotFound, ValidationFailed
from api.models.enrollment import Enrollment
from api.models.user import UserRole
from api.services import enrollment_service


@pytest.fixture
def setup(make_user, make_course):
    lecturer = make_user(UserRole.lecturer, full_name="Dr. Ada")
    student = make_user(UserRole.student, full_name="Tunde Bello", email="tunde@school.edu")
    course = make_course(lecturer, title="Algorithms")
    return lecturer, student, course


def test_request_then_status_is_pending(db, setup):
    _, student, course = setup
    enrollment_service.request_enrollment(db, student.id, course.id)

    enrollment = enrollment_service.check_status(db, student.id, course.id)
    assert enrollment is not None
    assert enrollment.approved is False
    assert enrollment_service.enrollment_state(enrollment) == "pending"


def test_status_without_request_is_none(db, setup):
    _, student, course = setup
    enrollment = enrollment_service.check_status(db, student.id, course.id)
    assert enrollment is None
    assert enrollment_service.enrollment_state(enrollment) == "none"


def test_duplicate_request_returns_existing(db, setup):
    _, student, course = setup
    first = enrollment_service.request_enrollment(db, student.id, course.id)
    second = enrollment_service.request_enrollment(db, student.id, course.id)

    assert first.id == second.id
    assert db.query(Enrollment).count() == 1


def test_only_students_request_enrollment(db, setup):
    lecturer, _, course = setup
    with pytest.raises(ValidationFailed):
        enrollment_service.request_enrollment(db, lecturer.id, course.id)


def test_request_for_missing_course(db, setup):
    _, student, _ = setup
    with pytest.raises(NotFound):
        enrollment_service.request_enrollment(db, student.id, 999)


def test_approve_twice_is_idempotent(db, setup):
    lecturer, student, course = setup
    enrollment = enrollment_service.request_enrollment(db, student.id, course.id)

    enrollment_service.approve(db, enrollment.id, lecturer)
    enrollment_service.approve(db, enrollment.id, lecturer)

    rows = db.query(Enrollment).all()
    assert len(rows) == 1
    assert rows[0].approved is True
    assert enrollment_service.enrollment_state(rows[0]) == "enrolled"
    assert enrollment_service.has_access(db, student.id, course.id)


def test_approve_requires_course_ownership(db, setup, make_user):
    _, student, course = setup
    other_lecturer = make_user(UserRole.lecturer)
    enrollment = enrollment_service.request_enrollment(db, student.id, course.id)

    with pytest.raises(Forbidden):
        enrollment_service.approve(db, enrollment.id, other_lecturer)
    assert enrollment_service.check_status(db, student.id, course.id).approved is False


def test_admin_can_approve_any_enrollment(db, setup, make_user):
    _, student, course = setup
    admin = make_user(UserRole.admin)
    enrollment = enrollment_service.request_enrollment(db, student.id, course.id)

    assert enrollment_service.approve(db, enrollment.id, admin).approved is True


def test_approve_missing_enrollment(db, setup):
    lecturer, _, _ = setup
    with pytest.raises(NotFound):
        enrollment_service.approve(db, 404, lecturer)


def test_pending_listing_joins_names(db, setup, make_user, make_course):
    lecturer, student, course = setup
    other_course = make_course(make_user(UserRole.lecturer), title="Not mine")
    enrollment_service.request_enrollment(db, student.id, course.id)
    enrollment_service.request_enrollment(db, student.id, other_course.id)

    result = enrollment_service.list_pending_for_lecturer(db, lecturer.id)

    assert result.skipped == 0
    assert [(p.student_name, p.course_name) for p in result.items] == [("Tunde Bello", "Algorithms")]


def test_pending_listing_excludes_approved(db, setup):
    lecturer, student, course = setup
    enrollment = enrollment_service.request_enrollment(db, student.id, course.id)
    enrollment_service.approve(db, enrollment.id, lecturer)

    assert enrollment_service.list_pending_for_lecturer(db, lecturer.id).items == []


def test_pending_listing_skips_failed_lookups(db, setup, make_user, monkeypatch):
    lecturer, student, course = setup
    broken = make_user(UserRole.student)
    enrollment_service.request_enrollment(db, student.id, course.id)
    enrollment_service.request_enrollment(db, broken.id, course.id)

    real_load = enrollment_service._load_student

    def flaky_load(session, student_id):
        if student_id == broken.id:
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return real_load(session, student_id)

    monkeypatch.setattr(enrollment_service, "_load_student", flaky_load)
    result = enrollment_service.list_pending_for_lecturer(db, lecturer.id)

    assert result.partial
    assert result.skipped == 1
    assert [p.student_id for p in result.items] == [student.id]


def test_missing_student_reads_as_unknown(db, setup, monkeypatch):
    lecturer, student, course = setup
    enrollment = enrollment_service.request_enrollment(db, student.id, course.id)
    enrollment_service.approve(db, enrollment.id, lecturer)

    monkeypatch.setattr(enrollment_service, "_load_student", lambda session, student_id: None)

    result = enrollment_service.list_approved_for_course(db, course.id)
    assert result.items[0].student_name == "Unknown Student"
    assert result.items[0].student_email == "unknown@email.com"


def test_approved_listing_has_contact_details(db, setup):
    lecturer, student, course = setup
    enrollment = enrollment_service.request_enrollment(db, student.id, course.id)
    enrollment_service.approve(db, enrollment.id, lecturer)

    result = enrollment_service.list_approved_for_course(db, course.id)
    assert [(s.student_name, s.student_email) for s in result.items] == [("Tunde Bello", "tunde@school.edu")]


def test_student_listing_includes_course(db, setup):
    _, student, course = setup
    enrollment_service.request_enrollment(db, student.id, course.id)

    result = enrollment_service.list_for_student(db, student.id)
    assert len(result.items) == 1
    assert result.items[0].course.title == "Algorithms"
    assert result.items[0].approved is False


def test_course_access_rules(db, setup, make_user):
    lecturer, student, course = setup
    enrollment_service.ensure_course_access(db, course, lecturer)
    enrollment_service.ensure_course_access(db, course, make_user(UserRole.admin))

    with pytest.raises(Forbidden):
        enrollment_service.ensure_course_access(db, course, student)

    enrollment = enrollment_service.request_enrollment(db, student.id, course.id)
    with pytest.raises(Forbidden):
        enrollment_service.ensure_course_access(db, course, student)

    enrollment_service.approve(db, enrollment.id, lecturer)
    enrollment_service.ensure_course_access(db, course, student)
