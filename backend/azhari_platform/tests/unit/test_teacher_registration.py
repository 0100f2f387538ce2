"""Tests for the teacher registration workflow."""

import pytest

from azhari_platform.models import TeacherAssignment, TeacherProfile, TeacherRequest
from azhari_platform.platform.errors import AppError, NotFoundError, ValidationError
from azhari_platform.teachers.registration import (
    DEFAULT_REJECTION_REASON,
    TeacherRegistrationForm,
    TeacherRegistrationService,
)


def valid_form(**overrides):
    values = dict(
        school="معهد القاهرة الأزهري",
        employee_id="EMP-42",
        phone="01012345678",
        stage="secondary",
        grades=["second", "first"],
        subject="فيزياء",
    )
    values.update(overrides)
    return TeacherRegistrationForm(**values)


@pytest.fixture
def service(db_session):
    return TeacherRegistrationService(db_session)


class TestSubmit:
    def test_valid_form_creates_pending_request(self, service, db_session):
        request = service.submit("user-1", valid_form())

        assert request.status == "pending"
        assert request.assigned_grades == ["first", "second"]
        assert db_session.query(TeacherRequest).count() == 1

    def test_every_invalid_field_is_reported_and_nothing_saved(self, service, db_session):
        form = TeacherRegistrationForm(school="", employee_id=" ", phone="", stage="college", grades=[], subject="")

        with pytest.raises(ValidationError) as exc_info:
            service.submit("user-1", form)

        assert set(exc_info.value.field_errors) == {"school", "employee_id", "phone", "stage", "grades", "subject"}
        assert db_session.query(TeacherRequest).count() == 0

    def test_unmapped_subject_label_is_rejected(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.submit("user-1", valid_form(subject="رسم"))

        assert "subject" in exc_info.value.field_errors

    def test_unknown_grade_is_rejected(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.submit("user-1", valid_form(grades=["first", "fourth"]))

        assert "grades" in exc_info.value.field_errors

    @pytest.mark.parametrize(
        "stage,subject",
        [("preparatory", "علوم"), ("preparatory", "دراسات"), ("secondary", "فرنساوي")],
    )
    def test_every_form_subject_is_accepted(self, service, stage, subject):
        request = service.submit("user-1", valid_form(stage=stage, subject=subject))

        assert request.status == "pending"

    def test_arabic_grade_labels_are_stored_as_keys(self, service):
        request = service.submit("user-1", valid_form(grades=["الصف الثالث الثانوي", "الصف الأول الثانوي"]))

        assert request.assigned_grades == ["first", "third"]


class TestReview:
    def test_approve_creates_assignments_and_unapproved_profile(self, service, db_session, make_profile):
        user = make_profile()
        request = service.submit(user.id, valid_form())

        service.approve(request.id)

        db_session.refresh(user)
        assert user.role == "teacher"
        assignments = db_session.query(TeacherAssignment).filter(TeacherAssignment.teacher_id == user.id).all()
        assert sorted(a.grade for a in assignments) == ["first", "second"]
        assert {a.category for a in assignments} == {"science"}
        assert {a.subject_name for a in assignments} == {"الفيزياء"}
        profile = db_session.query(TeacherProfile).filter(TeacherProfile.teacher_id == user.id).one()
        assert profile.is_approved is False
        assert request.reviewed_at is not None

    def test_grouped_label_assignment_covers_whole_category(self, service, db_session, make_profile):
        user = make_profile()
        request = service.submit(user.id, valid_form(stage="preparatory", grades=["first"], subject="دراسات"))

        service.approve(request.id)

        [assignment] = db_session.query(TeacherAssignment).filter(TeacherAssignment.teacher_id == user.id).all()
        assert (assignment.category, assignment.subject_name) == ("studies", None)

    def test_approve_replaces_previous_assignments_for_stage_and_category(self, service, db_session, make_profile):
        user = make_profile()
        db_session.add(TeacherAssignment(teacher_id=user.id, category="science", stage="secondary", grade="third"))
        db_session.commit()
        request = service.submit(user.id, valid_form(grades=["first"]))

        service.approve(request.id)

        grades = [a.grade for a in db_session.query(TeacherAssignment).filter(TeacherAssignment.teacher_id == user.id)]
        assert grades == ["first"]

    def test_approve_twice_is_rejected(self, service, make_profile):
        request = service.submit(make_profile().id, valid_form())
        service.approve(request.id)

        with pytest.raises(AppError) as exc_info:
            service.approve(request.id)

        assert exc_info.value.status_code == 409

    def test_reviewed_request_cannot_be_rejected(self, service, make_profile):
        request = service.submit(make_profile().id, valid_form())
        service.approve(request.id)

        with pytest.raises(AppError) as exc_info:
            service.reject(request.id, "متأخر")

        assert exc_info.value.code == "INVALID_STATE"

    def test_reject_uses_default_reason(self, service, make_profile):
        request = service.submit(make_profile().id, valid_form())

        rejected = service.reject(request.id, "  ")

        assert rejected.status == "rejected"
        assert rejected.rejection_reason == DEFAULT_REJECTION_REASON

    def test_unknown_request_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            service.reject("missing")

    def test_profile_approval_makes_teacher_selectable(self, service, db_session, make_profile):
        from azhari_platform.teachers.resolver import TeacherChoiceResolver

        user = make_profile(full_name="أ. منى")
        service.approve(service.submit(user.id, valid_form()).id)
        resolver = TeacherChoiceResolver(db_session)
        assert resolver.list_eligible_teachers("science", "secondary", "first") == []

        service.set_profile_approval(user.id, True)

        [teacher] = resolver.list_eligible_teachers("science", "secondary", "first")
        assert teacher.teacher_name == "أ. منى"
        assert teacher.grades == ["first", "second"]
