"""Tests for admin grant / renew / deactivate."""

from datetime import timedelta

import pytest

from azhari_platform.entitlements import EntitlementService
from azhari_platform.models import Subscription
from azhari_platform.platform.errors import NotFoundError, ValidationError
from azhari_platform.subscriptions.admin import SubscriptionAdminService
from azhari_platform.utils.time import ensure_utc


@pytest.fixture
def service(db_session):
    return SubscriptionAdminService(db_session)


class TestGrant:
    def test_new_subjects_are_inserted(self, service, db_session, make_profile, make_subject, now):
        student = make_profile()
        subjects = [make_subject(name="الفيزياء"), make_subject(name="الكيمياء")]

        rows = service.grant(student.id, [s.id for s in subjects], actor_id="admin-1", duration_days=30, now=now)

        assert len(rows) == 2
        assert all(r.renewal_count == 0 and r.created_by == "admin-1" for r in rows)
        assert db_session.query(Subscription).count() == 2

    def test_existing_subject_is_renewed_in_place(
        self, service, db_session, make_profile, make_subject, make_subscription, student_session, now
    ):
        student = make_profile()
        subject = make_subject()
        original = make_subscription(student.id, subject.id, end_in=timedelta(days=-3), is_active=False)

        [renewed] = service.grant(student.id, [subject.id], duration_days=60, now=now)

        assert renewed.id == original.id
        assert renewed.is_active is True
        assert renewed.renewal_count == 1
        assert db_session.query(Subscription).count() == 1
        assert EntitlementService(db_session).has_access(student_session(student.id), subject.id, now=now)

    def test_explicit_end_date(self, service, make_profile, make_subject, now):
        student = make_profile()
        subject = make_subject()
        end = now + timedelta(days=90)

        [row] = service.grant(student.id, [subject.id], end_date=end, now=now)

        assert ensure_utc(row.end_date) == end

    def test_end_before_start_is_rejected(self, service, db_session, make_profile, make_subject, now):
        with pytest.raises(ValidationError) as exc_info:
            service.grant(make_profile().id, [make_subject().id], end_date=now - timedelta(days=1), now=now)

        assert "end_date" in exc_info.value.field_errors
        assert db_session.query(Subscription).count() == 0

    @pytest.mark.parametrize("kwargs", [{"subject_ids": []}, {"subject_ids": ["s"], "duration_days": 0}])
    def test_invalid_requests(self, service, kwargs, now):
        with pytest.raises(ValidationError):
            service.grant("student-1", now=now, **kwargs)


class TestDeactivate:
    def test_deactivate_keeps_row_and_revokes_access(self, service, db_session, make_profile, make_subject, make_subscription, student_session, now):
        student = make_profile()
        subject = make_subject()
        subscription = make_subscription(student.id, subject.id, end_in=timedelta(days=30))

        service.deactivate(subscription.id, actor_id="admin-1")

        assert db_session.query(Subscription).count() == 1
        assert EntitlementService(db_session).has_access(student_session(student.id), subject.id, now=now) is False

    def test_unknown_subscription(self, service):
        with pytest.raises(NotFoundError):
            service.deactivate("missing")

    def test_list_for_student_newest_end_first(self, service, make_profile, make_subject, make_subscription):
        student = make_profile()
        make_subscription(student.id, make_subject().id, end_in=timedelta(days=5))
        later = make_subscription(student.id, make_subject().id, end_in=timedelta(days=50))

        assert service.list_for_student(student.id)[0].id == later.id
