"""
Tests for the subscription expiry reminder job.

CRITICAL: These tests verify that:
1. Only active subscriptions ending 6-7 days out are candidates
2. A second run on the same day inserts nothing for already-notified users
3. A store failure aborts the run with success=False and inserts nothing
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from azhari_platform.jobs.expiry_notifications import (
    EXPIRY_TITLE,
    SUBJECT_FALLBACK,
    ExpiryNotificationJob,
    build_message,
)
from azhari_platform.models import Notification
from azhari_platform.platform.errors import UpstreamUnavailableError
from azhari_platform.platform.events import NOTIFICATION_INSERTED


@pytest.fixture
def job(db_session, event_bus):
    return ExpiryNotificationJob(db_session, event_bus=event_bus, dry_run=False)


def _reminders(db_session):
    return db_session.query(Notification).filter(Notification.title == EXPIRY_TITLE).all()


class TestCandidateWindow:
    def test_six_and_a_half_days_is_included(self, job, db_session, make_profile, make_subject, make_subscription, now):
        student = make_profile(full_name="سارة")
        subject = make_subject(name="الكيمياء")
        make_subscription(student.id, subject.id, end_in=timedelta(days=6, hours=12))

        result = job.run(now=now)

        assert result.success is True
        assert result.notifications_sent == 1
        assert result.subscriptions_checked == 1
        [reminder] = _reminders(db_session)
        assert reminder.user_id == student.id
        assert "سارة" in reminder.message
        assert '"الكيمياء"' in reminder.message

    @pytest.mark.parametrize("end_in", [timedelta(days=8), timedelta(days=-1), timedelta(days=5, hours=23)])
    def test_outside_window_is_excluded(self, job, db_session, make_profile, make_subject, make_subscription, now, end_in):
        student = make_profile()
        subject = make_subject()
        make_subscription(student.id, subject.id, end_in=end_in)

        result = job.run(now=now)

        assert result.success is True
        assert result.notifications_sent == 0
        assert _reminders(db_session) == []

    def test_inactive_subscription_is_excluded(self, job, db_session, make_profile, make_subject, make_subscription, now):
        student = make_profile()
        subject = make_subject()
        make_subscription(student.id, subject.id, end_in=timedelta(days=6, hours=12), is_active=False)

        assert job.run(now=now).notifications_sent == 0

    def test_no_candidates_message(self, job, now):
        result = job.run(now=now)

        assert result.to_dict() == {
            "success": True,
            "message": "No subscriptions expiring in 7 days",
            "notificationsSent": 0,
            "subscriptionsChecked": 0,
        }


class TestDeduplication:
    def test_second_run_same_day_sends_nothing(self, job, db_session, make_profile, make_subject, make_subscription, now):
        for _ in range(3):
            student = make_profile()
            make_subscription(student.id, make_subject().id, end_in=timedelta(days=6, hours=12))

        first = job.run(now=now)
        second = job.run(now=now + timedelta(minutes=5))

        assert first.notifications_sent == 3
        assert second.success is True
        assert second.notifications_sent == 0
        assert second.message == "All notifications already sent today"
        assert len(_reminders(db_session)) == 3

    def test_partial_coverage_only_notifies_new_users(self, job, db_session, make_profile, make_subject, make_subscription, now):
        notified = make_profile()
        fresh = make_profile()
        make_subscription(notified.id, make_subject().id, end_in=timedelta(days=6, hours=12))
        make_subscription(fresh.id, make_subject().id, end_in=timedelta(days=6, hours=12))
        db_session.add(Notification(user_id=notified.id, title=EXPIRY_TITLE, message="earlier", created_at=now - timedelta(hours=2)))
        db_session.commit()

        result = job.run(now=now)

        assert result.notifications_sent == 1
        assert {n.user_id for n in _reminders(db_session)} == {notified.id, fresh.id}

    def test_reminder_from_yesterday_does_not_block(self, job, db_session, make_profile, make_subject, make_subscription, now):
        student = make_profile()
        make_subscription(student.id, make_subject().id, end_in=timedelta(days=6, hours=12))
        db_session.add(Notification(user_id=student.id, title=EXPIRY_TITLE, message="old", created_at=now - timedelta(days=1)))
        db_session.commit()

        assert job.run(now=now).notifications_sent == 1

    def test_each_expiring_subject_gets_a_reminder(self, job, db_session, make_profile, make_subject, make_subscription, now):
        student = make_profile()
        make_subscription(student.id, make_subject(name="الفيزياء").id, end_in=timedelta(days=6, hours=6))
        make_subscription(student.id, make_subject(name="الأحياء").id, end_in=timedelta(days=6, hours=18))

        result = job.run(now=now)

        assert result.subscriptions_checked == 2
        assert result.notifications_sent == 2
        messages = [n.message for n in _reminders(db_session)]
        assert any('"الفيزياء"' in m for m in messages)
        assert any('"الأحياء"' in m for m in messages)
        assert job.run(now=now + timedelta(hours=1)).notifications_sent == 0


class TestEventsAndFailures:
    def test_inserted_reminders_are_published(self, job, event_bus, make_profile, make_subject, make_subscription, now):
        received = []
        event_bus.subscribe(NOTIFICATION_INSERTED, received.append)
        student = make_profile()
        make_subscription(student.id, make_subject().id, end_in=timedelta(days=6, hours=12))

        job.run(now=now)

        assert len(received) == 1
        assert received[0]["user_id"] == student.id
        assert received[0]["title"] == EXPIRY_TITLE

    def test_read_failure_aborts_run(self, db_session, event_bus, now):
        store = MagicMock()
        store.list_expiring_subscriptions.side_effect = UpstreamUnavailableError("Store operation failed")
        job = ExpiryNotificationJob(db_session, store=store, event_bus=event_bus)

        result = job.run(now=now)

        assert result.success is False
        assert result.to_dict() == {"success": False, "error": "Store operation failed"}
        store.insert_notifications.assert_not_called()

    def test_insert_failure_reports_error_and_publishes_nothing(self, db_session, event_bus, now):
        subscription = MagicMock(student_id="s-1", subject_id="subj-1", end_date=now + timedelta(days=6, hours=12))
        store = MagicMock()
        store.list_expiring_subscriptions.return_value = [subscription]
        store.get_subjects.return_value = {}
        store.get_profiles.return_value = {}
        store.users_notified_between.return_value = set()
        store.insert_notifications.side_effect = UpstreamUnavailableError("insert failed")
        received = []
        event_bus.subscribe(NOTIFICATION_INSERTED, received.append)

        result = ExpiryNotificationJob(db_session, store=store, event_bus=event_bus).run(now=now)

        assert result.success is False
        assert received == []

    def test_dry_run_inserts_nothing(self, db_session, event_bus, make_profile, make_subject, make_subscription, now):
        student = make_profile()
        make_subscription(student.id, make_subject().id, end_in=timedelta(days=6, hours=12))

        result = ExpiryNotificationJob(db_session, event_bus=event_bus, dry_run=True).run(now=now)

        assert result.success is True
        assert result.notifications_sent == 0
        assert _reminders(db_session) == []


class TestMessage:
    def test_missing_subject_uses_fallback(self, now):
        message = build_message("علي", None, now)

        assert f'"{SUBJECT_FALLBACK}"' in message
        assert message.startswith("مرحباً علي، ")
        assert message.endswith("قم بالتجديد للاستمرار في الوصول للمحتوى.")

    def test_date_is_arabic(self, now):
        assert "١٠ مارس ٢٠٢٦" in build_message("علي", "الفقه", now)
