"""
Unit tests for NotificationService.

Tests cover:
- Visibility (own + broadcast, nobody else's)
- Unread count and mark-read ownership
- Insert events on the bus
"""

from datetime import timedelta

import pytest

from azhari_platform.models import Notification
from azhari_platform.platform.errors import AccessDeniedError, NotFoundError, ValidationError
from azhari_platform.platform.events import NOTIFICATION_INSERTED
from azhari_platform.services.notification_service import NotificationService


@pytest.fixture
def service(db_session, event_bus):
    return NotificationService(db_session, event_bus)


@pytest.fixture
def seeded(db_session, now):
    rows = [
        Notification(user_id="user-1", title="لك", message="m", created_at=now - timedelta(hours=3)),
        Notification(user_id=None, title="للجميع", message="m", created_at=now - timedelta(hours=2)),
        Notification(user_id="user-2", title="لغيرك", message="m", created_at=now - timedelta(hours=1)),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


class TestListing:
    def test_own_and_broadcast_newest_first(self, service, seeded):
        titles = [n.title for n in service.list_for_user("user-1")]

        assert titles == ["للجميع", "لك"]

    def test_limit(self, service, db_session, now):
        db_session.add_all(
            Notification(user_id="user-1", title=f"n{i}", message="m", created_at=now - timedelta(minutes=i))
            for i in range(25)
        )
        db_session.commit()

        assert len(service.list_for_user("user-1")) == 20

    def test_unread_count_includes_broadcasts(self, service, seeded):
        assert service.unread_count("user-1") == 2
        assert service.unread_count("user-3") == 1


class TestMarkRead:
    def test_recipient_marks_own(self, service, seeded):
        service.mark_read("user-1", seeded[0].id)

        assert service.unread_count("user-1") == 1

    def test_other_users_notification_is_denied(self, service, seeded):
        with pytest.raises(AccessDeniedError):
            service.mark_read("user-1", seeded[2].id)

    def test_broadcast_can_be_marked(self, service, seeded):
        assert service.mark_read("user-1", seeded[1].id).is_read is True

    def test_missing(self, service):
        with pytest.raises(NotFoundError):
            service.mark_read("user-1", "missing")


class TestCreate:
    def test_broadcast_publishes_insert_event(self, service, event_bus):
        received = []
        event_bus.subscribe(NOTIFICATION_INSERTED, received.append)

        notification = service.broadcast("إعلان", "بدء الامتحانات")

        assert notification.user_id is None
        assert received[0]["id"] == notification.id
        assert received[0]["user_id"] is None

    def test_blank_fields_rejected(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.notify_user("user-1", " ", "")

        assert set(exc_info.value.field_errors) == {"title", "message"}
