"""
In-app notifications.

A user sees the rows addressed to them plus broadcasts (user_id NULL).
Every committed insert is published on the event bus so live clients can
update without polling.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.models.notification import Notification
from azhari_platform.platform.errors import (
    AccessDeniedError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from azhari_platform.platform.events import NOTIFICATION_INSERTED, EventBus, get_event_bus

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20


def publish_inserted(event_bus: EventBus, notifications: List[Notification]) -> None:
    for notification in notifications:
        event_bus.publish(NOTIFICATION_INSERTED, notification.to_event())


class NotificationService:
    def __init__(self, db_session: Session, event_bus: Optional[EventBus] = None):
        self.db = db_session
        self.event_bus = event_bus or get_event_bus()

    def _visible_to(self, user_id: str):
        return or_(Notification.user_id == user_id, Notification.user_id.is_(None))

    def list_for_user(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> List[Notification]:
        """Own and broadcast notifications, newest first."""
        try:
            return (
                self.db.query(Notification)
                .filter(self._visible_to(user_id))
                .order_by(Notification.created_at.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load notifications", upstream="database") from e

    def unread_count(self, user_id: str) -> int:
        try:
            return (
                self.db.query(Notification)
                .filter(self._visible_to(user_id), Notification.is_read.is_(False))
                .count()
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not count notifications", upstream="database") from e

    def mark_read(self, user_id: str, notification_id: str) -> Notification:
        try:
            notification = (
                self.db.query(Notification)
                .filter(Notification.id == notification_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load notification", upstream="database") from e

        if notification is None:
            raise NotFoundError("Notification", notification_id)
        if notification.user_id is not None and notification.user_id != user_id:
            raise AccessDeniedError("Not your notification", reason="not_recipient")

        if not notification.is_read:
            notification.is_read = True
            self._commit()
        return notification

    def notify_user(self, user_id: Optional[str], title: str, message: str) -> Notification:
        if not (title or "").strip() or not (message or "").strip():
            errors = {}
            if not (title or "").strip():
                errors["title"] = "يرجى إدخال العنوان"
            if not (message or "").strip():
                errors["message"] = "يرجى إدخال نص الإشعار"
            raise ValidationError("Invalid notification", field_errors=errors)

        notification = Notification(user_id=user_id, title=title.strip(), message=message.strip())
        self.db.add(notification)
        self._commit()

        publish_inserted(self.event_bus, [notification])
        logger.info(
            "Notification created",
            extra={"notification_id": notification.id, "user_id": user_id, "broadcast": user_id is None},
        )
        return notification

    def broadcast(self, title: str, message: str) -> Notification:
        """Visible to every user."""
        return self.notify_user(None, title, message)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Notification write failed", extra={"error": str(e)})
            raise UpstreamUnavailableError("Could not save notification", upstream="database") from e
