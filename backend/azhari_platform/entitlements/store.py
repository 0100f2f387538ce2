"""
Row access for subscriptions, profiles, subjects and notifications.

This is the only layer that talks to the relational store on behalf of the
evaluator and the expiry job. Every method either returns complete results or
raises UpstreamUnavailableError; batch writes commit once and roll back
entirely on failure, so callers never see a partially applied row set.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.models.notification import Notification
from azhari_platform.models.profile import Profile
from azhari_platform.models.subject import Subject
from azhari_platform.models.subscription import Subscription
from azhari_platform.platform.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class SubscriptionStore:
    def __init__(self, db_session: Session):
        self.db = db_session

    def _unavailable(self, operation: str, error: Exception) -> UpstreamUnavailableError:
        logger.error(
            "Store operation failed",
            extra={"operation": operation, "error": str(error)},
        )
        return UpstreamUnavailableError(f"Store operation failed: {operation}", upstream="database")

    # ------------------------------------------------------------------
    # Point reads
    # ------------------------------------------------------------------

    def get_profile(self, user_id: str) -> Optional[Profile]:
        try:
            return self.db.query(Profile).filter(Profile.id == user_id).first()
        except SQLAlchemyError as e:
            raise self._unavailable("get_profile", e) from e

    def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        try:
            return self.db.query(Subscription).filter(Subscription.id == subscription_id).first()
        except SQLAlchemyError as e:
            raise self._unavailable("get_subscription", e) from e

    # ------------------------------------------------------------------
    # Filtered reads
    # ------------------------------------------------------------------

    def list_active_subscriptions(self, student_id: str) -> List[Subscription]:
        """All is_active rows of a student; expiry is filtered by the caller."""
        try:
            return (
                self.db.query(Subscription)
                .filter(
                    Subscription.student_id == student_id,
                    Subscription.is_active.is_(True),
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise self._unavailable("list_active_subscriptions", e) from e

    def list_subscriptions_for_student(self, student_id: str) -> List[Subscription]:
        try:
            return (
                self.db.query(Subscription)
                .filter(Subscription.student_id == student_id)
                .order_by(Subscription.end_date.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._unavailable("list_subscriptions_for_student", e) from e

    def list_expiring_subscriptions(self, window_start: datetime, window_end: datetime) -> List[Subscription]:
        """Active rows with window_start <= end_date <= window_end."""
        try:
            return (
                self.db.query(Subscription)
                .filter(
                    Subscription.is_active.is_(True),
                    Subscription.end_date >= window_start,
                    Subscription.end_date <= window_end,
                )
                .order_by(Subscription.end_date.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._unavailable("list_expiring_subscriptions", e) from e

    def get_subjects(self, subject_ids: Iterable[str]) -> Dict[str, Subject]:
        ids = list(set(subject_ids))
        if not ids:
            return {}
        try:
            rows = self.db.query(Subject).filter(Subject.id.in_(ids)).all()
        except SQLAlchemyError as e:
            raise self._unavailable("get_subjects", e) from e
        return {row.id: row for row in rows}

    def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        try:
            rows = self.db.query(Profile).filter(Profile.id.in_(ids)).all()
        except SQLAlchemyError as e:
            raise self._unavailable("get_profiles", e) from e
        return {row.id: row for row in rows}

    def users_notified_between(self, title: str, start: datetime, end: datetime) -> Set[str]:
        """user_ids holding a notification with this title created in [start, end)."""
        try:
            rows = (
                self.db.query(Notification.user_id)
                .filter(
                    Notification.title == title,
                    Notification.created_at >= start,
                    Notification.created_at < end,
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise self._unavailable("users_notified_between", e) from e
        return {row.user_id for row in rows if row.user_id is not None}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_notifications(self, notifications: List[Notification]) -> List[Notification]:
        """Insert the whole batch in one transaction."""
        if not notifications:
            return []
        try:
            self.db.add_all(notifications)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._unavailable("insert_notifications", e) from e
        return notifications
