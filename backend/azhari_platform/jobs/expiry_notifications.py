"""
Subscription expiry reminder job.

Runs daily (cron or the /api/jobs endpoint). Finds active subscriptions ending
6 to 7 days from now and inserts one reminder per expiring subscription.
Students who already received a reminder earlier today are skipped.

The "already notified today" check is a read before the insert, not a lock:
two overlapping runs may both insert. That is accepted; at most one extra
reminder per subscription per overlap.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from azhari_platform.config import settings
from azhari_platform.entitlements.store import SubscriptionStore
from azhari_platform.models.notification import Notification
from azhari_platform.platform.errors import UpstreamUnavailableError
from azhari_platform.platform.events import EventBus, get_event_bus
from azhari_platform.services.notification_service import publish_inserted
from azhari_platform.utils.time import day_bounds, ensure_utc, format_arabic_date, utcnow

logger = logging.getLogger(__name__)

EXPIRY_TITLE = "تنبيه: اشتراكك ينتهي قريباً"
SUBJECT_FALLBACK = "المادة"
EXPIRY_MESSAGE = (
    'مرحباً {name}، اشتراكك في مادة "{subject}" سينتهي في {date}. '
    "قم بالتجديد للاستمرار في الوصول للمحتوى."
)


@dataclass
class ExpiryJobResult:
    success: bool
    message: str = ""
    notifications_sent: int = 0
    subscriptions_checked: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        if not self.success:
            return {"success": False, "error": self.error or "Unknown error"}
        return {
            "success": True,
            "message": self.message,
            "notificationsSent": self.notifications_sent,
            "subscriptionsChecked": self.subscriptions_checked,
        }


def build_message(full_name: Optional[str], subject_name: Optional[str], end_date: datetime) -> str:
    return EXPIRY_MESSAGE.format(
        name=full_name or "",
        subject=subject_name or SUBJECT_FALLBACK,
        date=format_arabic_date(end_date),
    )


class ExpiryNotificationJob:
    """
    Inserts expiry reminders for subscriptions ending in the reminder window.

    Any store failure aborts the run: nothing is inserted and the result
    carries success=False.
    """

    def __init__(
        self,
        db_session: Session,
        store: Optional[SubscriptionStore] = None,
        event_bus: Optional[EventBus] = None,
        window_start_days: int = settings.EXPIRY_WINDOW_START_DAYS,
        window_end_days: int = settings.EXPIRY_WINDOW_END_DAYS,
        dry_run: bool = settings.EXPIRY_JOB_DRY_RUN,
    ):
        self.db_session = db_session
        self.store = store or SubscriptionStore(db_session)
        self.event_bus = event_bus or get_event_bus()
        self.window_start_days = window_start_days
        self.window_end_days = window_end_days
        self.dry_run = dry_run

    def run(self, now: Optional[datetime] = None) -> ExpiryJobResult:
        current_time = ensure_utc(now or utcnow())
        window_start = current_time + timedelta(days=self.window_start_days)
        window_end = current_time + timedelta(days=self.window_end_days)

        logger.info(
            "Starting expiry notification job",
            extra={
                "window_start": window_start.isoformat(),
                "window_end": window_end.isoformat(),
                "dry_run": self.dry_run,
            },
        )

        try:
            return self._run(current_time, window_start, window_end)
        except UpstreamUnavailableError as e:
            logger.error("Expiry notification job failed", extra={"error": e.message})
            return ExpiryJobResult(success=False, error=e.message)

    def _run(self, now: datetime, window_start: datetime, window_end: datetime) -> ExpiryJobResult:
        expiring = self.store.list_expiring_subscriptions(window_start, window_end)
        logger.info("Found expiring subscriptions", extra={"count": len(expiring)})

        if not expiring:
            return ExpiryJobResult(success=True, message="No subscriptions expiring in 7 days")

        subjects = self.store.get_subjects(sub.subject_id for sub in expiring)
        profiles = self.store.get_profiles(sub.student_id for sub in expiring)

        today_start, tomorrow_start = day_bounds(now)
        already_notified = self.store.users_notified_between(EXPIRY_TITLE, today_start, tomorrow_start)

        notifications = []
        for subscription in expiring:
            if subscription.student_id in already_notified:
                continue

            subject = subjects.get(subscription.subject_id)
            profile = profiles.get(subscription.student_id)
            notifications.append(
                Notification(
                    user_id=subscription.student_id,
                    title=EXPIRY_TITLE,
                    message=build_message(
                        profile.full_name if profile else None,
                        subject.name if subject else None,
                        ensure_utc(subscription.end_date),
                    ),
                    is_read=False,
                    created_at=now,
                )
            )

        if not notifications:
            return ExpiryJobResult(
                success=True,
                message="All notifications already sent today",
                subscriptions_checked=len(expiring),
            )

        if self.dry_run:
            logger.info("Dry run: skipping notification insert", extra={"would_send": len(notifications)})
            return ExpiryJobResult(
                success=True,
                message=f"Dry run: would send {len(notifications)} expiry notifications",
                subscriptions_checked=len(expiring),
            )

        self.store.insert_notifications(notifications)
        publish_inserted(self.event_bus, notifications)

        logger.info(
            "Expiry notifications sent",
            extra={"notifications_sent": len(notifications), "subscriptions_checked": len(expiring)},
        )
        return ExpiryJobResult(
            success=True,
            message=f"Sent {len(notifications)} expiry notifications",
            notifications_sent=len(notifications),
            subscriptions_checked=len(expiring),
        )


def run_expiry_notifications(db_session: Session, now: Optional[datetime] = None) -> ExpiryJobResult:
    """Convenience wrapper used by the API route and the CLI."""
    return ExpiryNotificationJob(db_session).run(now=now)


def main() -> int:
    import json

    from azhari_platform.database.session import create_database_session

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    session = create_database_session()
    try:
        result = run_expiry_notifications(session)
    finally:
        session.close()

    print(json.dumps(result.to_dict(), ensure_ascii=False))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
