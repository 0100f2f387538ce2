"""
Admin-side subscription management.

Payment happens out of band; once confirmed an admin grants the student one
or more subjects for a duration. An existing row for the subject is renewed
in place (renewal_count + 1) rather than duplicated.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.entitlements.store import SubscriptionStore
from azhari_platform.models.subscription import Subscription
from azhari_platform.platform.errors import NotFoundError, UpstreamUnavailableError, ValidationError
from azhari_platform.utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_DURATION_DAYS = 30


class SubscriptionAdminService:
    def __init__(self, db_session: Session, store: Optional[SubscriptionStore] = None):
        self.db = db_session
        self.store = store or SubscriptionStore(db_session)

    def _resolve_end_date(
        self,
        now: datetime,
        duration_days: Optional[int],
        end_date: Optional[datetime],
    ) -> datetime:
        if end_date is not None:
            resolved = ensure_utc(end_date)
        else:
            days = DEFAULT_DURATION_DAYS if duration_days is None else duration_days
            if days <= 0:
                raise ValidationError("Invalid duration", field_errors={"duration_days": "يجب أن تكون المدة أكبر من صفر"})
            resolved = now + timedelta(days=days)
        if resolved < now:
            raise ValidationError(
                "End date precedes start date",
                field_errors={"end_date": "تاريخ الانتهاء يجب أن يكون بعد تاريخ البدء"},
            )
        return resolved

    def grant(
        self,
        student_id: str,
        subject_ids: Sequence[str],
        actor_id: Optional[str] = None,
        duration_days: Optional[int] = None,
        end_date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> List[Subscription]:
        """Activate (or renew) subject_ids for student_id. All-or-nothing."""
        if not subject_ids:
            raise ValidationError("No subjects selected", field_errors={"subject_ids": "يرجى اختيار مادة واحدة على الأقل"})

        current_time = ensure_utc(now or utcnow())
        new_end = self._resolve_end_date(current_time, duration_days, end_date)

        existing: Dict[str, Subscription] = {}
        for row in self.store.list_subscriptions_for_student(student_id):
            # list is newest end_date first; keep that row per subject
            existing.setdefault(row.subject_id, row)

        granted = []
        try:
            for subject_id in dict.fromkeys(subject_ids):
                row = existing.get(subject_id)
                if row is not None:
                    row.end_date = new_end
                    row.is_active = True
                    row.renewal_count = (row.renewal_count or 0) + 1
                else:
                    row = Subscription(
                        student_id=student_id,
                        subject_id=subject_id,
                        start_date=current_time,
                        end_date=new_end,
                        is_active=True,
                        renewal_count=0,
                        created_by=actor_id,
                    )
                    self.db.add(row)
                granted.append(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to grant subscriptions", extra={"student_id": student_id, "error": str(e)})
            raise UpstreamUnavailableError("Could not save subscriptions", upstream="database") from e

        logger.info(
            "Subscriptions granted",
            extra={
                "student_id": student_id,
                "subject_count": len(granted),
                "actor_id": actor_id,
                "end_date": new_end.isoformat(),
            },
        )
        return granted

    def deactivate(self, subscription_id: str, actor_id: Optional[str] = None) -> Subscription:
        """Admin override; the row is kept."""
        subscription = self.store.get_subscription(subscription_id)
        if subscription is None:
            raise NotFoundError("Subscription", subscription_id)

        subscription.is_active = False
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise UpstreamUnavailableError("Could not deactivate subscription", upstream="database") from e

        logger.info("Subscription deactivated", extra={"subscription_id": subscription_id, "actor_id": actor_id})
        return subscription

    def list_for_student(self, student_id: str) -> List[Subscription]:
        return self.store.list_subscriptions_for_student(student_id)
