"""
Entitlement evaluation: ban → admin bypass → active unexpired subscription → deny.
Reads only; fails closed when the store cannot be reached.
"""

import logging
from datetime import datetime
from typing import Optional

from azhari_platform.entitlements.errors import EntitlementUnknownError
from azhari_platform.entitlements.store import SubscriptionStore
from azhari_platform.models.profile import UserRole
from azhari_platform.models.subscription import Subscription
from azhari_platform.platform.errors import (
    AccessDeniedError,
    PaymentRequiredError,
    UpstreamUnavailableError,
)
from azhari_platform.platform.session import Session
from azhari_platform.utils.time import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class EntitlementService:
    """Decides whether a user may view a subject's content."""

    def __init__(self, db_session, store: Optional[SubscriptionStore] = None):
        self.db = db_session
        self.store = store or SubscriptionStore(db_session)

    def get_active_subscription(
        self,
        user_id: str,
        subject_id: str,
        now: Optional[datetime] = None,
    ) -> Optional[Subscription]:
        """
        Return the subscription currently granting access to subject_id, if any.

        Raises:
            EntitlementUnknownError: the store could not be read
        """
        compare_at = ensure_utc(now or utcnow())
        try:
            rows = self.store.list_active_subscriptions(user_id)
        except UpstreamUnavailableError as e:
            logger.error(
                "Entitlement evaluation failed",
                extra={"user_id": user_id, "subject_id": subject_id},
            )
            raise EntitlementUnknownError(user_id, subject_id, cause=e) from e

        current = [
            row for row in rows
            if row.subject_id == subject_id and row.grants_access(compare_at)
        ]
        if not current:
            return None
        return max(current, key=lambda row: ensure_utc(row.end_date))

    def has_access(self, user: Session, subject_id: str, now: Optional[datetime] = None) -> bool:
        """
        True if user may view subject_id content.

        Order matters: a ban denies before anything else is looked at, and the
        admin bypass needs no subscription rows.
        """
        if user.is_banned:
            logger.info("Access denied: user banned", extra={"user_id": user.user_id, "subject_id": subject_id})
            return False

        if user.role == UserRole.ADMIN.value:
            return True

        subscription = self.get_active_subscription(user.user_id, subject_id, now=now)
        if subscription is None:
            logger.info(
                "Access denied: no active subscription",
                extra={"user_id": user.user_id, "subject_id": subject_id},
            )
            return False
        return True

    def check_access(self, user: Session, subject_id: str, now: Optional[datetime] = None) -> None:
        """Raise instead of returning False; for route guards."""
        if user.is_banned:
            raise AccessDeniedError("Your account has been suspended", reason="banned")
        if not self.has_access(user, subject_id, now=now):
            raise PaymentRequiredError(subject_id=subject_id)
