"""
Subscription model.

A row is created by an admin after a payment is confirmed out of band, and is
never deleted: it is either deactivated (admin override) or left to lapse.
It grants access to subject content iff is_active and now < end_date.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String

from azhari_platform.db_base import Base
from azhari_platform.models.base import TimestampMixin, generate_uuid
from azhari_platform.utils.time import ensure_utc, utcnow


class Subscription(Base, TimestampMixin):
    __tablename__ = "subscriptions"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    student_id = Column(String(255), ForeignKey("profiles.id"), nullable=False, index=True)
    subject_id = Column(String(255), ForeignKey("subjects.id"), nullable=False, index=True)
    teacher_id = Column(String(255), ForeignKey("profiles.id"), nullable=True)

    start_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    end_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    renewal_count = Column(Integer, nullable=False, default=0)
    created_by = Column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_subscriptions_active_end_date", "is_active", "end_date"),
    )

    def grants_access(self, now: Optional[datetime] = None) -> bool:
        """True iff the row is active and not yet expired."""
        compare_at = ensure_utc(now or utcnow())
        return bool(self.is_active) and ensure_utc(self.end_date) > compare_at

    def __repr__(self) -> str:
        return (
            f"<Subscription(id={self.id}, student_id={self.student_id}, "
            f"subject_id={self.subject_id}, is_active={self.is_active})>"
        )
