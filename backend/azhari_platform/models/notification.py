"""
Notification model.

NULL user_id is a broadcast to every user. Rows are created by the expiry job
or by an admin broadcast and are never deleted; the recipient owns is_read.
"""

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text

from azhari_platform.db_base import Base
from azhari_platform.models.base import generate_uuid
from azhari_platform.utils.time import utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    user_id = Column(String(255), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_notifications_title_created", "title", "created_at"),
    )

    def to_event(self) -> dict:
        """Payload published on the notifications topic."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, title={self.title})>"
