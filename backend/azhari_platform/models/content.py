"""Subject content and AI assistant reference material."""

from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text

from azhari_platform.db_base import Base
from azhari_platform.models.base import TimestampMixin, generate_uuid
from azhari_platform.utils.time import utcnow


class ContentType(str, PyEnum):
    VIDEO = "video"
    PDF = "pdf"
    SUMMARY = "summary"
    EXAM = "exam"


class Content(Base, TimestampMixin):
    __tablename__ = "content"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    subject_id = Column(String(255), ForeignKey("subjects.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)
    file_url = Column(String(2048), nullable=False)
    description = Column(Text, nullable=True)
    uploaded_by = Column(String(255), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)


class AiSource(Base):
    """A reference file uploaded by an admin for the subject's assistant."""

    __tablename__ = "ai_sources"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    subject_id = Column(String(255), nullable=False, index=True)
    file_name = Column(String(512), nullable=False)
    file_url = Column(String(2048), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class AiAdminInstruction(Base):
    """Free-text instruction appended to the subject assistant's prompt."""

    __tablename__ = "ai_admin_instructions"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    subject_id = Column(String(255), nullable=False, index=True)
    instruction = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
