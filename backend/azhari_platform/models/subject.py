"""Subject catalog. Admin-managed, read-only for the entitlement path."""

from sqlalchemy import Boolean, Column, Index, String

from azhari_platform.db_base import Base
from azhari_platform.models.base import TimestampMixin, generate_uuid


class Subject(Base, TimestampMixin):
    __tablename__ = "subjects"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False)
    stage = Column(String(50), nullable=False)
    grade = Column(String(50), nullable=False)
    section = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_subjects_stage_grade_category", "stage", "grade", "category"),
    )

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name={self.name}, stage={self.stage}, grade={self.grade})>"
