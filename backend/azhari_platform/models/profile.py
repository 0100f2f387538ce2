"""
User profile model.

One row per authenticated user, created at signup. Role is assigned at signup
(students) or by an admin (teachers, support); the ban flag is admin-owned.
"""

from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, String

from azhari_platform.db_base import Base
from azhari_platform.models.base import TimestampMixin, generate_uuid


class UserRole(str, PyEnum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
    SUPPORT = "support"


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    role = Column(String(50), nullable=False, default=UserRole.STUDENT.value)
    is_banned = Column(Boolean, nullable=False, default=False)

    # Student registration fields
    student_code = Column(String(50), nullable=True, unique=True)
    stage = Column(String(50), nullable=True)
    grade = Column(String(50), nullable=True)
    section = Column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, role={self.role}, is_banned={self.is_banned})>"
