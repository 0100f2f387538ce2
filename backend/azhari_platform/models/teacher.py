"""
Teacher-side models.

- TeacherRequest: registration workflow record (pending/approved/rejected).
- TeacherAssignment: category/stage/grade combinations a teacher may teach;
  ``subject_name`` narrows a science, literary or language assignment to
  one catalog subject.
- TeacherProfile: the teacher's public profile; ``is_approved`` is the single
  authoritative "may teach / may be selected" flag.
- StudentTeacherChoice: a student's binding to one teacher per
  (category, stage, grade). Records intent, not an entitlement.
"""

from enum import Enum as PyEnum

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, String, Text, UniqueConstraint

from azhari_platform.db_base import Base
from azhari_platform.models.base import TimestampMixin, generate_uuid


class TeacherRequestStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TeacherRequest(Base, TimestampMixin):
    __tablename__ = "teacher_requests"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    user_id = Column(String(255), nullable=False, index=True)
    school = Column(String(255), nullable=False)
    employee_id = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=False)
    assigned_stage = Column(String(50), nullable=False)
    assigned_grades = Column(JSON, nullable=False, default=list)
    assigned_category = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default=TeacherRequestStatus.PENDING.value)
    rejection_reason = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<TeacherRequest(id={self.id}, user_id={self.user_id}, status={self.status})>"


class TeacherAssignment(Base, TimestampMixin):
    __tablename__ = "teacher_assignments"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    teacher_id = Column(String(255), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    stage = Column(String(50), nullable=False)
    grade = Column(String(50), nullable=False)
    section = Column(String(50), nullable=True)
    subject_name = Column(String(255), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "teacher_id", "category", "stage", "grade",
            name="uq_teacher_assignment",
        ),
        Index("ix_teacher_assignments_lookup", "category", "stage", "grade"),
    )


class TeacherProfile(Base, TimestampMixin):
    __tablename__ = "teacher_profiles"

    teacher_id = Column(String(255), primary_key=True)
    bio = Column(Text, nullable=True)
    photo_url = Column(String(1024), nullable=True)
    video_url = Column(String(1024), nullable=True)
    is_approved = Column(Boolean, nullable=False, default=False)


class StudentTeacherChoice(Base, TimestampMixin):
    __tablename__ = "student_teacher_choices"

    id = Column(String(255), primary_key=True, default=generate_uuid)
    student_id = Column(String(255), nullable=False, index=True)
    teacher_id = Column(String(255), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    stage = Column(String(50), nullable=False)
    grade = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "student_id", "category", "stage", "grade",
            name="uq_student_teacher_choice",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<StudentTeacherChoice(student_id={self.student_id}, teacher_id={self.teacher_id}, "
            f"category={self.category}, stage={self.stage}, grade={self.grade})>"
        )
