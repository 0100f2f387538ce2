"""
Teacher-choice resolution.

Lists the teachers a student may pick for a category/stage/grade and records
the student's binding choice. A teacher is selectable only if an admin has
assigned them to that exact combination AND approved their profile.
Categories may arrive as catalog keys or as the Arabic labels students see;
both are normalized to the catalog key, and an unmapped label is an error.

The (student_id, category, stage, grade) unique constraint is the
serialisation point for concurrent selections: a lost insert race is retried
as an update, so a key never holds two bindings.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.models.profile import Profile
from azhari_platform.models.subject import Subject
from azhari_platform.models.teacher import (
    StudentTeacherChoice,
    TeacherAssignment,
    TeacherProfile,
)
from azhari_platform.platform.errors import (
    AccessDeniedError,
    UpstreamUnavailableError,
    ValidationError,
)
from azhari_platform.teachers.categories import (
    GRADES,
    STAGES,
    SubjectFilter,
    category_display_label,
    grade_key_from_label,
    require_subject_filter,
)

logger = logging.getLogger(__name__)

DEFAULT_TEACHER_NAME = "معلم"


@dataclass
class TeacherInfo:
    teacher_id: str
    teacher_name: str
    category: str
    category_label: str = ""
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    video_url: Optional[str] = None
    grades: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Choice:
    student_id: str
    teacher_id: str
    category: str
    stage: str
    grade: str
    created: bool = False


def _grade_order(grade: str) -> int:
    return GRADES.index(grade) if grade in GRADES else len(GRADES)


def validate_selection(category: str, stage: str, grade: str) -> None:
    errors: Dict[str, str] = {}
    if not (category or "").strip():
        errors["category"] = "يرجى اختيار المادة"
    if stage not in STAGES:
        errors["stage"] = "يرجى اختيار المرحلة"
    if grade not in GRADES:
        errors["grade"] = "يرجى اختيار الصف"
    if errors:
        raise ValidationError("Invalid teacher selection", field_errors=errors)


def normalize_selection(category: str, stage: str, grade: str) -> Tuple[str, str, str]:
    """
    Validate a selection and return it as (category key, stage, grade key).

    Raises ValidationError for missing fields and ConfigurationError for a
    category label with no catalog mapping.
    """
    grade_key = grade_key_from_label(grade) or grade
    validate_selection(category, stage, grade_key)
    return require_subject_filter(category).category_key, stage, grade_key


class TeacherChoiceResolver:
    def __init__(self, db_session: Session):
        self.db = db_session

    def list_eligible_teachers(self, category: str, stage: str, grade: str) -> List[TeacherInfo]:
        """
        Teachers assigned to (category, stage, grade) with an approved profile.

        ``grades`` lists every grade the teacher holds within the same
        category and stage, not just the requested one.
        """
        category, stage, grade = normalize_selection(category, stage, grade)
        try:
            matching = (
                self.db.query(TeacherAssignment.teacher_id)
                .filter(
                    TeacherAssignment.category == category,
                    TeacherAssignment.stage == stage,
                    TeacherAssignment.grade == grade,
                )
                .distinct()
                .all()
            )
            teacher_ids = [row.teacher_id for row in matching]
            if not teacher_ids:
                return []

            profiles = (
                self.db.query(TeacherProfile)
                .filter(
                    TeacherProfile.teacher_id.in_(teacher_ids),
                    TeacherProfile.is_approved.is_(True),
                )
                .all()
            )
            if not profiles:
                return []

            approved_ids = [p.teacher_id for p in profiles]
            users = {
                u.id: u
                for u in self.db.query(Profile).filter(Profile.id.in_(approved_ids)).all()
            }
            assignments = (
                self.db.query(TeacherAssignment)
                .filter(
                    TeacherAssignment.teacher_id.in_(approved_ids),
                    TeacherAssignment.category == category,
                    TeacherAssignment.stage == stage,
                )
                .all()
            )
        except SQLAlchemyError as e:
            logger.error("Failed to list eligible teachers", extra={"category": category, "error": str(e)})
            raise UpstreamUnavailableError("Could not load teachers", upstream="database") from e

        grades_by_teacher: Dict[str, List[str]] = {}
        for assignment in assignments:
            grades = grades_by_teacher.setdefault(assignment.teacher_id, [])
            if assignment.grade not in grades:
                grades.append(assignment.grade)

        teachers = []
        for profile in profiles:
            user = users.get(profile.teacher_id)
            if user is not None and user.is_banned:
                continue
            teachers.append(
                TeacherInfo(
                    teacher_id=profile.teacher_id,
                    teacher_name=(user.full_name if user and user.full_name else DEFAULT_TEACHER_NAME),
                    category=category,
                    category_label=category_display_label(category),
                    bio=profile.bio,
                    photo_url=profile.photo_url,
                    video_url=profile.video_url,
                    grades=sorted(grades_by_teacher.get(profile.teacher_id, []), key=_grade_order),
                )
            )
        return teachers

    def is_eligible(self, teacher_id: str, category: str, stage: str, grade: str) -> bool:
        return any(
            t.teacher_id == teacher_id
            for t in self.list_eligible_teachers(category, stage, grade)
        )

    def get_choice(self, student_id: str, category: str, stage: str, grade: str) -> Optional[StudentTeacherChoice]:
        try:
            return (
                self.db.query(StudentTeacherChoice)
                .filter(
                    StudentTeacherChoice.student_id == student_id,
                    StudentTeacherChoice.category == category,
                    StudentTeacherChoice.stage == stage,
                    StudentTeacherChoice.grade == grade,
                )
                .first()
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load teacher choice", upstream="database") from e

    def select_teacher(
        self,
        student_id: str,
        teacher_id: str,
        category: str,
        stage: str,
        grade: str,
    ) -> Choice:
        """
        Bind student to teacher for (category, stage, grade).

        Updates the existing binding in place or inserts the first one.
        Does not create a subscription; the caller shows the payment prompt.
        """
        category, stage, grade = normalize_selection(category, stage, grade)
        if not (teacher_id or "").strip():
            raise ValidationError("Invalid teacher selection", field_errors={"teacher_id": "يرجى اختيار المعلم"})

        if not self.is_eligible(teacher_id, category, stage, grade):
            logger.info(
                "Teacher not selectable",
                extra={"teacher_id": teacher_id, "category": category, "stage": stage, "grade": grade},
            )
            raise AccessDeniedError("Teacher is not available for this selection", reason="teacher_not_eligible")

        try:
            return self._upsert(student_id, teacher_id, category, stage, grade)
        except IntegrityError:
            # A concurrent request inserted the same key first.
            self.db.rollback()
            return self._upsert(student_id, teacher_id, category, stage, grade)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to save teacher choice", extra={"student_id": student_id, "error": str(e)})
            raise UpstreamUnavailableError("Could not save teacher choice", upstream="database") from e

    def _upsert(self, student_id: str, teacher_id: str, category: str, stage: str, grade: str) -> Choice:
        existing = self.get_choice(student_id, category, stage, grade)
        created = existing is None
        if existing is not None:
            existing.teacher_id = teacher_id
        else:
            self.db.add(
                StudentTeacherChoice(
                    student_id=student_id,
                    teacher_id=teacher_id,
                    category=category,
                    stage=stage,
                    grade=grade,
                )
            )
        self.db.commit()

        logger.info(
            "Teacher choice saved",
            extra={
                "student_id": student_id,
                "teacher_id": teacher_id,
                "category": category,
                "created": created,
            },
        )
        return Choice(
            student_id=student_id,
            teacher_id=teacher_id,
            category=category,
            stage=stage,
            grade=grade,
            created=created,
        )

    def list_students_for_teacher(self, teacher_id: str) -> List[str]:
        """Student ids bound to teacher; scopes the teacher's own analytics."""
        try:
            rows = (
                self.db.query(StudentTeacherChoice.student_id)
                .filter(StudentTeacherChoice.teacher_id == teacher_id)
                .distinct()
                .all()
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load students", upstream="database") from e
        return [row.student_id for row in rows]

    def list_subjects_for_teacher(self, teacher_id: str) -> List[Subject]:
        """
        Active catalog subjects the teacher's assignments cover.

        An assignment with a subject name covers only that subject within its
        category; one without covers the whole category.
        """
        try:
            assignments = (
                self.db.query(TeacherAssignment)
                .filter(TeacherAssignment.teacher_id == teacher_id)
                .all()
            )
            if not assignments:
                return []
            candidates = (
                self.db.query(Subject)
                .filter(
                    Subject.is_active.is_(True),
                    Subject.category.in_({a.category for a in assignments}),
                    Subject.stage.in_({a.stage for a in assignments}),
                )
                .order_by(Subject.name.asc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error("Failed to list teacher subjects", extra={"teacher_id": teacher_id, "error": str(e)})
            raise UpstreamUnavailableError("Could not load subjects", upstream="database") from e

        return [
            subject
            for subject in candidates
            if any(
                a.stage == subject.stage
                and a.grade == subject.grade
                and SubjectFilter(a.category, a.subject_name).matches(subject.category, subject.name)
                for a in assignments
            )
        ]
