"""
Teacher registration workflow.

A signed-in user submits a request naming school, employee id, phone, the
stage, the grades and the subject label they teach. An admin approves or
rejects it. Approval turns the request into teacher_assignments rows and an
(unapproved) teacher profile; the profile's is_approved flag is flipped
separately once the admin has reviewed the public profile.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.models.profile import Profile, UserRole
from azhari_platform.models.teacher import (
    TeacherAssignment,
    TeacherProfile,
    TeacherRequest,
    TeacherRequestStatus,
)
from azhari_platform.platform.errors import (
    AppError,
    ConfigurationError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)
from azhari_platform.teachers.categories import (
    GRADES,
    STAGES,
    SubjectFilter,
    grade_key_from_label,
    require_subject_filter,
)
from azhari_platform.utils.time import utcnow

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "لم يستوفِ الشروط"


@dataclass
class TeacherRegistrationForm:
    school: str = ""
    employee_id: str = ""
    phone: str = ""
    stage: str = ""
    grades: List[str] = field(default_factory=list)
    subject: str = ""


def _grade_keys(grades: List[str]) -> Optional[List[str]]:
    """Grade keys in canonical order, or None if any entry is not a grade."""
    keys = [grade_key_from_label(g) for g in grades]
    if not keys or None in keys:
        return None
    return [g for g in GRADES if g in keys]


def validate_form(form: TeacherRegistrationForm) -> Dict[str, str]:
    """Return field -> message for every invalid field (empty when valid)."""
    errors: Dict[str, str] = {}
    if not form.school.strip():
        errors["school"] = "يرجى إدخال اسم المدرسة"
    if not form.employee_id.strip():
        errors["employee_id"] = "يرجى إدخال الرقم الوظيفي"
    if not form.phone.strip():
        errors["phone"] = "يرجى إدخال رقم الهاتف"
    if form.stage not in STAGES:
        errors["stage"] = "يرجى اختيار المرحلة"
    if _grade_keys(form.grades) is None:
        errors["grades"] = "يرجى اختيار صف واحد على الأقل"
    if not form.subject.strip():
        errors["subject"] = "يرجى اختيار المادة"
    else:
        try:
            require_subject_filter(form.subject)
        except ConfigurationError:
            errors["subject"] = "المادة المختارة غير معروفة"
    return errors


class TeacherRegistrationService:
    def __init__(self, db_session: Session):
        self.db = db_session

    def _get_request(self, request_id: str) -> TeacherRequest:
        try:
            request = self.db.query(TeacherRequest).filter(TeacherRequest.id == request_id).first()
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load teacher request", upstream="database") from e
        if request is None:
            raise NotFoundError("Teacher request", request_id)
        return request

    def _get_pending_request(self, request_id: str) -> TeacherRequest:
        request = self._get_request(request_id)
        if request.status != TeacherRequestStatus.PENDING.value:
            raise AppError(
                code="INVALID_STATE",
                message=f"Teacher request is already {request.status}",
                status_code=409,
            )
        return request

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Teacher registration write failed", extra={"operation": operation, "error": str(e)})
            raise UpstreamUnavailableError("Could not save teacher registration", upstream="database") from e

    def submit(self, user_id: str, form: TeacherRegistrationForm) -> TeacherRequest:
        """Validate and persist a pending request. Nothing is written on failure."""
        errors = validate_form(form)
        if errors:
            raise ValidationError("Invalid teacher registration", field_errors=errors)

        request = TeacherRequest(
            user_id=user_id,
            school=form.school.strip(),
            employee_id=form.employee_id.strip(),
            phone=form.phone.strip(),
            assigned_stage=form.stage,
            assigned_grades=_grade_keys(form.grades),
            assigned_category=form.subject.strip(),
            status=TeacherRequestStatus.PENDING.value,
        )
        self.db.add(request)
        self._commit("submit")
        logger.info("Teacher request submitted", extra={"user_id": user_id, "request_id": request.id})
        return request

    def list_pending(self) -> List[TeacherRequest]:
        try:
            return (
                self.db.query(TeacherRequest)
                .filter(TeacherRequest.status == TeacherRequestStatus.PENDING.value)
                .order_by(TeacherRequest.created_at.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load teacher requests", upstream="database") from e

    def approve(self, request_id: str) -> TeacherRequest:
        """
        Approve a request.

        Replaces the teacher's assignments for the request's stage and
        category with one row per requested grade. The assignment category
        is the catalog key the label maps to; a single-subject label such as
        "فيزياء" also records the catalog subject name.
        """
        request = self._get_pending_request(request_id)
        subject_filter = require_subject_filter(request.assigned_category)
        category = subject_filter.category_key

        request.status = TeacherRequestStatus.APPROVED.value
        request.reviewed_at = utcnow()

        try:
            self._apply_approval(request, subject_filter)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Teacher approval failed", extra={"request_id": request_id, "error": str(e)})
            raise UpstreamUnavailableError("Could not save teacher registration", upstream="database") from e

        logger.info(
            "Teacher request approved",
            extra={"request_id": request_id, "teacher_id": request.user_id, "category": category},
        )
        return request

    def _apply_approval(self, request: TeacherRequest, subject_filter: SubjectFilter) -> None:
        category = subject_filter.category_key
        profile = self.db.query(Profile).filter(Profile.id == request.user_id).first()
        if profile is not None:
            profile.role = UserRole.TEACHER.value

        (
            self.db.query(TeacherAssignment)
            .filter(
                TeacherAssignment.teacher_id == request.user_id,
                TeacherAssignment.stage == request.assigned_stage,
                TeacherAssignment.category == category,
            )
            .delete(synchronize_session=False)
        )
        for grade in request.assigned_grades or []:
            self.db.add(
                TeacherAssignment(
                    teacher_id=request.user_id,
                    category=category,
                    stage=request.assigned_stage,
                    grade=grade,
                    subject_name=subject_filter.subject_name,
                )
            )

        existing_profile = (
            self.db.query(TeacherProfile)
            .filter(TeacherProfile.teacher_id == request.user_id)
            .first()
        )
        if existing_profile is None:
            self.db.add(TeacherProfile(teacher_id=request.user_id, is_approved=False))
        self.db.commit()

    def reject(self, request_id: str, reason: Optional[str] = None) -> TeacherRequest:
        request = self._get_pending_request(request_id)
        request.status = TeacherRequestStatus.REJECTED.value
        request.rejection_reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
        request.reviewed_at = utcnow()
        self._commit("reject")
        logger.info("Teacher request rejected", extra={"request_id": request_id})
        return request

    def set_profile_approval(self, teacher_id: str, approved: bool) -> TeacherProfile:
        try:
            profile = (
                self.db.query(TeacherProfile)
                .filter(TeacherProfile.teacher_id == teacher_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise UpstreamUnavailableError("Could not load teacher profile", upstream="database") from e
        if profile is None:
            raise NotFoundError("Teacher profile", teacher_id)
        profile.is_approved = approved
        self._commit("set_profile_approval")
        logger.info("Teacher profile approval changed", extra={"teacher_id": teacher_id, "approved": approved})
        return profile
