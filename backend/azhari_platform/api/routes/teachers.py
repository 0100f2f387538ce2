"""
Teacher selection and registration routes.

Students:
- GET  /api/teachers/eligible?category&stage&grade
- POST /api/teachers/choice
Teachers:
- GET  /api/teachers/me/subjects
- GET  /api/teachers/me/students
Signed-in users:
- POST /api/teachers/requests
Admins:
- GET  /api/admin/teacher-requests
- POST /api/admin/teacher-requests/{request_id}/approve
- POST /api/admin/teacher-requests/{request_id}/reject
- POST /api/admin/teachers/{teacher_id}/approval
"""

import logging

from fastapi import APIRouter, Depends, Query

from azhari_platform.api.dependencies.auth import require_active_user, require_admin, require_roles
from azhari_platform.api.schemas.teachers import (
    EligibleTeachersResponse,
    RejectTeacherRequest,
    TeacherApprovalRequest,
    TeacherChoiceRequest,
    TeacherChoiceResponse,
    TeacherRegistrationRequest,
    TeacherRequestResponse,
    TeacherResponse,
    TeacherStudentsResponse,
    TeacherSubjectResponse,
    TeacherSubjectsResponse,
)
from azhari_platform.database.session import get_db_session
from azhari_platform.platform.session import Session
from azhari_platform.teachers.registration import TeacherRegistrationForm, TeacherRegistrationService
from azhari_platform.teachers.resolver import TeacherChoiceResolver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["teachers"])

require_teacher = require_roles("teacher")


@router.get("/api/teachers/eligible", response_model=EligibleTeachersResponse)
async def list_eligible_teachers(
    category: str = Query(...),
    stage: str = Query(...),
    grade: str = Query(...),
    session: Session = Depends(require_active_user),
    db_session=Depends(get_db_session),
):
    teachers = TeacherChoiceResolver(db_session).list_eligible_teachers(category, stage, grade)
    return EligibleTeachersResponse(
        teachers=[
            TeacherResponse(
                teacher_id=t.teacher_id,
                teacher_name=t.teacher_name,
                category=t.category,
                category_label=t.category_label,
                bio=t.bio,
                photo_url=t.photo_url,
                video_url=t.video_url,
                grades=t.grades,
            )
            for t in teachers
        ]
    )


@router.post("/api/teachers/choice", response_model=TeacherChoiceResponse)
async def choose_teacher(
    body: TeacherChoiceRequest,
    session: Session = Depends(require_active_user),
    db_session=Depends(get_db_session),
):
    choice = TeacherChoiceResolver(db_session).select_teacher(
        student_id=session.user_id,
        teacher_id=body.teacher_id,
        category=body.category,
        stage=body.stage,
        grade=body.grade,
    )
    return TeacherChoiceResponse(
        student_id=choice.student_id,
        teacher_id=choice.teacher_id,
        category=choice.category,
        stage=choice.stage,
        grade=choice.grade,
        created=choice.created,
    )


@router.get("/api/teachers/me/subjects", response_model=TeacherSubjectsResponse)
async def list_my_subjects(
    session: Session = Depends(require_teacher),
    db_session=Depends(get_db_session),
):
    subjects = TeacherChoiceResolver(db_session).list_subjects_for_teacher(session.user_id)
    return TeacherSubjectsResponse(subjects=[TeacherSubjectResponse.model_validate(s) for s in subjects])


@router.get("/api/teachers/me/students", response_model=TeacherStudentsResponse)
async def list_my_students(
    session: Session = Depends(require_teacher),
    db_session=Depends(get_db_session),
):
    student_ids = TeacherChoiceResolver(db_session).list_students_for_teacher(session.user_id)
    return TeacherStudentsResponse(student_ids=sorted(student_ids))


@router.post("/api/teachers/requests", response_model=TeacherRequestResponse, status_code=201)
async def submit_teacher_request(
    body: TeacherRegistrationRequest,
    session: Session = Depends(require_active_user),
    db_session=Depends(get_db_session),
):
    form = TeacherRegistrationForm(
        school=body.school,
        employee_id=body.employee_id,
        phone=body.phone,
        stage=body.stage,
        grades=list(body.grades),
        subject=body.subject,
    )
    request = TeacherRegistrationService(db_session).submit(session.user_id, form)
    return TeacherRequestResponse.model_validate(request)


@router.get("/api/admin/teacher-requests", response_model=list[TeacherRequestResponse])
async def list_pending_requests(
    session: Session = Depends(require_admin),
    db_session=Depends(get_db_session),
):
    return [
        TeacherRequestResponse.model_validate(r)
        for r in TeacherRegistrationService(db_session).list_pending()
    ]


@router.post("/api/admin/teacher-requests/{request_id}/approve", response_model=TeacherRequestResponse)
async def approve_teacher_request(
    request_id: str,
    session: Session = Depends(require_admin),
    db_session=Depends(get_db_session),
):
    request = TeacherRegistrationService(db_session).approve(request_id)
    return TeacherRequestResponse.model_validate(request)


@router.post("/api/admin/teacher-requests/{request_id}/reject", response_model=TeacherRequestResponse)
async def reject_teacher_request(
    request_id: str,
    body: RejectTeacherRequest,
    session: Session = Depends(require_admin),
    db_session=Depends(get_db_session),
):
    request = TeacherRegistrationService(db_session).reject(request_id, body.reason)
    return TeacherRequestResponse.model_validate(request)


@router.post("/api/admin/teachers/{teacher_id}/approval")
async def set_teacher_approval(
    teacher_id: str,
    body: TeacherApprovalRequest,
    session: Session = Depends(require_admin),
    db_session=Depends(get_db_session),
):
    profile = TeacherRegistrationService(db_session).set_profile_approval(teacher_id, body.approved)
    return {"teacher_id": profile.teacher_id, "is_approved": profile.is_approved}
