"""
Admin subscription routes.

- POST /api/admin/subscriptions: activate or renew subjects for a student
- POST /api/admin/subscriptions/{subscription_id}/deactivate
- GET  /api/admin/students/{student_id}/subscriptions
"""

from fastapi import APIRouter, Depends

from azhari_platform.api.dependencies.auth import require_admin
from azhari_platform.api.schemas.subscriptions import (
    GrantSubscriptionsRequest,
    SubscriptionListResponse,
    SubscriptionResponse,
)
from azhari_platform.database.session import get_db_session
from azhari_platform.platform.session import Session
from azhari_platform.subscriptions.admin import SubscriptionAdminService

router = APIRouter(prefix="/api/admin", tags=["admin-subscriptions"])


@router.post("/subscriptions", response_model=SubscriptionListResponse)
async def grant_subscriptions(
    body: GrantSubscriptionsRequest,
    session: Session = Depends(require_admin),
    db_session=Depends(get_db_session),
):
    rows = SubscriptionAdminService(db_session).grant(
        student_id=body.student_id,
        subject_ids=body.subject_ids,
        actor_id=session.user_id,
        duration_days=body.duration_days,
        end_date=body.end_date,
    )
    return SubscriptionListResponse(subscriptions=[SubscriptionResponse.model_validate(r) for r in rows])


@router.post("/subscriptions/{subscription_id}/deactivate", response_model=SubscriptionResponse)
async def deactivate_subscription(
    subscription_id: str,
    session: Session = Depends(require_admin),
    db_session=Depends(get_db_session),
):
    row = SubscriptionAdminService(db_session).deactivate(subscription_id, actor_id=session.user_id)
    return SubscriptionResponse.model_validate(row)


@router.get("/students/{student_id}/subscriptions", response_model=SubscriptionListResponse)
async def list_student_subscriptions(
    student_id: str,
    session: Session = Depends(require_admin),
    db_session=Depends(get_db_session),
):
    rows = SubscriptionAdminService(db_session).list_for_student(student_id)
    return SubscriptionListResponse(subscriptions=[SubscriptionResponse.model_validate(r) for r in rows])
