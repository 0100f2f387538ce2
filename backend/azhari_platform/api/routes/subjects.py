"""
Subject access routes.

- GET /api/subjects/{subject_id}/access: whether the caller may view content
- GET /api/subjects/{subject_id}/payment-link: WhatsApp link for the paywall

An unreachable store answers 503 (entitlement unknown), never hasAccess=true.
"""

import logging

from fastapi import APIRouter, Depends

from azhari_platform.api.dependencies.auth import get_current_session
from azhari_platform.api.schemas.subjects import AccessResponse, PaymentLinkResponse
from azhari_platform.database.session import get_db_session
from azhari_platform.entitlements.service import EntitlementService
from azhari_platform.entitlements.store import SubscriptionStore
from azhari_platform.models.subject import Subject
from azhari_platform.platform.errors import NotFoundError
from azhari_platform.platform.session import Session
from azhari_platform.subscriptions.payment_link import PaymentLinkBuilder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subjects", tags=["subjects"])


@router.get("/{subject_id}/access", response_model=AccessResponse)
async def get_subject_access(
    subject_id: str,
    session: Session = Depends(get_current_session),
    db_session=Depends(get_db_session),
):
    service = EntitlementService(db_session)
    if not service.has_access(session, subject_id):
        return AccessResponse(has_access=False)

    end_date = None
    if not session.is_admin:
        subscription = service.get_active_subscription(session.user_id, subject_id)
        end_date = subscription.end_date if subscription else None
    return AccessResponse(has_access=True, end_date=end_date)


@router.get("/{subject_id}/payment-link", response_model=PaymentLinkResponse)
async def get_payment_link(
    subject_id: str,
    session: Session = Depends(get_current_session),
    db_session=Depends(get_db_session),
):
    subject = db_session.query(Subject).filter(Subject.id == subject_id).first()
    if subject is None:
        raise NotFoundError("Subject", subject_id)

    profile = SubscriptionStore(db_session).get_profile(session.user_id)
    link = PaymentLinkBuilder(db_session).build(
        subject_name=subject.name,
        stage=subject.stage,
        grade=subject.grade,
        section=subject.section or (profile.section if profile else None),
        student_id=session.user_id,
        student_code=profile.student_code if profile else None,
    )
    return PaymentLinkResponse(url=link.url, message=link.message, price=link.price, currency=link.currency)
