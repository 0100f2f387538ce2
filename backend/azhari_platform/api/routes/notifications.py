"""
Notifications API routes.

Provides endpoints for:
- Listing notifications (own + broadcasts)
- Getting unread count
- Marking a notification as read
- Admin broadcast / direct notification

SECURITY:
- Users only see rows addressed to them or broadcast to everyone
- Only the recipient may mark a direct notification as read
"""

import logging

from fastapi import APIRouter, Depends

from azhari_platform.api.dependencies.auth import require_active_user, require_admin
from azhari_platform.api.schemas.notifications import (
    BroadcastRequest,
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from azhari_platform.database.session import get_db_session
from azhari_platform.platform.session import Session
from azhari_platform.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


@router.get("/api/notifications", response_model=NotificationListResponse)
async def list_notifications(
    session: Session = Depends(require_active_user),
    db_session=Depends(get_db_session),
):
    """Newest first, at most 20."""
    service = NotificationService(db_session)
    notifications = service.list_for_user(session.user_id)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=service.unread_count(session.user_id),
    )


@router.get("/api/notifications/unread/count", response_model=UnreadCountResponse)
async def get_unread_count(
    session: Session = Depends(require_active_user),
    db_session=Depends(get_db_session),
):
    return UnreadCountResponse(count=NotificationService(db_session).unread_count(session.user_id))


@router.post("/api/notifications/{notification_id}/read", response_model=MarkReadResponse)
async def mark_notification_read(
    notification_id: str,
    session: Session = Depends(require_active_user),
    db_session=Depends(get_db_session),
):
    NotificationService(db_session).mark_read(session.user_id, notification_id)
    return MarkReadResponse(success=True)


@router.post("/api/admin/notifications", response_model=NotificationResponse, status_code=201)
async def send_notification(
    body: BroadcastRequest,
    session: Session = Depends(require_admin),
    db_session=Depends(get_db_session),
):
    notification = NotificationService(db_session).notify_user(body.user_id, body.title, body.message)
    logger.info("Admin notification sent", extra={"actor_id": session.user_id, "broadcast": body.user_id is None})
    return NotificationResponse.model_validate(notification)
