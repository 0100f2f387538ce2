"""
Job trigger routes.

POST /api/jobs/subscription-expiry-notify runs the expiry reminder job once.
Callable by the scheduler (X-Job-Secret) or by an admin session.
"""

import hmac
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from azhari_platform.api.dependencies.auth import extract_bearer_token, get_session_service
from azhari_platform.config import settings
from azhari_platform.database.session import get_db_session
from azhari_platform.jobs.expiry_notifications import run_expiry_notifications
from azhari_platform.platform.errors import AccessDeniedError
from azhari_platform.platform.session import SessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def authorize_job_trigger(
    request: Request,
    session_service: SessionService = Depends(get_session_service),
) -> str:
    """Returns who triggered the run ("scheduler" or the admin's user id)."""
    secret = settings.JOB_TRIGGER_SECRET
    supplied = request.headers.get("X-Job-Secret")
    if secret and supplied and hmac.compare_digest(secret, supplied):
        return "scheduler"

    session = session_service.authenticate(extract_bearer_token(request))
    if session.is_banned or not session.is_admin:
        raise AccessDeniedError("Only admins may trigger jobs", reason="role")
    return session.user_id


@router.post("/subscription-expiry-notify")
async def trigger_expiry_notifications(
    triggered_by: str = Depends(authorize_job_trigger),
    db_session=Depends(get_db_session),
):
    logger.info("Expiry notification job triggered", extra={"triggered_by": triggered_by})
    result = run_expiry_notifications(db_session)
    return JSONResponse(
        status_code=status.HTTP_200_OK if result.success else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=result.to_dict(),
    )
