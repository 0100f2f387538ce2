"""
Session lifecycle routes.

- GET  /api/auth/session: the caller's resolved Session
- POST /api/auth/sign-out: revoke the current session id
"""

from fastapi import APIRouter, Depends

from azhari_platform.api.dependencies.auth import get_current_session, get_session_service
from azhari_platform.platform.session import Session, SessionService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/session")
async def current_session(session: Session = Depends(get_current_session)):
    return {
        "user_id": session.user_id,
        "role": session.role,
        "is_banned": session.is_banned,
        "expires_at": session.expires_at.isoformat() if session.expires_at else None,
    }


@router.post("/sign-out")
async def sign_out(
    session: Session = Depends(get_current_session),
    session_service: SessionService = Depends(get_session_service),
):
    session_service.sign_out(session)
    return {"success": True}
