"""
POST /api/ai-chat

Answers ``{response}`` on success and ``{error}`` with a fixed Arabic message
otherwise. Non-admin callers must name a subject they are entitled to; the
``isAdmin`` body flag is informational and only honoured for admin sessions.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from azhari_platform.ai.chat_service import AiChatService, ChatRequest
from azhari_platform.ai.prompt import ChatMessage
from azhari_platform.api.dependencies.auth import require_active_user
from azhari_platform.api.schemas.ai_chat import AiChatRequest, AiChatResponse
from azhari_platform.database.session import get_db_session
from azhari_platform.entitlements.service import EntitlementService
from azhari_platform.platform.errors import AppError, ValidationError
from azhari_platform.platform.session import Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ai"])

GENERIC_ERROR = "حدث خطأ غير متوقع"
SUBJECT_REQUIRED = "يرجى اختيار المادة"


def get_ai_chat_service(db_session=Depends(get_db_session)) -> AiChatService:
    return AiChatService(db_session)


@router.post("/api/ai-chat", response_model=AiChatResponse)
async def ai_chat(
    body: AiChatRequest,
    session: Session = Depends(require_active_user),
    db_session=Depends(get_db_session),
    service: AiChatService = Depends(get_ai_chat_service),
):
    try:
        if not body.subject_id and not session.is_admin:
            raise ValidationError(SUBJECT_REQUIRED, field_errors={"subjectId": SUBJECT_REQUIRED})
        if body.subject_id:
            EntitlementService(db_session).check_access(session, body.subject_id)

        reply = await service.reply(
            ChatRequest(
                messages=[ChatMessage(role=m.role, content=m.content) for m in body.messages],
                subject_name=body.subject_name,
                subject_id=body.subject_id,
                stage=body.stage,
                grade=body.grade,
                section=body.section,
                is_admin=body.is_admin and session.is_admin,
            )
        )
    except AppError as e:
        logger.log(e.log_level, "Assistant request failed", extra={"error_code": e.code, "user_id": session.user_id})
        message = GENERIC_ERROR if e.code == "CONFIGURATION_ERROR" else e.message
        return JSONResponse(status_code=e.status_code, content={"error": message})

    return AiChatResponse(response=reply)
