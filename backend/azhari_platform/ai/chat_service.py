"""
Subject assistant proxy.

Builds the prompt from the subject context, the admin's active instructions
and the names of uploaded reference files, then asks the primary model and
falls back to the secondary one. Upstream failures map to fixed user-facing
messages; the raw upstream error never reaches the client.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.ai.gemini_client import (
    GeminiClient,
    GeminiError,
    GeminiQuotaExceeded,
    GeminiRateLimited,
)
from azhari_platform.ai.prompt import ChatMessage, PromptContext, build_contents, build_system_prompt
from azhari_platform.config.settings import AiSettings, get_ai_settings
from azhari_platform.models.content import AiAdminInstruction, AiSource
from azhari_platform.platform.errors import (
    ConfigurationError,
    QuotaExceededError,
    RateLimitError,
    UpstreamUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "تم تجاوز حد الطلبات، يرجى المحاولة بعد قليل"
QUOTA_MESSAGE = "تم استنفاد رصيد المساعد الذكي، يرجى التواصل مع إدارة المنصة"
UNAVAILABLE_MESSAGE = "المساعد الذكي غير متاح حالياً، يرجى المحاولة لاحقاً"


@dataclass
class ChatRequest:
    messages: List[ChatMessage]
    subject_name: str
    subject_id: Optional[str] = None
    stage: Optional[str] = None
    grade: Optional[str] = None
    section: Optional[str] = None
    is_admin: bool = False


class AiChatService:
    def __init__(
        self,
        db_session: Session,
        settings: Optional[AiSettings] = None,
        client: Optional[GeminiClient] = None,
    ):
        self.db = db_session
        self.settings = settings or get_ai_settings()
        self._client = client

    def _get_client(self) -> GeminiClient:
        if not self.settings.api_key:
            logger.error("GEMINI_API_KEY is not configured")
            raise ConfigurationError("GEMINI_API_KEY is not configured")
        if self._client is None:
            self._client = GeminiClient(self.settings)
        return self._client

    def _load_subject_material(self, subject_id: Optional[str]):
        if not subject_id:
            return [], []
        try:
            instructions = (
                self.db.query(AiAdminInstruction)
                .filter(
                    AiAdminInstruction.subject_id == subject_id,
                    AiAdminInstruction.is_active.is_(True),
                )
                .order_by(AiAdminInstruction.created_at.asc())
                .all()
            )
            sources = (
                self.db.query(AiSource)
                .filter(AiSource.subject_id == subject_id)
                .order_by(AiSource.created_at.asc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error("Failed to load assistant material", extra={"subject_id": subject_id, "error": str(e)})
            raise UpstreamUnavailableError(UNAVAILABLE_MESSAGE, upstream="database") from e
        return [i.instruction for i in instructions], [s.file_name for s in sources]

    def build_prompt_context(self, request: ChatRequest) -> PromptContext:
        instructions, source_names = self._load_subject_material(request.subject_id)
        return PromptContext(
            subject_name=request.subject_name,
            stage=request.stage,
            grade=request.grade,
            section=request.section,
            instructions=instructions,
            source_names=source_names,
        )

    async def reply(self, request: ChatRequest) -> str:
        if not request.messages:
            raise ValidationError("No messages", field_errors={"messages": "لا توجد رسائل"})

        system_prompt = build_system_prompt(self.build_prompt_context(request))
        contents = build_contents(system_prompt, request.messages, self.settings.history_limit)

        owns_client = self._client is None
        client = self._get_client()

        last_error: Optional[GeminiError] = None
        try:
            for model in self.settings.models:
                try:
                    text = await client.generate(model, contents)
                    logger.info(
                        "Assistant reply generated",
                        extra={"model": model, "subject_id": request.subject_id, "is_admin": request.is_admin},
                    )
                    return text
                except GeminiError as e:
                    logger.warning(
                        "Assistant model failed",
                        extra={"model": model, "status_code": e.status_code},
                    )
                    last_error = e
        finally:
            if owns_client:
                await client.close()
                self._client = None

        if isinstance(last_error, GeminiRateLimited):
            raise RateLimitError(BUSY_MESSAGE)
        if isinstance(last_error, GeminiQuotaExceeded):
            raise QuotaExceededError(QUOTA_MESSAGE)
        logger.error("All assistant models failed", extra={"models": list(self.settings.models)})
        raise UpstreamUnavailableError(UNAVAILABLE_MESSAGE, upstream="ai")
