"""
Tests for the subject assistant proxy.

The Generative Language API is never called: GeminiClient gets an
httpx.MockTransport, AiChatService gets a mocked client.
"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from azhari_platform.ai.chat_service import (
    BUSY_MESSAGE,
    QUOTA_MESSAGE,
    UNAVAILABLE_MESSAGE,
    AiChatService,
    ChatRequest,
)
from azhari_platform.ai.gemini_client import (
    EMPTY_REPLY,
    GeminiClient,
    GeminiError,
    GeminiQuotaExceeded,
    GeminiRateLimited,
)
from azhari_platform.ai.prompt import PRIMER_REPLY, ChatMessage, PromptContext, build_contents, build_system_prompt
from azhari_platform.config.settings import AiSettings
from azhari_platform.models import AiAdminInstruction, AiSource
from azhari_platform.platform.errors import (
    ConfigurationError,
    QuotaExceededError,
    RateLimitError,
    UpstreamUnavailableError,
)


@pytest.fixture
def ai_settings():
    return AiSettings(api_key="test-key", primary_model="primary-model", fallback_model="fallback-model")


def chat_request(**overrides):
    values = dict(
        messages=[ChatMessage(role="user", content="ما هو قانون أوم؟")],
        subject_name="الفيزياء",
        subject_id="subject-1",
        stage="secondary",
        grade="second",
        section="scientific",
    )
    values.update(overrides)
    return ChatRequest(**values)


class TestPrompt:
    def test_system_prompt_contains_context_labels(self):
        prompt = build_system_prompt(
            PromptContext(subject_name="الفيزياء", stage="secondary", grade="second", section="scientific")
        )

        assert "أزهاريون" in prompt
        assert "المادة الحالية: الفيزياء" in prompt
        assert "المرحلة: المرحلة الثانوية" in prompt
        assert "الصف: الصف الثاني" in prompt
        assert "الشعبة: علمي" in prompt

    def test_instructions_and_sources_are_appended(self):
        prompt = build_system_prompt(
            PromptContext(subject_name="الفقه", instructions=["ركز على المذهب الحنفي"], source_names=["كتاب الفقه.pdf"])
        )

        assert "- ركز على المذهب الحنفي" in prompt
        assert "- كتاب الفقه.pdf" in prompt

    def test_contents_keep_last_messages_and_map_roles(self):
        messages = [ChatMessage(role="user" if i % 2 == 0 else "assistant", content=str(i)) for i in range(20)]

        contents = build_contents("system", messages, history_limit=16)

        assert len(contents) == 18
        assert contents[0] == {"role": "user", "parts": [{"text": "system"}]}
        assert contents[1]["parts"][0]["text"] == PRIMER_REPLY
        assert contents[2] == {"role": "user", "parts": [{"text": "4"}]}
        assert contents[3]["role"] == "model"


class TestGeminiClient:
    @pytest.mark.asyncio
    async def test_generate_posts_payload_and_extracts_text(self, ai_settings):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "الإجابة"}]}}]})

        async with GeminiClient(ai_settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))) as client:
            text = await client.generate("primary-model", [{"role": "user", "parts": [{"text": "hi"}]}])

        assert text == "الإجابة"
        assert "/models/primary-model:generateContent" in seen["url"]
        assert "key=test-key" in seen["url"]
        assert seen["body"]["generationConfig"] == {
            "temperature": 0.7,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": 2048,
        }
        assert len(seen["body"]["safetySettings"]) == 4

    @pytest.mark.asyncio
    async def test_empty_candidates_return_apology(self, ai_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"candidates": []}))

        async with GeminiClient(ai_settings, http_client=httpx.AsyncClient(transport=transport)) as client:
            assert await client.generate("m", []) == EMPTY_REPLY

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,error_type",
        [(429, GeminiRateLimited), (402, GeminiQuotaExceeded), (500, GeminiError)],
    )
    async def test_error_statuses(self, ai_settings, status_code, error_type):
        transport = httpx.MockTransport(lambda request: httpx.Response(status_code, text="err"))

        async with GeminiClient(ai_settings, http_client=httpx.AsyncClient(transport=transport)) as client:
            with pytest.raises(error_type):
                await client.generate("m", [])


class TestAiChatService:
    @pytest.mark.asyncio
    async def test_primary_model_answer(self, db_session, ai_settings):
        client = AsyncMock()
        client.generate.return_value = "قانون أوم هو..."
        service = AiChatService(db_session, settings=ai_settings, client=client)

        assert await service.reply(chat_request()) == "قانون أوم هو..."
        assert client.generate.await_args[0][0] == "primary-model"

    @pytest.mark.asyncio
    async def test_falls_back_to_secondary_model(self, db_session, ai_settings):
        client = AsyncMock()
        client.generate.side_effect = [GeminiError("down", status_code=500), "من النموذج الاحتياطي"]
        service = AiChatService(db_session, settings=ai_settings, client=client)

        assert await service.reply(chat_request()) == "من النموذج الاحتياطي"
        assert [c[0][0] for c in client.generate.await_args_list] == ["primary-model", "fallback-model"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,expected_type,expected_message,status_code",
        [
            (GeminiRateLimited("429", status_code=429), RateLimitError, BUSY_MESSAGE, 429),
            (GeminiQuotaExceeded("402", status_code=402), QuotaExceededError, QUOTA_MESSAGE, 402),
            (GeminiError("500", status_code=500), UpstreamUnavailableError, UNAVAILABLE_MESSAGE, 503),
        ],
    )
    async def test_failure_after_all_models(self, db_session, ai_settings, error, expected_type, expected_message, status_code):
        client = AsyncMock()
        client.generate.side_effect = error
        service = AiChatService(db_session, settings=ai_settings, client=client)

        with pytest.raises(expected_type) as exc_info:
            await service.reply(chat_request())

        assert exc_info.value.message == expected_message
        assert exc_info.value.status_code == status_code
        assert client.generate.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_api_key_is_configuration_error(self, db_session):
        service = AiChatService(db_session, settings=AiSettings(api_key=None), client=AsyncMock())

        with pytest.raises(ConfigurationError):
            await service.reply(chat_request())

    @pytest.mark.asyncio
    async def test_prompt_includes_active_instructions_and_sources(self, db_session, ai_settings):
        db_session.add_all([
            AiAdminInstruction(subject_id="subject-1", instruction="اشرح بالأمثلة", is_active=True),
            AiAdminInstruction(subject_id="subject-1", instruction="تعليمات قديمة", is_active=False),
            AiAdminInstruction(subject_id="subject-2", instruction="مادة أخرى", is_active=True),
            AiSource(subject_id="subject-1", file_name="ملزمة الكهرباء.pdf", file_url="https://cdn/x.pdf"),
        ])
        db_session.commit()
        client = AsyncMock()
        client.generate.return_value = "ok"
        service = AiChatService(db_session, settings=ai_settings, client=client)

        await service.reply(chat_request())

        contents = client.generate.await_args[0][1]
        system_prompt = contents[0]["parts"][0]["text"]
        assert "اشرح بالأمثلة" in system_prompt
        assert "ملزمة الكهرباء.pdf" in system_prompt
        assert "تعليمات قديمة" not in system_prompt
        assert "مادة أخرى" not in system_prompt
