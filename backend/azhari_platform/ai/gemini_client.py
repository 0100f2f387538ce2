"""
Generative Language API client.

Thin async wrapper over ``models/{model}:generateContent``. Status codes the
assistant treats specially (429, 402) are raised as typed errors; everything
else that is not a 2xx becomes GeminiError.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from azhari_platform.config.settings import AiSettings

logger = logging.getLogger(__name__)

EMPTY_REPLY = "عذراً، لم أتمكن من معالجة طلبك. حاول مرة أخرى."

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


class GeminiError(Exception):
    """Error from the Generative Language API."""

    def __init__(self, message: str, status_code: Optional[int] = None, model: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.model = model


class GeminiRateLimited(GeminiError):
    pass


class GeminiQuotaExceeded(GeminiError):
    pass


def extract_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return EMPTY_REPLY
    parts = (candidates[0].get("content") or {}).get("parts") or []
    if not parts:
        return EMPTY_REPLY
    return parts[0].get("text") or EMPTY_REPLY


class GeminiClient:
    def __init__(self, settings: AiSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._client = http_client or httpx.AsyncClient(
            headers={"Content-Type": "application/json"},
            timeout=settings.timeout_seconds,
        )

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _payload(self, contents: List[Dict]) -> Dict[str, Any]:
        return {
            "contents": contents,
            "generationConfig": {
                "temperature": self.settings.temperature,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": self.settings.max_output_tokens,
            },
            "safetySettings": SAFETY_SETTINGS,
        }

    async def generate(self, model: str, contents: List[Dict]) -> str:
        url = f"{self.settings.base_url}/models/{model}:generateContent"
        try:
            response = await self._client.post(
                url,
                params={"key": self.settings.api_key},
                json=self._payload(contents),
            )
        except httpx.HTTPError as e:
            logger.error("Gemini request failed", extra={"model": model, "error": str(e)})
            raise GeminiError(f"Gemini request failed: {e}", model=model) from e

        if response.status_code == 429:
            raise GeminiRateLimited("Gemini rate limit", status_code=429, model=model)
        if response.status_code == 402:
            raise GeminiQuotaExceeded("Gemini quota exhausted", status_code=402, model=model)
        if response.status_code >= 400:
            logger.error(
                "Gemini API error",
                extra={"model": model, "status_code": response.status_code, "body": response.text[:500]},
            )
            raise GeminiError(f"Gemini API error: {response.status_code}", status_code=response.status_code, model=model)

        return extract_text(response.json())
