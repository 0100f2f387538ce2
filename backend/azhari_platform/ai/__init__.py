"""Subject assistant: prompt building and the Generative Language API proxy."""

from azhari_platform.ai.chat_service import AiChatService, ChatRequest
from azhari_platform.ai.gemini_client import GeminiClient
from azhari_platform.ai.prompt import ChatMessage

__all__ = ["AiChatService", "ChatRequest", "GeminiClient", "ChatMessage"]
