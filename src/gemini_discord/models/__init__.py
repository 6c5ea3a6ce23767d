"""Data models for the Gemini Discord bot."""

from .base import IncomingMessage, Intent, LLMResponse, Reply, Source
from .errors import AuthenticationError, LLMProviderError, ModelNotFoundError
from .manager import GeminiModelManager
from .memory import ConversationTurn, DailyUsage, QuotaStatus

__all__ = [
    "Intent",
    "Source",
    "LLMResponse",
    "IncomingMessage",
    "Reply",
    "ConversationTurn",
    "DailyUsage",
    "QuotaStatus",
    "GeminiModelManager",
    "LLMProviderError",
    "AuthenticationError",
    "ModelNotFoundError",
]
