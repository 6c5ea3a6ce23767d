"""Gemini Discord Bot - grounded answers with citations for a Discord channel"""

__version__ = "1.0.0"

from .core.orchestrator import ConversationOrchestrator
from .models.manager import GeminiModelManager

__all__ = ["ConversationOrchestrator", "GeminiModelManager"]
