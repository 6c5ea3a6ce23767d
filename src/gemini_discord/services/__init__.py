"""Service components for the Gemini Discord bot."""

from .cache import ResponseCache
from .ledger import CooldownTracker, DailyQuota
from .memory import ConversationMemory

__all__ = ["ResponseCache", "ConversationMemory", "CooldownTracker", "DailyQuota"]
