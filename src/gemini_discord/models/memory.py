"""Memory-related data models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ConversationTurn:
    """Represents a single turn in a conversation."""

    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class DailyUsage:
    """Per-user request count for one calendar day."""

    day_key: str
    count: int = 0


@dataclass
class QuotaStatus:
    """Result of a daily quota check."""

    ok: bool
    left: int
    day_key: str
