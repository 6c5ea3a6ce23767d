"""Base models shared across the answer pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class Intent(str, Enum):
    """How an incoming message should be answered."""

    CHAT = "chat"
    SEARCH = "search"


@dataclass
class Source:
    """A titled, linked snippet of third-party evidence."""

    title: str
    snippet: str = ""
    link: str = ""


@dataclass
class LLMResponse:
    """Response from the LLM provider."""

    content: str
    model: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IncomingMessage:
    """Platform-independent view of a chat message addressed to the bot."""

    user_id: str
    author_name: str
    text: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class Reply:
    """Text the bot sends back, plus how it was produced."""

    text: str
    intent: Optional[Intent] = None
    billed: bool = False
    model_used: Optional[str] = None
