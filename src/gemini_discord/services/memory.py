"""Short-term conversation memory, kept per user for the process lifetime."""

import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from ..models.memory import ConversationTurn

logger = logging.getLogger(__name__)


class ConversationMemory:
    """Bounded rolling window of recent turns for each user."""

    def __init__(self, max_turns: int = 6):
        self.max_turns = max_turns
        self._turns: Dict[str, Deque[ConversationTurn]] = {}

    def add_turn(self, user_id: str, role: str, content: str) -> None:
        """Append a turn; the oldest turn drops off once the window is full."""
        turns = self._turns.get(user_id)
        if turns is None:
            turns = deque(maxlen=self.max_turns)
            self._turns[user_id] = turns
        turns.append(ConversationTurn(role=role, content=content))

    def get_turns(self, user_id: str, limit: Optional[int] = None) -> List[ConversationTurn]:
        """Get recent conversation turns, oldest first."""
        turns = list(self._turns.get(user_id, ()))
        if limit:
            return turns[-limit:]
        return turns

    def clear(self, user_id: Optional[str] = None) -> None:
        """Forget one user, or everybody."""
        if user_id is None:
            self._turns.clear()
        else:
            self._turns.pop(user_id, None)

    def get_stats(self) -> Dict[str, Any]:
        """Get memory usage statistics."""
        return {
            "users": len(self._turns),
            "turns_count": sum(len(t) for t in self._turns.values()),
            "max_turns": self.max_turns,
        }
