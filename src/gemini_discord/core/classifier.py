"""Decide whether a message is small talk or needs a source-backed answer."""

import logging
import re
from typing import Any, List, Optional, Pattern, Tuple

from ..clients.weather import WEATHER_PATTERN
from ..models.base import Intent
from ..models.errors import LLMProviderError
from .prompts import CLASSIFIER_INSTRUCTION, build_classifier_prompt

logger = logging.getLogger(__name__)


def _rule(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


# Evaluated top to bottom, first match wins. Weather sits above the chat rules
# so a weather question is always searched.
INTENT_RULES: List[Tuple[Pattern[str], Intent]] = [
    (WEATHER_PATTERN, Intent.SEARCH),
    # relationships / kinship
    (_rule(r"(爸爸|媽媽|老爸|老媽|哥哥|姐姐|姊姊|妹妹|弟弟|老婆|老公|女友|男友|家人)"), Intent.CHAT),
    # mood
    (
        _rule(
            r"(好累|累死|難過|傷心|開心|高興|無聊|好煩|生氣|想哭|寂寞|孤單|壓力好大|心情|\bemo\b|\bsad\b|\bhappy\b|\btired\b|\bbored\b|\blonely\b)"
        ),
        Intent.CHAT,
    ),
    # affection
    (_rule(r"(喜歡你|愛你|想你|抱抱|親親|陪我|love you|miss you)"), Intent.CHAT),
    # greetings, thanks, check-ins
    (
        _rule(
            r"(早安|午安|晚安|你好|哈囉|安安|謝謝|感謝|辛苦了|在嗎|在不在|怎麼了|幹嘛|\bhi\b|\bhello\b|\bhey\b|\bthanks?\b|thank you|good (morning|night))"
        ),
        Intent.CHAT,
    ),
    # banter
    (_rule(r"(哈哈|呵呵|笑死|\blol\b|\blmao\b|\bxd\b)"), Intent.CHAT),
    # ordinals and sequence positions
    (_rule(r"(第幾|第几|序號|順序|顺序)"), Intent.SEARCH),
    # explicit lookups
    (_rule(r"(查一下|查詢|搜尋|搜索|google|找一下|攻略|教學|推薦)"), Intent.SEARCH),
    # factual subjects
    (
        _rule(r"(價格|多少錢|匯率|股價|新聞|版本|更新|改版|規則|機制|公式|數據|排名|比分|發售|上市)"),
        Intent.SEARCH,
    ),
    # question words
    (
        _rule(
            r"(多少|幾點|幾號|幾個|幾月|什麼時候|何時|哪裡|哪個|哪些|怎麼|如何|為什麼|為何|是什麼|是誰|誰是|\bwhat\b|\bwhen\b|\bwhere\b|\bwhich\b|\bwho\b|\bhow\b|\bwhy\b)"
        ),
        Intent.SEARCH,
    ),
    # numbers
    (_rule(r"\d"), Intent.SEARCH),
]

_LLM_LABEL = re.compile(r"^\W*(chat|search)\b", re.IGNORECASE)


def match_rules(
    text: str, rules: List[Tuple[Pattern[str], Intent]] = INTENT_RULES
) -> Optional[Intent]:
    """Label from the first matching rule, or None when no rule fires."""
    for pattern, intent in rules:
        if pattern.search(text):
            return intent
    return None


def parse_llm_label(output: str) -> Optional[Intent]:
    match = _LLM_LABEL.match(output or "")
    if not match:
        return None
    return Intent(match.group(1).lower())


class IntentClassifier:
    """Regex fast path with an LLM fallback; defaults to chat when unsure."""

    def __init__(self, model_manager: Any = None):
        self.model_manager = model_manager

    async def classify(self, text: str) -> Intent:
        text = (text or "").strip()
        if not text:
            return Intent.CHAT

        intent = match_rules(text)
        if intent is not None:
            logger.debug(f"Rule classified {text[:40]!r} as {intent.value}")
            return intent

        return await self._classify_with_llm(text)

    async def _classify_with_llm(self, text: str) -> Intent:
        if self.model_manager is None or not self.model_manager.is_available():
            return Intent.CHAT

        try:
            response = await self.model_manager.generate(
                build_classifier_prompt(text), system_instruction=CLASSIFIER_INSTRUCTION
            )
        except LLMProviderError as e:
            logger.warning(f"Intent classification failed, defaulting to chat: {e}")
            return Intent.CHAT

        intent = parse_llm_label(response.content)
        if intent is None:
            logger.info(f"Unparseable intent label {response.content[:40]!r}, defaulting to chat")
            return Intent.CHAT
        return intent
