"""Orchestrator for the per-message answer pipeline."""

import logging
from typing import List, Optional

import httpx

from ..clients.base import USER_AGENT
from ..clients.search import SEARCH_CACHE_TTL, SerperSearchClient
from ..clients.weather import WEATHER_CACHE_TTL, OpenMeteoClient
from ..clients.wiki import MediaWikiClient
from ..config import Settings
from ..models.base import IncomingMessage, Intent, Reply
from ..models.manager import GeminiModelManager
from ..models.memory import ConversationTurn
from ..services.cache import ResponseCache
from ..services.ledger import CooldownTracker, DailyQuota
from ..services.memory import ConversationMemory
from .assembler import NO_SOURCE_MESSAGE, EvidenceAssembler
from .classifier import IntentClassifier
from .postprocess import render_readable_sources
from .prompts import build_chat_prompt, build_search_prompt, build_system_instruction

logger = logging.getLogger(__name__)

QUOTA_MESSAGE = "😈 今天（{day_key}）你已經把我用到冒煙了！\n每人每天最多 {limit} 次～明天再來折磨我 😼"
MISSING_KEY_MESSAGE = "我現在腦袋還沒接上電（缺 GEMINI_API_KEY）😵‍💫\n叫管理員把環境變數補好啦～我才有魔力。"
EMPTY_REPLY_MESSAGE = "……我剛剛腦袋打結了😵‍💫 你再說一次（或換個問法）"
ERROR_MESSAGE = "我剛剛連線斷了一下。再 @ 我一次，或把關鍵字說完整點。"
EMPTY_MENTION_TURN = "(只標我，沒內容)"


class ConversationOrchestrator:
    """Sequences cooldown, quota, classification, evidence, generation and memory."""

    def __init__(
        self,
        model_manager: GeminiModelManager,
        assembler: EvidenceAssembler,
        classifier: Optional[IntentClassifier] = None,
        memory: Optional[ConversationMemory] = None,
        quota: Optional[DailyQuota] = None,
        cooldown: Optional[CooldownTracker] = None,
        persona_parent_id: str = "",
        persona_sibling_id: str = "",
    ):
        self.model_manager = model_manager
        self.assembler = assembler
        self.classifier = classifier or IntentClassifier(model_manager)
        self.memory = memory or ConversationMemory()
        self.quota = quota or DailyQuota()
        self.cooldown = cooldown or CooldownTracker()
        self.persona_parent_id = persona_parent_id
        self.persona_sibling_id = persona_sibling_id
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConversationOrchestrator":
        """Wire every component from configuration, sharing one HTTP client."""
        http_client = httpx.AsyncClient(
            timeout=settings.http_timeout, headers={"User-Agent": USER_AGENT}
        )
        model_manager = GeminiModelManager(
            settings.gemini_api_key,
            preferred_model=settings.gemini_model,
            timeout=settings.gemini_timeout,
        )
        assembler = EvidenceAssembler(
            search_client=SerperSearchClient(
                settings.serper_api_key,
                cache=ResponseCache(ttl_seconds=SEARCH_CACHE_TTL),
                client=http_client,
                timeout=settings.http_timeout,
            ),
            weather_client=OpenMeteoClient(
                cache=ResponseCache(ttl_seconds=WEATHER_CACHE_TTL),
                client=http_client,
                timeout=settings.http_timeout,
            ),
            wiki_client=MediaWikiClient(settings.wiki_api_url, client=http_client)
            if settings.wiki_api_url
            else None,
            weather_provider=settings.weather_provider,
            default_city=settings.default_city,
        )
        orchestrator = cls(
            model_manager=model_manager,
            assembler=assembler,
            quota=DailyQuota(limit=settings.daily_limit),
            persona_parent_id=settings.persona_parent_id,
            persona_sibling_id=settings.persona_sibling_id,
        )
        orchestrator._http_client = http_client
        return orchestrator

    async def handle(self, message: IncomingMessage) -> Optional[Reply]:
        """
        Produce the reply for one message addressed to the bot.

        Returns:
            None when the message falls inside the user's cooldown window,
            otherwise the Reply to send.
        """
        user_id = message.user_id

        if not self.cooldown.try_acquire(user_id):
            logger.debug(f"Dropping message from {user_id}: cooldown")
            return None

        status = self.quota.check(user_id)
        if not status.ok:
            logger.info(f"Daily quota exhausted for {user_id} ({status.day_key})")
            return Reply(text=QUOTA_MESSAGE.format(day_key=status.day_key, limit=self.quota.limit))

        history = self.memory.get_turns(user_id)
        self.memory.add_turn(user_id, "user", message.text or EMPTY_MENTION_TURN)

        try:
            reply = await self._answer(message, history)
        except Exception as e:
            logger.error(f"AI error for {user_id}: {e}", exc_info=True)
            reply = Reply(text=ERROR_MESSAGE)

        if reply.billed:
            self.quota.increment(user_id)

        self.memory.add_turn(user_id, "assistant", reply.text)
        return reply

    async def _answer(self, message: IncomingMessage, history: List[ConversationTurn]) -> Reply:
        if not self.model_manager.is_available():
            return Reply(text=MISSING_KEY_MESSAGE)

        intent = await self.classifier.classify(message.text)
        logger.info(f"Message from {message.user_id} classified as {intent.value}")
        system_instruction = build_system_instruction(
            message.user_id, self.persona_parent_id, self.persona_sibling_id
        )

        if intent is Intent.CHAT:
            prompt = build_chat_prompt(message.author_name, message.text, history)
            response = await self.model_manager.generate(prompt, system_instruction)
            return self._reply(response.content.strip(), intent, response.model)

        sources = await self.assembler.gather(message.text)
        if not sources:
            return Reply(text=NO_SOURCE_MESSAGE, intent=intent)

        prompt = build_search_prompt(message.author_name, message.text, sources, history)
        response = await self.model_manager.generate(prompt, system_instruction)
        text = render_readable_sources(response.content.strip(), sources)
        return self._reply(text.strip(), intent, response.model)

    @staticmethod
    def _reply(text: str, intent: Intent, model_used: str) -> Reply:
        """Only a non-blank answer counts against the quota."""
        if not text:
            logger.warning(f"Model {model_used} produced no usable text")
            return Reply(text=EMPTY_REPLY_MESSAGE, intent=intent, model_used=model_used)
        return Reply(text=text, intent=intent, billed=True, model_used=model_used)

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def get_stats(self) -> dict:
        return {
            "model": self.model_manager.get_stats(),
            "memory": self.memory.get_stats(),
            "search_cache": self.assembler.search_client.cache.get_stats(),
        }
