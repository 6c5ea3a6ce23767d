"""Gather citable evidence for a search-type message."""

import logging
import re
from typing import Awaitable, Callable, List, Optional

from ..clients.search import SerperSearchClient
from ..clients.weather import OpenMeteoClient, guess_taiwan_location, is_weather_query
from ..clients.wiki import MediaWikiClient
from ..models.base import Source
from .prompts import MAX_PROMPT_SOURCES

logger = logging.getLogger(__name__)

NO_SOURCE_MESSAGE = (
    "我現在沒辦法取得可驗證的來源，所以我不會亂猜。\n"
    "你可以：\n"
    "1) 叫管理員補上 SERPER_API_KEY（搜尋）\n"
    "2) 或把關鍵字講更完整（地點/版本/專有名詞）。"
)

ORDINAL_TITLE_PREFIX = "FF14 主線序號證據："
# Plain search hits the ordinal step keeps alongside its evidence
ORDINAL_EXTRA_SOURCES = 4

GAME_PATTERN = re.compile(r"(ff14|ffxiv|最終幻想14|太空戰士14|暗影之逆焰|5\.0|主線|主线)", re.IGNORECASE)
ORDINAL_PATTERN = re.compile(r"(第幾個|第几个|第幾|第几|序號|順序|順番|任務順序|任务顺序)")

_QUOTED_NAME = re.compile(r"[「『【](.+?)[」』】]")
_CJK_RUN = re.compile(r"[\u4e00-\u9fff]{2,20}")
_FUNCTION_WORDS = re.compile(
    r"(主線|主线|任務|任务|版本|第幾|第几|哪個|哪个|詳細|详细|資料|资料|順序|顺序|FF14|FFXIV|暗影之逆焰)",
    re.IGNORECASE,
)
_ORDINAL_IN_TEXT = [
    re.compile(r"主[线線]\s*任務?\s*([0-9]{1,3})"),
    re.compile(r"第\s*([0-9]{1,3})\s*個"),
]


def is_game_query(text: str) -> bool:
    return bool(GAME_PATTERN.search(text or ""))


def is_ordinal_query(text: str) -> bool:
    """FF14 main-scenario question asking for a position in the sequence."""
    return is_game_query(text) and bool(ORDINAL_PATTERN.search(text or ""))


def extract_likely_quest_name(text: str) -> str:
    """Bracketed term if present, else the longest CJK run that isn't a function word."""
    quoted = _QUOTED_NAME.search(text or "")
    if quoted and len(quoted.group(1).strip()) >= 2:
        return quoted.group(1).strip()

    parts = [p for p in _CJK_RUN.findall(text or "") if not _FUNCTION_WORDS.search(p)]
    if not parts:
        return ""
    return max(parts, key=len)


def extract_ordinal(text: str) -> Optional[int]:
    for pattern in _ORDINAL_IN_TEXT:
        match = pattern.search(text or "")
        if match:
            return int(match.group(1))
    return None


def ordinal_evidence(quest: str, ordinal: int, origin: Source) -> Source:
    """High-confidence Source stating the extracted number, linked to where it came from."""
    snippet = (
        f"在搜尋結果中找到明確序號：主線任務 {ordinal}\n"
        f"（從標題/摘要抽取）\n"
        f"對應來源：{origin.title}\n{origin.snippet}"
    ).strip()
    return Source(title=f"{ORDINAL_TITLE_PREFIX}{quest}", snippet=snippet, link=origin.link)


def has_ordinal_evidence(sources: List[Source]) -> bool:
    return any(s.title.startswith(ORDINAL_TITLE_PREFIX) for s in sources)


class SourceList:
    """
    Ordered accumulator that drops sources without a link or with a seen link.

    Ordinal evidence is placed ahead of everything else so the prompt cap
    never cuts it off, whichever step produced it.
    """

    def __init__(self):
        self.items: List[Source] = []
        self._seen = set()

    def add(self, source: Optional[Source]) -> bool:
        if source is None or not source.link or source.link in self._seen:
            return False
        self._seen.add(source.link)
        if source.title.startswith(ORDINAL_TITLE_PREFIX):
            position = sum(1 for s in self.items if s.title.startswith(ORDINAL_TITLE_PREFIX))
            self.items.insert(position, source)
        else:
            self.items.append(source)
        return True

    def extend(self, sources: List[Source]) -> None:
        for source in sources:
            self.add(source)

    def __len__(self) -> int:
        return len(self.items)


class EvidenceAssembler:
    """Runs the lookup steps in a fixed order and merges their results."""

    def __init__(
        self,
        search_client: SerperSearchClient,
        weather_client: Optional[OpenMeteoClient] = None,
        wiki_client: Optional[MediaWikiClient] = None,
        weather_provider: str = "openmeteo",
        default_city: str = "台北",
        max_sources: int = MAX_PROMPT_SOURCES,
    ):
        self.search_client = search_client
        self.weather_client = weather_client
        self.wiki_client = wiki_client
        self.weather_provider = weather_provider
        self.default_city = default_city
        self.max_sources = max_sources

    async def gather(self, text: str) -> List[Source]:
        """Evidence for the message, deduped by link and capped for the prompt."""
        sources = SourceList()
        ordinal_query = is_ordinal_query(text)

        if ordinal_query:
            await self._run_step("ordinal", lambda: self._ordinal_step(text), sources)

        if (
            self.weather_client is not None
            and self.weather_provider == "openmeteo"
            and is_weather_query(text)
        ):
            await self._run_step("weather", lambda: self._weather_step(text), sources)

        if self.wiki_client is not None and is_game_query(text):
            want_ordinal = ordinal_query and not has_ordinal_evidence(sources.items)
            await self._run_step("wiki", lambda: self._wiki_step(text, want_ordinal), sources)

        await self._run_step("search", lambda: self.search_client.search(text), sources)

        logger.info(f"Assembled {len(sources)} sources for {text[:40]!r}")
        return sources.items[: self.max_sources]

    async def _run_step(
        self,
        name: str,
        step: Callable[[], Awaitable[List[Source]]],
        sources: SourceList,
    ) -> None:
        """A failing step contributes nothing; it never aborts the others."""
        try:
            sources.extend(await step())
        except Exception as e:
            logger.warning(f"Evidence step {name} failed: {type(e).__name__}: {e}")

    async def _ordinal_step(self, text: str) -> List[Source]:
        quest = extract_likely_quest_name(text)
        if not quest:
            return []

        # Phrasings that tend to put the number into the snippet
        queries = [
            f"FF14 {quest} 主線任務 第幾個",
            f"FF14 {quest} 主线任务 第几个",
            f"暗影之逆焰 {quest} 主線任務",
            f"Shadowbringers {quest} MSQ quest order",
            f'"{quest}" 主线任务',
        ]

        seen = SourceList()
        evidence: Optional[Source] = None
        for query in queries:
            for item in await self.search_client.search(query):
                if evidence is None:
                    ordinal = extract_ordinal(f"{item.title} {item.snippet}")
                    if ordinal is not None:
                        logger.info(f"Ordinal {ordinal} found for {quest!r} via {item.link}")
                        evidence = ordinal_evidence(quest, ordinal, item)
                        continue
                seen.add(item)
            if evidence is not None:
                break

        extras = seen.items[:ORDINAL_EXTRA_SOURCES]
        return [evidence] + extras if evidence is not None else extras

    async def _weather_step(self, text: str) -> List[Source]:
        location = guess_taiwan_location(text, default=self.default_city)
        source = await self.weather_client.weather_source(location)
        return [source] if source else []

    async def _wiki_step(self, text: str, want_ordinal: bool) -> List[Source]:
        query = extract_likely_quest_name(text) or text
        source, page_text = await self.wiki_client.lookup(query)
        if source is None:
            return []
        if want_ordinal:
            ordinal = extract_ordinal(page_text)
            if ordinal is not None:
                return [ordinal_evidence(query, ordinal, source), source]
        return [source]
