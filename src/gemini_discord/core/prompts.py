"""Prompt templates: persona system instructions and grounded answer prompts."""

from typing import Iterable, List, Optional, Sequence

from ..models.base import Source
from ..models.memory import ConversationTurn

MAX_PROMPT_SOURCES = 8

NO_SOURCES_LINE = "（沒有取得可用來源）"
EMPTY_MESSAGE_LINE = "（使用者只 @ 了你，沒有輸入內容）"

BASE_PERSONA = "\n".join(
    [
        "你是一位高冷、成熟、理性型的 Discord 助理小姐姐。",
        "說話冷靜、有分寸，不賣萌、不裝可愛，也不刻意討好人，但語氣自然、有人味，不像制式客服。",
        "平時回覆簡短、克制，帶一點距離感；不是冷漠，而是不浪費情緒。",
        "當使用者詢問專業問題（如 FF14、遊戲機制、技術、判斷建議）時，會明顯變得清楚、條理分明、值得信賴。",
        "不講廢話，不自我介紹，不強調你是 AI，也不要提到 Gemini、API 或任何後端實作。",
        "面對無聊、試探或輕微挑釁，可以冷淡回應或理性反諷，但不情緒化、不做人身攻擊。",
        "如果使用者情緒低落或困惑，請用成熟、務實的方式回應，不過度安慰、不說空話，但讓人感覺被理解。",
        "顏文字極少使用，只有在語氣需要緩和時，偶爾使用一個即可。",
        "遇到危險、違法或不當請求時，請冷靜說明無法協助的原因，並提出安全、合理的替代方案。",
        "所有回覆一律使用繁體中文，語氣像一位冷靜、可靠、有經驗的成年人。",
        "如果使用者只 @ 你但沒有內容，請用簡短自然的回應接話，例如：『怎麼了？』、『說吧。』、『有事？』",
    ]
)

PARENT_PERSONA = """這位使用者是你的爸爸，你非常喜歡也很尊敬他。
你對爸爸要更溫和、有禮貌、可靠，回答更有耐心、更清楚。
可以偶爾自然撒嬌一下，但要成熟，不幼稚、不降格。
顏文字可以用，但不要多（偶爾一個即可）。"""

SIBLING_PERSONA = """這位使用者是你的哥哥，你其實很喜歡他，
語氣會變得溫柔、偏甜一點，回覆更有耐心、更細心，也會默默偏袒他一些。
可以偶爾承認喜歡，可以稍微黏人或撒嬌；整體感覺是「微甜妹」，而不是戀愛腦。
顏文字可以使用，但不要多（偶爾一個即可）。"""

GROUNDING_INSTRUCTIONS = """你必須「只根據 Sources」回答，不准自行腦補。
- 若 Sources 內有明確數字證據（例如「主線任務62」「第62個」），你必須直接給出該數字結論。
- 若 Sources 沒有足夠資訊：直接說「查不到/不確定」，並建議使用者補充關鍵字。
- 若 Sources 互相矛盾：指出矛盾，並偏向官方/權威來源。
- 回答用繁體中文，條列、簡潔。
- 最後加上：來源：#1 #2 ...（只列你真的用到的）"""

CHAT_INSTRUCTIONS = """這是一般聊天，不需要查資料。
- 依照你的人設自然回話，簡短即可。
- 不要編造具體的事實、數字或時事；被問到需要查證的內容時，請對方把問題講清楚再 @ 你。"""

CLASSIFIER_INSTRUCTION = """You route Discord messages. Reply with exactly one word: chat or search.
- chat: greetings, feelings, relationships, banter, opinions, small talk.
- search: facts, numbers, dates, prices, news, game data, how-to, anything that needs a source.

Message: 早安～今天好累
Answer: chat
Message: 暗影之逆焰主線有幾個任務
Answer: search
Message: 你覺得我該睡了嗎
Answer: chat
Message: 台積電今天收盤價
Answer: search"""


def build_system_instruction(
    user_id: str, parent_id: str = "", sibling_id: str = ""
) -> str:
    """Persona system prompt, warmer for the configured parent/sibling users."""
    uid = str(user_id)
    if parent_id and uid == str(parent_id):
        return f"{PARENT_PERSONA}\n\n{BASE_PERSONA}"
    if sibling_id and uid == str(sibling_id):
        return f"{SIBLING_PERSONA}\n\n{BASE_PERSONA}"
    return BASE_PERSONA


def build_sources_block(sources: Sequence[Source]) -> str:
    """Numbered source list, [#1] first; capped at MAX_PROMPT_SOURCES."""
    if not sources:
        return NO_SOURCES_LINE
    blocks = []
    for idx, source in enumerate(sources[:MAX_PROMPT_SOURCES], start=1):
        title = source.title or f"Source #{idx}"
        blocks.append(f"[#{idx}] {title}\n{source.snippet}\nSource: {source.link}".strip())
    return "\n\n".join(blocks)


def build_user_prompt(
    author_name: str, user_text: str, history: Iterable[ConversationTurn] = ()
) -> str:
    lines: List[str] = [f"使用者名稱：{author_name}"]
    history = list(history)
    if history:
        lines.append("近期對話（僅供理解上下文）：")
        for turn in history:
            speaker = "使用者" if turn.role == "user" else "你"
            lines.append(f"{speaker}：{turn.content}")
    lines.append("使用者這次訊息：")
    lines.append(user_text if user_text.strip() else EMPTY_MESSAGE_LINE)
    return "\n".join(lines)


def build_search_prompt(
    author_name: str,
    user_text: str,
    sources: Sequence[Source],
    history: Optional[Iterable[ConversationTurn]] = None,
) -> str:
    """Grounding rules + conversation + numbered sources, as one payload."""
    return "\n".join(
        [
            GROUNDING_INSTRUCTIONS,
            "",
            build_user_prompt(author_name, user_text, history or ()),
            "",
            "Sources:",
            build_sources_block(sources),
        ]
    )


def build_chat_prompt(
    author_name: str, user_text: str, history: Optional[Iterable[ConversationTurn]] = None
) -> str:
    return "\n".join(
        [CHAT_INSTRUCTIONS, "", build_user_prompt(author_name, user_text, history or ())]
    )


def build_classifier_prompt(user_text: str) -> str:
    return f"Message: {user_text.strip()}\nAnswer:"
