"""Tests for prompt construction."""

from gemini_discord.core.prompts import (
    BASE_PERSONA,
    CHAT_INSTRUCTIONS,
    EMPTY_MESSAGE_LINE,
    GROUNDING_INSTRUCTIONS,
    NO_SOURCES_LINE,
    PARENT_PERSONA,
    SIBLING_PERSONA,
    build_chat_prompt,
    build_classifier_prompt,
    build_search_prompt,
    build_sources_block,
    build_system_instruction,
    build_user_prompt,
)
from gemini_discord.models.memory import ConversationTurn
from tests.fixtures import make_sources


class TestSystemInstruction:
    def test_default_persona(self):
        assert build_system_instruction("123", parent_id="1", sibling_id="2") == BASE_PERSONA

    def test_parent_persona(self):
        result = build_system_instruction("1", parent_id="1", sibling_id="2")
        assert result.startswith(PARENT_PERSONA)
        assert result.endswith(BASE_PERSONA)

    def test_sibling_persona(self):
        result = build_system_instruction(2, parent_id="1", sibling_id="2")
        assert result.startswith(SIBLING_PERSONA)

    def test_unconfigured_ids_never_match(self):
        assert build_system_instruction("") == BASE_PERSONA


class TestSourcesBlock:
    def test_empty(self):
        assert build_sources_block([]) == NO_SOURCES_LINE

    def test_numbering_starts_at_one(self):
        block = build_sources_block(make_sources(2))
        assert block.startswith("[#1] Title 1\nSnippet 1\nSource: https://example.com/1")
        assert "[#2] Title 2" in block

    def test_capped_at_eight(self):
        block = build_sources_block(make_sources(10))
        assert "[#8]" in block
        assert "[#9]" not in block


class TestUserPrompt:
    def test_without_history(self):
        prompt = build_user_prompt("Alice", "台北天氣")
        assert prompt == "使用者名稱：Alice\n使用者這次訊息：\n台北天氣"

    def test_with_history(self):
        history = [
            ConversationTurn(role="user", content="早安"),
            ConversationTurn(role="assistant", content="早。"),
        ]
        prompt = build_user_prompt("Alice", "今天好累", history)

        assert "近期對話（僅供理解上下文）：" in prompt
        assert "使用者：早安" in prompt
        assert "你：早。" in prompt
        assert prompt.endswith("使用者這次訊息：\n今天好累")

    def test_empty_message(self):
        prompt = build_user_prompt("Alice", "")
        assert prompt.endswith(EMPTY_MESSAGE_LINE)


class TestModePrompts:
    def test_search_prompt(self):
        prompt = build_search_prompt("Alice", "台北天氣", make_sources(2))

        assert prompt.startswith(GROUNDING_INSTRUCTIONS)
        assert "Sources:\n[#1] Title 1" in prompt
        assert "來源：#1 #2" in prompt

    def test_search_prompt_without_sources(self):
        prompt = build_search_prompt("Alice", "台北天氣", [])
        assert prompt.endswith(f"Sources:\n{NO_SOURCES_LINE}")

    def test_chat_prompt_has_no_sources(self):
        prompt = build_chat_prompt("Alice", "")

        assert prompt.startswith(CHAT_INSTRUCTIONS)
        assert "Sources:" not in prompt
        assert EMPTY_MESSAGE_LINE in prompt

    def test_classifier_prompt(self):
        assert build_classifier_prompt("  嗯嗯 ") == "Message: 嗯嗯\nAnswer:"
