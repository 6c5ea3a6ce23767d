"""Tests for citation rendering and reply truncation."""

from gemini_discord.core.postprocess import (
    DISCORD_REPLY_LIMIT,
    ELLIPSIS,
    parse_citation_indices,
    render_readable_sources,
    truncate_reply,
)
from gemini_discord.models.base import Source
from tests.fixtures import make_sources


class TestParseCitationIndices:
    def test_keeps_order_and_drops_duplicates(self):
        assert parse_citation_indices("#3, #1、#3") == [3, 1]

    def test_zero_is_ignored(self):
        assert parse_citation_indices("#0 #2") == [2]


class TestRenderReadableSources:
    def test_cited_sources_become_title_and_link(self):
        reply = "答案是 62。\n來源：#2 #5"
        result = render_readable_sources(reply, make_sources(5))

        assert result == (
            "答案是 62。\n來源：\n"
            "- Title 2\n  https://example.com/2\n"
            "- Title 5\n  https://example.com/5"
        )

    def test_no_marker_leaves_text_unchanged(self):
        reply = "今天台北 25°C。"
        assert render_readable_sources(reply, make_sources(3)) == reply

    def test_mid_sentence_mention_is_not_a_marker(self):
        reply = "請看 來源：#1 之後的說明"
        assert render_readable_sources(reply, make_sources(3)) == reply

    def test_out_of_range_indices_are_skipped(self):
        reply = "答案\n來源：#1 #9"
        result = render_readable_sources(reply, make_sources(3))

        assert "Title 1" in result
        assert "#9" not in result
        assert "https://example.com/9" not in result

    def test_all_out_of_range_removes_marker(self):
        reply = "答案\n來源：#9"
        assert render_readable_sources(reply, make_sources(3)) == "答案"

    def test_only_last_marker_is_rewritten(self):
        reply = "來源：#1\n補充說明\n來源：#2"
        result = render_readable_sources(reply, make_sources(3))

        assert result.startswith("來源：#1\n補充說明\n")
        assert result.endswith("- Title 2\n  https://example.com/2")

    def test_duplicate_citations_listed_once(self):
        reply = "答案\n來源：#2 #2 #1"
        result = render_readable_sources(reply, make_sources(3))

        assert result.count("Title 2") == 1
        assert result.index("Title 2") < result.index("Title 1")

    def test_english_marker(self):
        reply = "Answer\nSources: #1"
        result = render_readable_sources(reply, make_sources(2))
        assert result == "Answer\n來源：\n- Title 1\n  https://example.com/1"

    def test_marker_at_start_of_reply(self):
        result = render_readable_sources("來源：#1", make_sources(1))
        assert result == "來源：\n- Title 1\n  https://example.com/1"

    def test_source_without_link(self):
        sources = [Source(title="只有標題")]
        result = render_readable_sources("答案\n來源：#1", sources)
        assert result == "答案\n來源：\n- 只有標題"

    def test_empty_reply(self):
        assert render_readable_sources("", make_sources(2)) == ""


class TestTruncateReply:
    def test_short_text_untouched(self):
        text = "a" * DISCORD_REPLY_LIMIT
        assert truncate_reply(text) == text

    def test_long_text_is_cut_with_ellipsis(self):
        result = truncate_reply("a" * 2500)

        assert len(result) == DISCORD_REPLY_LIMIT + 1
        assert result.endswith(ELLIPSIS)

    def test_custom_limit(self):
        assert truncate_reply("abcdef", limit=3) == "abc" + ELLIPSIS
