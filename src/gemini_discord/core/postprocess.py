"""Turn the model's trailing citation line into readable titles and links."""

import re
from typing import List, Sequence

from ..models.base import Source

DISCORD_REPLY_LIMIT = 1900
ELLIPSIS = "…"

# Only a whole line counts; the last one wins so a mid-text mention is left alone
_MARKER_LINE = re.compile(
    r"(^|\n)[ \t]*(?:來源|Sources?)[ \t]*[:：][ \t]*((?:#[ \t]*\d{1,3}[ \t,，、]*)+)[ \t]*(?=\n|$)",
    re.IGNORECASE,
)
_INDEX = re.compile(r"#\s*(\d{1,3})")


def parse_citation_indices(marker: str) -> List[int]:
    """1-based indices in citation order, duplicates dropped."""
    indices: List[int] = []
    for match in _INDEX.finditer(marker):
        n = int(match.group(1))
        if n > 0 and n not in indices:
            indices.append(n)
    return indices


def render_readable_sources(reply: str, sources: Sequence[Source]) -> str:
    """Rewrite the last `來源：#i #j` line into a bulleted title/link list.

    Indices outside the source list are skipped. Text without a marker line is
    returned unchanged.
    """
    text = reply or ""
    matches = list(_MARKER_LINE.finditer(text))
    if not matches:
        return text

    last = matches[-1]
    indices = parse_citation_indices(last.group(2))
    if not indices:
        return text

    lines = ["來源："]
    for n in indices:
        if n > len(sources):
            continue
        source = sources[n - 1]
        title = (source.title or f"Source #{n}").strip()
        link = (source.link or "").strip()
        lines.append(f"- {title}\n  {link}" if link else f"- {title}")

    if len(lines) == 1:
        # Every cited index was out of range
        rendered = ""
    else:
        rendered = last.group(1) + "\n".join(lines)
    return text[: last.start()] + rendered + text[last.end():]


def truncate_reply(text: str, limit: int = DISCORD_REPLY_LIMIT) -> str:
    """Trim to the platform ceiling, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS
