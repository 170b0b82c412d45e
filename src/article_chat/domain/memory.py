"""Keyword-based memory compression for long conversations."""

from __future__ import annotations

from collections.abc import Sequence

from article_chat.domain.models import Message

RECENT_WINDOW = 10
KEYWORDS_PER_MESSAGE = 3
MAX_KEYWORDS = 5
MIN_KEYWORD_LENGTH = 5

STOPWORDS = frozenset(
    {"about", "what", "when", "where", "which", "their", "there", "these", "those"}
)


def _keywords(content: str) -> list[str]:
    words = content.lower().split()
    return [w for w in words if len(w) >= MIN_KEYWORD_LENGTH and w not in STOPWORDS]


def generate_memory_summary(messages: Sequence[Message]) -> str:
    """Summarize the topics of everything older than the last 10 messages.

    Returns an empty string while the conversation still fits in the recent
    window. The result is a crude keyword list, not a semantic summary.
    """
    if len(messages) <= RECENT_WINDOW:
        return ""

    earlier = messages[:-RECENT_WINDOW]
    topics: dict[str, None] = {}
    for message in earlier:
        if message.role != "user":
            continue
        for word in _keywords(message.content)[:KEYWORDS_PER_MESSAGE]:
            topics.setdefault(word)

    if not topics:
        return ""
    topic_list = ", ".join(list(topics)[:MAX_KEYWORDS])
    return f"Earlier conversation covered topics including: {topic_list}."
