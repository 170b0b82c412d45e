"""Token estimation.

A fixed 4-characters-per-token ratio instead of a real tokenizer, so that
budgets are deterministic and cheap to compute.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from article_chat.domain.models import Message, WebSnippet

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Approximate token count: ``ceil(len(text) / 4)``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def serialize_snippets(snippets: Iterable[WebSnippet]) -> str:
    return "\n\n".join(f"{s.title}: {s.content}" for s in snippets)


def estimate_conversation_tokens(
    messages: Sequence[Message],
    system_prompt: str,
    article_summary: str | None = None,
    web_snippets: Sequence[WebSnippet] | None = None,
    memory_summary: str | None = None,
) -> int:
    """Estimate the full request size: prompt, context fields and every message."""
    total = estimate_tokens(system_prompt)
    if article_summary:
        total += estimate_tokens(article_summary)
    if web_snippets:
        total += estimate_tokens(serialize_snippets(web_snippets))
    if memory_summary:
        total += estimate_tokens(memory_summary)
    for message in messages:
        total += estimate_tokens(message.content)
    return total
