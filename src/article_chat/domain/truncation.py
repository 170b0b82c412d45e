"""Token budget checks and history truncation."""

from __future__ import annotations

from collections.abc import Sequence

from article_chat.domain.models import Message
from article_chat.domain.tokens import estimate_tokens

TOKEN_LIMIT = 90_000
WARNING_RATIO = 0.8
TRUNCATION_TARGET = 80_000


def is_approaching_token_limit(total_tokens: int) -> bool:
    """True above 80% of the hard ceiling (72,000 of 90,000 tokens)."""
    return total_tokens > TOKEN_LIMIT * WARNING_RATIO


def truncate_history(
    messages: Sequence[Message], max_tokens: int = TRUNCATION_TARGET
) -> list[Message]:
    """Keep the newest messages that fit in *max_tokens*, in chronological order.

    Walks backwards from the most recent message and stops at the first one
    that would overflow the budget; older messages are never considered once
    a newer one has been dropped.
    """
    kept: list[Message] = []
    used = 0
    for message in reversed(messages):
        cost = estimate_tokens(message.content)
        if used + cost > max_tokens:
            break
        kept.append(message)
        used += cost
    kept.reverse()
    return kept
