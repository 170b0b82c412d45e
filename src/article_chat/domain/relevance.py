"""Predicates deciding when a turn needs external context."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

WEB_SEARCH_KEYWORDS = (
    "recent", "latest", "current", "today", "yesterday", "this week", "this month",
    "news", "update", "announcement", "release", "new", "latest version",
    "statistics", "stats", "data", "numbers", "figures", "trends",
    "compare", "versus", "vs", "difference between",
    "what happened", "when did", "how many", "how much",
    "price", "cost", "market", "stock", "crypto", "bitcoin",
    "election", "politics", "government", "policy",
    "weather", "forecast", "temperature",
    "covid", "pandemic", "virus", "vaccine",
)  # fmt: skip

WEB_SEARCH_COOLDOWN = timedelta(minutes=5)

# Phrases in a URL summary that mean the model could not read the page.
FETCH_FAILURE_PHRASES = (
    "cannot access",
    "cannot browse",
    "cannot visit",
    "cannot retrieve",
    "not found",
    "error",
)


def requires_web_search(message: str) -> bool:
    """Return True if *message* asks for current or external facts."""
    lowered = message.lower()
    return any(keyword in lowered for keyword in WEB_SEARCH_KEYWORDS)


def should_perform_web_search(
    last_web_search_at: datetime | None, now: datetime | None = None
) -> bool:
    """Return True unless a search already ran within the cooldown window."""
    if last_web_search_at is None:
        return True
    now = now or datetime.now(UTC)
    return now - last_web_search_at >= WEB_SEARCH_COOLDOWN


def looks_like_fetch_failure(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in FETCH_FAILURE_PHRASES)
