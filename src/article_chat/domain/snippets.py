"""Reading provider content blocks and maintaining the rolling snippet set."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from article_chat.domain.models import MAX_WEB_SNIPPETS, WebSnippet

RESULTS_PER_SEARCH = 5
DEFAULT_RELEVANCE = 0.5

EMPTY_ANSWER_FALLBACK = (
    "I apologize, but I was unable to generate a response. Please try again."
)


def extract_text(content: Sequence[dict[str, Any]]) -> str:
    """Concatenate every text block; fall back to an apology when there is none."""
    text = "".join(
        block.get("text") or "" for block in content if block.get("type") == "text"
    )
    if not text.strip():
        return EMPTY_ANSWER_FALLBACK
    return text


def extract_web_snippets(content: Sequence[dict[str, Any]]) -> list[WebSnippet]:
    """Pull search results out of ``web_search`` tool-use blocks."""
    snippets: list[WebSnippet] = []
    for block in content:
        if block.get("type") != "tool_use" or block.get("name") != "web_search":
            continue
        results = (block.get("input") or {}).get("search_results") or []
        for result in results[:RESULTS_PER_SEARCH]:
            snippets.append(
                WebSnippet(
                    title=result.get("title") or "Search Result",
                    content=result.get("snippet") or result.get("content") or "",
                    url=result.get("url"),
                    relevance_score=result.get("relevance_score") or DEFAULT_RELEVANCE,
                )
            )
    return snippets


def merge_snippets(
    existing: Iterable[WebSnippet],
    new: Iterable[WebSnippet],
    cap: int = MAX_WEB_SNIPPETS,
) -> list[WebSnippet]:
    """Append *new* after *existing*, dropping the oldest entries beyond *cap*.

    No de-duplication: the same title or URL may appear more than once.
    """
    merged = [*existing, *new]
    if len(merged) > cap:
        merged = merged[len(merged) - cap :]
    return merged
