"""First-turn article summarization and standalone web searches.

Neither class ever raises: failures are logged and turned into an empty
search result or a degraded summary built from the raw article text.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from loguru import logger

from article_chat.domain.models import ChatMessage, WebSnippet
from article_chat.domain.protocols import ICompletionProvider
from article_chat.domain.prompts import content_summary_prompt, url_summary_prompt, web_search_prompt
from article_chat.domain.relevance import looks_like_fetch_failure
from article_chat.domain.snippets import extract_text, extract_web_snippets

MAX_ARTICLE_CHARS = 50_000
DEGRADED_PREVIEW_CHARS = 1_000


class SummarySource(enum.Enum):
    URL = "url"
    CONTENT = "content"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class ArticleSummary:
    source: SummarySource
    text: str
    snippets: tuple[WebSnippet, ...] = ()


def truncate_article(content: str) -> str:
    if len(content) > MAX_ARTICLE_CHARS:
        return content[:MAX_ARTICLE_CHARS] + "..."
    return content


def degraded_summary(content: str) -> ArticleSummary:
    text = (
        "I encountered an error while analyzing this article. Here's a basic summary "
        f"based on the content: {content[:DEGRADED_PREVIEW_CHARS]}..."
    )
    return ArticleSummary(source=SummarySource.DEGRADED, text=text)


class WebSearch:
    """Run a web-search-enabled completion and keep only the snippets."""

    def __init__(self, provider: ICompletionProvider) -> None:
        self.provider = provider

    async def search(self, query: str) -> list[WebSnippet]:
        try:
            result = await self.provider.complete(
                "",
                [ChatMessage(role="user", content=web_search_prompt(query))],
                enable_web_search=True,
            )
        except Exception as exc:
            logger.warning("Web search failed, continuing without results | error={}", exc)
            return []
        snippets = extract_web_snippets(result.content)
        logger.debug("Web search returned {} snippets", len(snippets))
        return snippets


class ArticleSummarizer:
    """Summarize an article from its URL, falling back to its raw content."""

    def __init__(self, provider: ICompletionProvider, web_search: WebSearch | None = None) -> None:
        self.provider = provider
        self.web_search = web_search or WebSearch(provider)

    async def summarize(self, article_content: str, article_url: str | None = None) -> ArticleSummary:
        try:
            if article_url:
                summary = await self._summarize_url(article_url)
                if summary is not None:
                    return summary
            return await self._summarize_content(article_content)
        except Exception as exc:
            logger.exception("Article summarization failed, using degraded summary | error={}", exc)
            return degraded_summary(article_content)

    async def _summarize_url(self, article_url: str) -> ArticleSummary | None:
        result = await self.provider.complete(
            "",
            [ChatMessage(role="user", content=url_summary_prompt(article_url))],
            enable_web_search=True,
        )
        text = extract_text(result.content)
        if looks_like_fetch_failure(text):
            logger.info("URL summary looks like a fetch failure, using article content | url={}", article_url)
            return None
        return ArticleSummary(
            source=SummarySource.URL,
            text=text,
            snippets=tuple(extract_web_snippets(result.content)),
        )

    async def _summarize_content(self, article_content: str) -> ArticleSummary:
        truncated = truncate_article(article_content)
        result = await self.provider.complete(
            "",
            [ChatMessage(role="user", content=content_summary_prompt(truncated))],
            enable_web_search=True,
        )
        text = extract_text(result.content)
        snippets = await self.web_search.search(truncated)
        return ArticleSummary(source=SummarySource.CONTENT, text=text, snippets=tuple(snippets))
