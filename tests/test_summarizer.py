"""Tests for first-turn article summarization and standalone web search."""

from __future__ import annotations

from article_chat.application.exceptions import CompletionProviderError
from article_chat.application.summarizer import (
    MAX_ARTICLE_CHARS,
    ArticleSummarizer,
    SummarySource,
    WebSearch,
)
from article_chat.domain.models import WebSnippet

ARTICLE = "Solar capacity doubled across the region last year."


class TestWebSearch:
    async def test_returns_snippets(self, fake_provider):
        snippets = await WebSearch(fake_provider).search("solar")

        assert snippets == [
            WebSnippet(title="Search hit", content="Fresh fact", url="https://example.com/hit", relevance_score=0.5)
        ]
        assert fake_provider.calls[0].enable_web_search
        assert fake_provider.calls[0].system_prompt == ""

    async def test_failure_yields_empty_list(self, provider_factory):
        provider = provider_factory(summary_error=CompletionProviderError("down"))
        assert await WebSearch(provider).search("solar") == []


class TestArticleSummarizer:
    async def test_url_summary_used_when_fetched(self, fake_provider):
        summary = await ArticleSummarizer(fake_provider).summarize(ARTICLE, "https://example.com/a")

        assert summary.source is SummarySource.URL
        assert summary.text == "URL summary of the article."
        assert fake_provider.kinds() == ["url_summary"]

    async def test_fetch_failure_falls_back_to_content(self, provider_factory):
        provider = provider_factory(url_summary="Sorry, I cannot access this page.")
        summary = await ArticleSummarizer(provider).summarize(ARTICLE, "https://example.com/a")

        assert summary.source is SummarySource.CONTENT
        assert summary.text == "Content summary of the article."
        assert [s.title for s in summary.snippets] == ["Search hit"]
        assert provider.kinds() == ["url_summary", "content_summary", "search"]
        assert ARTICLE in provider.calls[2].messages[0].content

    async def test_no_url_goes_straight_to_content(self, fake_provider):
        summary = await ArticleSummarizer(fake_provider).summarize(ARTICLE)

        assert summary.source is SummarySource.CONTENT
        assert fake_provider.kinds() == ["content_summary", "search"]
        assert all(c.enable_web_search for c in fake_provider.calls)

    async def test_long_content_truncated(self, fake_provider):
        article = "a" * (MAX_ARTICLE_CHARS + 500)
        await ArticleSummarizer(fake_provider).summarize(article)

        summary_prompt = fake_provider.calls[0].messages[0].content
        assert "a" * MAX_ARTICLE_CHARS + "..." in summary_prompt
        assert "a" * (MAX_ARTICLE_CHARS + 1) not in summary_prompt

    async def test_degraded_when_everything_fails(self, provider_factory):
        provider = provider_factory(summary_error=CompletionProviderError("down"))
        article = "b" * 3000
        summary = await ArticleSummarizer(provider).summarize(article, "https://example.com/a")

        assert summary.source is SummarySource.DEGRADED
        assert summary.snippets == ()
        assert summary.text == (
            "I encountered an error while analyzing this article. Here's a basic summary "
            f"based on the content: {'b' * 1000}..."
        )
