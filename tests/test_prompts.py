"""Tests for system prompt assembly."""

from __future__ import annotations

from article_chat.domain.models import WebSnippet
from article_chat.domain.prompts import (
    BASE_INSTRUCTIONS,
    FIRST_TURN_INSTRUCTIONS,
    build_system_prompt,
    content_summary_prompt,
    url_summary_prompt,
    web_search_prompt,
)

SNIPPETS = [
    WebSnippet(title="Launch", content="The rocket launched."),
    WebSnippet(title="Orbit", content="It reached orbit."),
]


class TestBuildSystemPrompt:
    def test_first_turn_has_recap_instructions(self):
        prompt = build_system_prompt(True, "A summary", SNIPPETS)
        assert prompt.startswith(BASE_INSTRUCTIONS)
        assert FIRST_TURN_INSTRUCTIONS in prompt
        assert "Article summary:" not in prompt

    def test_followup_has_memory_then_summary(self):
        prompt = build_system_prompt(False, "A summary", memory_summary="Earlier topics")
        assert FIRST_TURN_INSTRUCTIONS not in prompt
        memory_at = prompt.index("Previous conversation context: Earlier topics")
        summary_at = prompt.index("Article summary: A summary")
        assert memory_at < summary_at

    def test_snippets_numbered(self):
        prompt = build_system_prompt(False, "A summary", SNIPPETS)
        assert "Relevant web search results:\n" in prompt
        assert "1. Launch: The rocket launched.\n" in prompt
        assert "2. Orbit: It reached orbit.\n" in prompt

    def test_no_snippet_section_without_snippets(self):
        assert "Relevant web search results" not in build_system_prompt(False, "A summary", [])

    def test_pure(self):
        first = build_system_prompt(False, "A summary", SNIPPETS, "memory")
        second = build_system_prompt(False, "A summary", SNIPPETS, "memory")
        assert first == second


class TestRequestPrompts:
    def test_url_prompt_mentions_url(self):
        assert "https://example.com/a" in url_summary_prompt("https://example.com/a")

    def test_content_prompt_quotes_content(self):
        assert '"""\nBody text\n"""' in content_summary_prompt("Body text")

    def test_search_prompt(self):
        assert web_search_prompt("solar").startswith(
            "Please search for recent and relevant information about: solar"
        )
