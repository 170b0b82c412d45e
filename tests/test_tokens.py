"""Tests for token estimation."""

from __future__ import annotations

from article_chat.domain.models import Message, WebSnippet
from article_chat.domain.tokens import (
    estimate_conversation_tokens,
    estimate_tokens,
    serialize_snippets,
)


class TestEstimateTokens:
    def test_empty_string_is_zero(self):
        assert estimate_tokens("") == 0

    def test_rounds_up(self):
        assert estimate_tokens("a") == 1
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    def test_ceil_of_quarter_length(self):
        for length in (3, 4, 7, 8, 401):
            assert estimate_tokens("x" * length) == -(-length // 4)


class TestConversationTokens:
    def test_sums_prompt_context_and_messages(self):
        messages = [Message(role="user", content="x" * 8), Message(role="assistant", content="y" * 4)]
        snippets = [WebSnippet(title="T", content="C")]
        total = estimate_conversation_tokens(
            messages,
            system_prompt="p" * 40,
            article_summary="s" * 20,
            web_snippets=snippets,
            memory_summary="m" * 4,
        )
        # 10 (prompt) + 5 (summary) + 1 ("T: C") + 1 (memory) + 2 + 1 (messages)
        assert total == 20

    def test_optional_fields_skipped(self):
        messages = [Message(role="user", content="hello")]
        assert estimate_conversation_tokens(messages, "") == 2

    def test_snippet_serialization(self):
        snippets = [WebSnippet(title="A", content="one"), WebSnippet(title="B", content="two")]
        assert serialize_snippets(snippets) == "A: one\n\nB: two"
