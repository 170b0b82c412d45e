"""Shared fixtures for article chat tests."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from article_chat.domain.models import ChatMessage, CompletionResult
from article_chat.services.conversation_store import SQLiteConversationStore

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Set pytest-asyncio mode to auto so async test functions work without markers."""
    config.option.asyncio_mode = "auto"


@dataclass
class ProviderCall:
    kind: str
    system_prompt: str
    messages: list[ChatMessage]
    enable_web_search: bool


def _text(text: str) -> CompletionResult:
    return CompletionResult(content=[{"type": "text", "text": text}])


@dataclass
class FakeProvider:
    """Scripted completion provider that records every call.

    Calls are classified by their prompt: chat turns carry a system prompt,
    summaries and searches do not.
    """

    answer: str = "Assistant answer."
    url_summary: str = "URL summary of the article."
    content_summary: str = "Content summary of the article."
    search_results: list[dict] = field(
        default_factory=lambda: [
            {"title": "Search hit", "snippet": "Fresh fact", "url": "https://example.com/hit"}
        ]
    )
    answer_blocks: list[dict] = field(default_factory=list)
    error: Exception | None = None
    summary_error: Exception | None = None
    calls: list[ProviderCall] = field(default_factory=list)

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        enable_web_search: bool = False,
    ) -> CompletionResult:
        prompt = messages[-1].content
        if system_prompt:
            kind = "chat"
        elif prompt.startswith("Please search for recent"):
            kind = "search"
        elif "content available at:" in prompt:
            kind = "url_summary"
        else:
            kind = "content_summary"
        self.calls.append(ProviderCall(kind, system_prompt, list(messages), enable_web_search))

        if kind == "chat":
            if self.error:
                raise self.error
            return CompletionResult(
                content=[{"type": "text", "text": self.answer}, *self.answer_blocks]
            )
        if self.summary_error:
            raise self.summary_error
        if kind == "search":
            return CompletionResult(
                content=[
                    {
                        "type": "tool_use",
                        "name": "web_search",
                        "input": {"search_results": self.search_results},
                    }
                ]
            )
        if kind == "url_summary":
            return _text(self.url_summary)
        return _text(self.content_summary)

    def kinds(self) -> list[str]:
        return [c.kind for c in self.calls]


@pytest.fixture()
def provider_factory():
    """The FakeProvider class, for tests that need a customised provider."""
    return FakeProvider


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def store(tmp_path: Path) -> SQLiteConversationStore:
    """A SQLiteConversationStore connected to a temp database."""
    svc = SQLiteConversationStore(db_path=tmp_path / "article_chat.sqlite")
    svc.connect()
    yield svc
    svc.close()


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def clock(now: datetime):
    """A clock frozen at *now*."""
    return lambda: now
