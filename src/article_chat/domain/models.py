"""Domain entities and value objects.

These are the core data structures of the article chat domain, independent
of any infrastructure or framework concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

MAX_WEB_SNIPPETS = 5


def utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Web context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WebSnippet:
    """One piece of externally retrieved context."""

    title: str
    content: str
    url: str | None = None
    relevance_score: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "url": self.url,
            "relevance_score": self.relevance_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WebSnippet:
        return cls(
            title=data.get("title") or "",
            content=data.get("content") or "",
            url=data.get("url"),
            relevance_score=data.get("relevance_score"),
        )


# ---------------------------------------------------------------------------
# Conversation entities (persisted by the conversation store)
# ---------------------------------------------------------------------------


@dataclass
class Message:
    """One turn of a conversation.

    ``id`` stays ``None`` until the store has persisted the message.
    """

    role: str
    content: str
    created_at: datetime = field(default_factory=utcnow)
    id: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.id is None


@dataclass(frozen=True)
class ConversationState:
    """Snapshot of the fields used to build prompts.

    Passed by value between components; build a modified copy with
    :meth:`evolve`.
    """

    article_summary: str | None = None
    web_snippets: tuple[WebSnippet, ...] = ()
    memory_summary: str | None = None
    total_tokens: int = 0
    conversation_length: int = 0
    last_web_search_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.total_tokens < 0:
            raise ValueError("total_tokens must not be negative")
        if self.conversation_length < 0:
            raise ValueError("conversation_length must not be negative")
        if len(self.web_snippets) > MAX_WEB_SNIPPETS:
            raise ValueError(f"at most {MAX_WEB_SNIPPETS} web snippets are allowed")

    def evolve(self, **changes: Any) -> ConversationState:
        if "web_snippets" in changes:
            changes["web_snippets"] = tuple(changes["web_snippets"])
        return replace(self, **changes)


@dataclass
class Conversation:
    id: str
    user_id: str
    article_id: str
    title: str | None
    article_summary: str | None = None
    web_snippets: list[WebSnippet] = field(default_factory=list)
    memory_summary: str | None = None
    total_tokens: int = 0
    conversation_length: int = 0
    last_web_search_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def state(self) -> ConversationState:
        return ConversationState(
            article_summary=self.article_summary,
            web_snippets=tuple(self.web_snippets),
            memory_summary=self.memory_summary,
            total_tokens=self.total_tokens,
            conversation_length=self.conversation_length,
            last_web_search_at=self.last_web_search_at,
        )


@dataclass
class ConversationSummary:
    id: str
    article_id: str
    title: str | None
    conversation_length: int
    total_tokens: int
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Shared DTO (used by the use case and the completion providers)
# ---------------------------------------------------------------------------


class ChatMessage(BaseModel):
    """A single message as sent to a completion provider."""

    role: str = Field(description="Message role: 'user' or 'assistant'")
    content: str = Field(description="Message content")


@dataclass
class CompletionResult:
    """Structured result of a provider call.

    ``content`` is a list of blocks, each either
    ``{"type": "text", "text": ...}`` or
    ``{"type": "tool_use", "name": "web_search", "input": {"search_results": [...]}}``.
    """

    content: list[dict[str, Any]]
    model: str | None = None
    usage: dict[str, Any] = field(default_factory=dict)
