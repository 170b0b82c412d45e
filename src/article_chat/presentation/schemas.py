"""HTTP request/response schemas (Pydantic models) for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from article_chat.domain.models import ConversationState, WebSnippet

# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


class WebSnippetSchema(BaseModel):
    title: str
    content: str
    url: str | None = None
    relevance_score: float | None = None

    @classmethod
    def from_domain(cls, snippet: WebSnippet) -> WebSnippetSchema:
        return cls(**snippet.to_dict())


class ConversationStateSchema(BaseModel):
    """Prompt-building state of a conversation after a turn."""

    article_summary: str | None = None
    web_snippets: list[WebSnippetSchema] = Field(default_factory=list)
    memory_summary: str | None = None
    total_tokens: int = 0
    conversation_length: int = 0
    last_web_search_at: datetime | None = None

    @classmethod
    def from_domain(cls, state: ConversationState) -> ConversationStateSchema:
        return cls(
            article_summary=state.article_summary,
            web_snippets=[WebSnippetSchema.from_domain(s) for s in state.web_snippets],
            memory_summary=state.memory_summary,
            total_tokens=state.total_tokens,
            conversation_length=state.conversation_length,
            last_web_search_at=state.last_web_search_at,
        )


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    """Request body for POST /chat.

    ``user_id`` is extracted from the JWT, not sent in the body.
    """

    conversation_id: str | None = Field(
        default=None,
        description="Existing conversation ID to continue. None starts a new conversation.",
    )
    message: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)] = Field(
        description="The new user message"
    )
    article_id: str = Field(min_length=1, description="ID of the article being discussed")
    article_content: str = Field(description="Raw article text")
    article_url: str | None = Field(default=None, description="Article URL, if known")


class ChatResponse(BaseModel):
    """Response body from POST /chat."""

    response: str = Field(description="The assistant's answer")
    conversation_id: str
    conversation_state: ConversationStateSchema
    web_snippets: list[WebSnippetSchema] = Field(default_factory=list)
    token_usage: int = Field(description="Estimated tokens sent to the provider this turn")
    is_first_message: bool
    persisted: bool = Field(
        default=True, description="False when the turn could not be saved"
    )


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------


class CreateConversationRequest(BaseModel):
    article_id: str = Field(min_length=1)
    title: str = Field(default="New conversation")


class ConversationSummaryResponse(BaseModel):
    """Lightweight conversation info for listing."""

    id: str
    article_id: str
    title: str | None
    conversation_length: int
    total_tokens: int
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    id: str
    role: str
    content: str
    created_at: datetime


class ConversationDetailResponse(BaseModel):
    """A conversation with its state and ordered messages."""

    id: str
    article_id: str
    title: str | None
    state: ConversationStateSchema
    messages: list[MessageResponse]
