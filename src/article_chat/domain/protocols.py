"""Domain service interfaces (ports).

These protocols define the contracts that infrastructure implementations
must satisfy.  The application layer depends on these abstractions,
not on concrete classes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from article_chat.domain.models import (
    ChatMessage,
    CompletionResult,
    Conversation,
    ConversationState,
    ConversationSummary,
    Message,
)

# ---------------------------------------------------------------------------
# Completion provider
# ---------------------------------------------------------------------------


@runtime_checkable
class ICompletionProvider(Protocol):
    """Interface for LLM completion calls.

    Implementations: AnthropicCompletionProvider (Messages API with server-side
    web search), PydanticAICompletionProvider (Azure OpenAI via PydanticAI).

    Raises ``ValidationError`` before any network call when *messages* is empty
    or does not start with a non-blank user message, and
    ``CompletionProviderError`` when the upstream call fails.
    """

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        enable_web_search: bool = False,
    ) -> CompletionResult: ...


# ---------------------------------------------------------------------------
# Conversation state
# ---------------------------------------------------------------------------


@runtime_checkable
class IConversationStore(Protocol):
    """Interface for conversation and message persistence.

    Implementations: SQLiteConversationStore.  Write methods raise
    ``PersistenceError`` on failure.
    """

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def get_conversation(self, conversation_id: str, user_id: str) -> Conversation | None: ...

    def create_conversation(self, user_id: str, article_id: str, title: str) -> Conversation: ...

    def get_messages(self, conversation_id: str) -> list[Message]: ...

    def update_conversation_state(self, conversation_id: str, state: ConversationState) -> None: ...

    def append_messages(self, conversation_id: str, messages: Sequence[Message]) -> None: ...

    def list_conversations(
        self, user_id: str, article_id: str | None = None
    ) -> list[ConversationSummary]: ...
