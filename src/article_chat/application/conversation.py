"""Chat turn use case.

Encapsulates one article chat turn (load or create the conversation, build
the prompt, call the completion provider, persist the result) independently
of any HTTP framework, so it can be tested in isolation and reused by
different presentation layers.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from article_chat.application.exceptions import (
    EmptyMessageError,
    NotFoundOrForbidden,
    PersistenceError,
)
from article_chat.application.summarizer import ArticleSummarizer, WebSearch
from article_chat.domain.memory import generate_memory_summary
from article_chat.domain.models import (
    ChatMessage,
    Conversation,
    ConversationState,
    Message,
    WebSnippet,
    utcnow,
)
from article_chat.domain.prompts import build_system_prompt
from article_chat.domain.protocols import ICompletionProvider, IConversationStore
from article_chat.domain.relevance import requires_web_search, should_perform_web_search
from article_chat.domain.snippets import extract_text, extract_web_snippets, merge_snippets
from article_chat.domain.tokens import estimate_conversation_tokens
from article_chat.domain.truncation import is_approaching_token_limit, truncate_history

TITLE_MAX_CHARS = 50

PROVIDER_ROLES = ("user", "assistant")


# ---------------------------------------------------------------------------
# Request / result
# ---------------------------------------------------------------------------


@dataclass
class ChatTurnRequest:
    """Input of one chat turn. ``user_id`` comes from authentication."""

    message: str
    article_id: str
    article_content: str
    user_id: str
    conversation_id: str | None = None
    article_url: str | None = None


@dataclass
class ChatResult:
    """Output of one chat turn.

    ``persisted`` is False when the answer was produced but writing the
    conversation state or the new messages failed.
    """

    response: str
    conversation_id: str
    conversation_state: ConversationState
    web_snippets: list[WebSnippet]
    token_usage: int
    is_first_message: bool
    persisted: bool = True


@dataclass
class _TurnOutcome:
    answer: str
    state: ConversationState


def derive_title(message: str) -> str:
    """Conversation title from the first 50 characters of the opening message."""
    if len(message) > TITLE_MAX_CHARS:
        return message[:TITLE_MAX_CHARS] + "..."
    return message


def to_chat_messages(messages: Sequence[Message]) -> list[ChatMessage]:
    return [
        ChatMessage(role=m.role, content=m.content) for m in messages if m.role in PROVIDER_ROLES
    ]


# ---------------------------------------------------------------------------
# Use case
# ---------------------------------------------------------------------------


class ConversationOrchestrator:
    """Processes a single chat turn about an article.

    Args:
        provider: Completion provider used for the answer, summaries and searches.
        store: Conversation persistence.
        summarizer: First-turn article summarizer (built from *provider* by default).
        web_search: Follow-up web search (built from *provider* by default).
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        provider: ICompletionProvider,
        store: IConversationStore,
        summarizer: ArticleSummarizer | None = None,
        web_search: WebSearch | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.provider = provider
        self.store = store
        self.web_search = web_search or WebSearch(provider)
        self.summarizer = summarizer or ArticleSummarizer(provider, self.web_search)
        self.clock = clock or utcnow

    async def process_message(self, request: ChatTurnRequest) -> ChatResult:
        """Run one chat turn and return the answer with the updated state.

        Raises:
            EmptyMessageError: If the message is blank. Nothing is created.
            NotFoundOrForbidden: If ``conversation_id`` is unknown or owned by
                another user. No provider call is made.
            CompletionProviderError: If the answer cannot be produced. Nothing
                is persisted for the turn.
        """
        if not request.message.strip():
            raise EmptyMessageError("message must not be blank")

        conversation = self._load_or_create(request)
        history = self.store.get_messages(conversation.id)
        messages = [*history, Message(role="user", content=request.message, created_at=self.clock())]
        is_first_message = conversation.conversation_length == 0

        logger.info(
            "Chat turn | user={} conversation={} first={} history={}",
            request.user_id,
            conversation.id,
            is_first_message,
            len(history),
        )

        if is_first_message:
            outcome = await self._first_turn(request, messages)
        else:
            outcome = await self._followup_turn(conversation.state, messages)

        messages.append(Message(role="assistant", content=outcome.answer, created_at=self.clock()))
        state = outcome.state.evolve(conversation_length=len(messages))

        persisted = self._persist(conversation.id, state, messages)

        return ChatResult(
            response=outcome.answer,
            conversation_id=conversation.id,
            conversation_state=state,
            web_snippets=list(state.web_snippets),
            token_usage=state.total_tokens,
            is_first_message=is_first_message,
            persisted=persisted,
        )

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _load_or_create(self, request: ChatTurnRequest) -> Conversation:
        if request.conversation_id:
            conversation = self.store.get_conversation(request.conversation_id, request.user_id)
            if conversation is None:
                logger.warning(
                    "Conversation {} not found for user {}",
                    request.conversation_id,
                    request.user_id,
                )
                raise NotFoundOrForbidden(f"Conversation {request.conversation_id} not found")
            return conversation
        return self.store.create_conversation(
            request.user_id, request.article_id, derive_title(request.message)
        )

    async def _first_turn(self, request: ChatTurnRequest, messages: list[Message]) -> _TurnOutcome:
        summary = await self.summarizer.summarize(request.article_content, request.article_url)
        logger.info(
            "Article summary ready | source={} snippets={}",
            summary.source.value,
            len(summary.snippets),
        )

        system_prompt = build_system_prompt(True, summary.text, summary.snippets)
        result = await self.provider.complete(system_prompt, to_chat_messages(messages))

        answer = extract_text(result.content)
        snippets = merge_snippets(summary.snippets, extract_web_snippets(result.content))
        total_tokens = estimate_conversation_tokens(messages, system_prompt, summary.text, snippets)

        state = ConversationState(
            article_summary=summary.text,
            web_snippets=tuple(snippets),
            total_tokens=total_tokens,
            last_web_search_at=self.clock(),
        )
        return _TurnOutcome(answer=answer, state=state)

    async def _followup_turn(
        self, current: ConversationState, messages: list[Message]
    ) -> _TurnOutcome:
        now = self.clock()
        user_message = messages[-1]
        snippets = list(current.web_snippets)

        searched = False
        if requires_web_search(user_message.content) and should_perform_web_search(
            current.last_web_search_at, now
        ):
            logger.info("Follow-up needs fresh web context, searching")
            snippets = merge_snippets(snippets, await self.web_search.search(user_message.content))
            searched = True

        memory_summary = current.memory_summary
        if not memory_summary and len(messages) > 10:
            memory_summary = generate_memory_summary(messages) or None

        system_prompt = build_system_prompt(
            False, current.article_summary, snippets, memory_summary
        )
        context = messages
        estimated = estimate_conversation_tokens(
            context, system_prompt, current.article_summary, snippets, memory_summary
        )

        if is_approaching_token_limit(max(current.total_tokens, estimated)):
            context = _starting_with_user(truncate_history(messages), user_message)
            estimated = estimate_conversation_tokens(
                context, system_prompt, current.article_summary, snippets, memory_summary
            )
            logger.info(
                "Truncated history | kept={} of {} | estimated_tokens={}",
                len(context),
                len(messages),
                estimated,
            )

        result = await self.provider.complete(system_prompt, to_chat_messages(context))

        answer = extract_text(result.content)
        snippets = merge_snippets(snippets, extract_web_snippets(result.content))

        state = current.evolve(
            web_snippets=snippets,
            memory_summary=memory_summary,
            total_tokens=estimated,
            last_web_search_at=now if searched else current.last_web_search_at,
        )
        return _TurnOutcome(answer=answer, state=state)

    def _persist(self, conversation_id: str, state: ConversationState, messages: list[Message]) -> bool:
        pending = [m for m in messages if m.is_pending]
        try:
            self.store.update_conversation_state(conversation_id, state)
            self.store.append_messages(conversation_id, pending)
        except PersistenceError as exc:
            logger.error(
                "Failed to persist turn, answer returned anyway | conversation={} error={}",
                conversation_id,
                exc,
            )
            return False
        logger.debug("Persisted {} new messages | conversation={}", len(pending), conversation_id)
        return True


def _starting_with_user(messages: list[Message], latest: Message) -> list[Message]:
    """Drop leading non-user messages; keep at least the latest user message."""
    for index, message in enumerate(messages):
        if message.role == "user":
            return messages[index:]
    return [latest]
