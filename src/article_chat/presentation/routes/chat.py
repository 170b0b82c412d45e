"""Chat routes: health check and the chat turn endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from article_chat.application.conversation import ChatTurnRequest, ConversationOrchestrator
from article_chat.application.exceptions import (
    CompletionProviderError,
    EmptyMessageError,
    NotFoundOrForbidden,
    ValidationError,
)
from article_chat.auth import AuthenticatedUser, get_current_user
from article_chat.presentation.schemas import (
    ChatRequest,
    ChatResponse,
    ConversationStateSchema,
    WebSnippetSchema,
)

router = APIRouter(tags=["chat"])


@router.get("/health")
async def health():
    """Simple liveness / readiness check."""
    return {"status": "ok"}


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    raw_request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Send a message about an article and receive an answer.

    Send ``conversation_id=null`` to start a new conversation, or pass an
    existing ID to continue one.
    """
    orchestrator: ConversationOrchestrator = raw_request.app.state.orchestrator

    logger.info(
        "POST /chat | user={} conversation={} article={} msg={}",
        current_user.user_id,
        request.conversation_id,
        request.article_id,
        request.message[:60],
    )

    try:
        result = await orchestrator.process_message(
            ChatTurnRequest(
                message=request.message,
                article_id=request.article_id,
                article_content=request.article_content,
                user_id=current_user.user_id,
                conversation_id=request.conversation_id,
                article_url=request.article_url,
            )
        )
    except EmptyMessageError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except NotFoundOrForbidden as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except CompletionProviderError as exc:
        logger.error("Completion provider failed | provider={} status={}", exc.provider, exc.status_code)
        raise HTTPException(status_code=502, detail="The language model request failed")
    except ValidationError as exc:
        logger.exception("Invalid completion request built for chat turn")
        raise HTTPException(status_code=500, detail=str(exc))

    return ChatResponse(
        response=result.response,
        conversation_id=result.conversation_id,
        conversation_state=ConversationStateSchema.from_domain(result.conversation_state),
        web_snippets=[WebSnippetSchema.from_domain(s) for s in result.web_snippets],
        token_usage=result.token_usage,
        is_first_message=result.is_first_message,
        persisted=result.persisted,
    )
