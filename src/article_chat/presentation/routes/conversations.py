"""Conversation routes: list, create and read conversations with their messages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from article_chat.application.exceptions import PersistenceError
from article_chat.auth import AuthenticatedUser, get_current_user
from article_chat.domain.protocols import IConversationStore
from article_chat.presentation.schemas import (
    ConversationDetailResponse,
    ConversationStateSchema,
    ConversationSummaryResponse,
    CreateConversationRequest,
    MessageResponse,
)

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    raw_request: Request,
    article_id: str | None = None,
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """List the user's conversations, newest first, optionally for one article."""
    store: IConversationStore = raw_request.app.state.store
    summaries = store.list_conversations(current_user.user_id, article_id)
    return [
        ConversationSummaryResponse(
            id=s.id,
            article_id=s.article_id,
            title=s.title,
            conversation_length=s.conversation_length,
            total_tokens=s.total_tokens,
            created_at=s.created_at,
            updated_at=s.updated_at,
        )
        for s in summaries
    ]


@router.post("", response_model=ConversationSummaryResponse, status_code=201)
async def create_conversation(
    request: CreateConversationRequest,
    raw_request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Create an empty conversation; its first chat turn generates the article summary."""
    store: IConversationStore = raw_request.app.state.store
    try:
        conversation = store.create_conversation(
            current_user.user_id, request.article_id, request.title
        )
    except PersistenceError as exc:
        logger.error("POST /conversations failed | user={} error={}", current_user.user_id, exc)
        raise HTTPException(status_code=500, detail="Could not create conversation")

    logger.info("POST /conversations | user={} conversation={}", current_user.user_id, conversation.id)
    return ConversationSummaryResponse(
        id=conversation.id,
        article_id=conversation.article_id,
        title=conversation.title,
        conversation_length=conversation.conversation_length,
        total_tokens=conversation.total_tokens,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
    )


@router.get("/{conversation_id}/messages", response_model=ConversationDetailResponse)
async def get_conversation_messages(
    conversation_id: str,
    raw_request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Get a conversation and its messages, ordered chronologically."""
    store: IConversationStore = raw_request.app.state.store
    conversation = store.get_conversation(conversation_id, current_user.user_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")

    messages = store.get_messages(conversation_id)
    return ConversationDetailResponse(
        id=conversation.id,
        article_id=conversation.article_id,
        title=conversation.title,
        state=ConversationStateSchema.from_domain(conversation.state),
        messages=[
            MessageResponse(id=m.id, role=m.role, content=m.content, created_at=m.created_at)
            for m in messages
        ],
    )
