"""Checks shared by every completion provider adapter."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from article_chat.application.exceptions import ValidationError
from article_chat.domain.models import ChatMessage


def validate_completion_messages(messages: Sequence[ChatMessage]) -> None:
    """Fail fast, before any network call, on a request the provider would reject.

    Raises:
        ValidationError: If *messages* is empty or does not start with a
            non-blank user message.
    """
    if not messages:
        logger.error("Completion requested with an empty message list")
        raise ValidationError("messages list must not be empty")
    first = messages[0]
    if first.role != "user" or not first.content.strip():
        logger.error("Completion requested with invalid first message | role={}", first.role)
        raise ValidationError("first message must be a non-empty user message")
