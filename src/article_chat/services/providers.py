"""Completion provider selection."""

from __future__ import annotations

from loguru import logger

from article_chat.config import Settings
from article_chat.domain.protocols import ICompletionProvider
from article_chat.services.anthropic_provider import AnthropicCompletionProvider
from article_chat.services.pydantic_ai_provider import PydanticAICompletionProvider


def create_completion_provider(settings: Settings) -> ICompletionProvider:
    """Build the provider named by ``LLM_PROVIDER``."""
    if settings.llm_provider == "pydantic_ai":
        logger.info(
            "Using PydanticAI provider | deployment={}", settings.azure_openai_chat_deployment
        )
        return PydanticAICompletionProvider.from_settings(settings)

    logger.info("Using Anthropic provider | model={}", settings.anthropic_model)
    return AnthropicCompletionProvider(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        api_url=settings.anthropic_api_url,
        api_version=settings.anthropic_api_version,
        max_tokens=settings.anthropic_max_tokens,
        temperature=settings.anthropic_temperature,
        web_search_max_uses=settings.anthropic_web_search_max_uses,
        timeout=settings.anthropic_timeout_seconds,
    )
