"""PydanticAI completion provider backed by Azure OpenAI."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import openai
from loguru import logger
from openai import AsyncAzureOpenAI
from pydantic_ai import Agent, ModelRequest, ModelResponse, RunContext, TextPart, UserPromptPart
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from article_chat.application.exceptions import CompletionProviderError
from article_chat.config import Settings
from article_chat.domain.models import ChatMessage, CompletionResult
from article_chat.services.completion import validate_completion_messages


@dataclass
class CompletionDeps:
    """Per-call dependencies: the system prompt changes every turn."""

    system_prompt: str


def create_completion_agent(settings: Settings) -> Agent[CompletionDeps, str]:
    """Create the PydanticAI agent used for article chat completions."""
    client = AsyncAzureOpenAI(
        api_key=settings.azure_openai_api_key,
        azure_endpoint=settings.azure_openai_endpoint,
        api_version=settings.azure_openai_api_version,
    )

    model = OpenAIChatModel(
        settings.azure_openai_chat_deployment,
        provider=OpenAIProvider(openai_client=client),
    )

    agent = Agent(
        model=model,
        deps_type=CompletionDeps,
        output_type=str,
    )

    # Instructions are re-evaluated on every run, even with message history.
    @agent.instructions
    def article_instructions(ctx: RunContext[CompletionDeps]) -> str:
        return ctx.deps.system_prompt

    return agent


class PydanticAICompletionProvider:
    """Completion provider that runs a PydanticAI agent.

    Azure OpenAI has no server-side web search, so ``enable_web_search`` is
    accepted but the result only ever holds a single text block.
    """

    name = "pydantic_ai"

    def __init__(self, agent: Agent[CompletionDeps, str], model_name: str = "") -> None:
        self.agent = agent
        self.model_name = model_name

    @classmethod
    def from_settings(cls, settings: Settings) -> PydanticAICompletionProvider:
        return cls(
            create_completion_agent(settings),
            model_name=settings.azure_openai_chat_deployment,
        )

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        enable_web_search: bool = False,
    ) -> CompletionResult:
        validate_completion_messages(messages)
        if enable_web_search:
            logger.debug("Web search requested but not supported by the PydanticAI provider")

        history = build_history(messages[:-1])
        deps = CompletionDeps(system_prompt=system_prompt)

        try:
            result = await self.agent.run(
                messages[-1].content,
                deps=deps,
                message_history=history if history else None,
            )
        except ModelHTTPError as exc:
            logger.error("Model HTTP error {} | body={}", exc.status_code, exc.body)
            raise CompletionProviderError(
                str(exc), provider=self.name, status_code=exc.status_code, body=exc.body
            ) from exc
        except (UnexpectedModelBehavior, openai.APIConnectionError) as exc:
            logger.error("Model call failed | error={}", exc)
            raise CompletionProviderError(str(exc), provider=self.name) from exc

        usage = result.usage()
        return CompletionResult(
            content=[{"type": "text", "text": result.output}],
            model=self.model_name or None,
            usage={"input_tokens": usage.input_tokens, "output_tokens": usage.output_tokens},
        )


def build_history(messages: Sequence[ChatMessage]) -> list[ModelRequest | ModelResponse]:
    """Convert prior chat messages to PydanticAI message history."""
    history: list[ModelRequest | ModelResponse] = []
    for msg in messages:
        if msg.role == "user":
            history.append(ModelRequest(parts=[UserPromptPart(content=msg.content)]))
        elif msg.role == "assistant":
            history.append(ModelResponse(parts=[TextPart(content=msg.content)]))
    return history
