"""AnthropicCompletionProvider: calls the Messages API via httpx (no SDK dependency)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
from loguru import logger

from article_chat.application.exceptions import CompletionProviderError
from article_chat.domain.models import ChatMessage, CompletionResult
from article_chat.services.completion import validate_completion_messages

API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
WEB_SEARCH_TOOL_TYPE = "web_search_20250305"


class AnthropicCompletionProvider:
    """Completion provider using the Anthropic Messages API with server-side web search.

    Parameters
    ----------
    api_key:
        Anthropic API key.
    transport:
        Optional httpx transport; tests pass an ``httpx.MockTransport``.
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        api_url: str = API_URL,
        api_version: str = API_VERSION,
        max_tokens: int = 2000,
        temperature: float = 0.5,
        web_search_max_uses: int = 3,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.api_version = api_version
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.web_search_max_uses = web_search_max_uses
        self.timeout = timeout
        self.transport = transport

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        enable_web_search: bool = False,
    ) -> CompletionResult:
        """Send one Messages API request and return its content blocks."""
        validate_completion_messages(messages)

        payload = self._build_payload(system_prompt, messages, enable_web_search)
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Anthropic request failed | error={}", exc)
            raise CompletionProviderError(
                f"Request to Anthropic failed: {exc}", provider=self.name
            ) from exc

        if not response.is_success:
            logger.error(
                "Anthropic returned HTTP {} | body={}", response.status_code, response.text[:500]
            )
            raise CompletionProviderError(
                f"HTTP {response.status_code}: {response.text}",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise CompletionProviderError(
                "Anthropic returned a non-JSON body",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            ) from exc

        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list):
            raise CompletionProviderError(
                "Anthropic response has no content list",
                provider=self.name,
                status_code=response.status_code,
                body=response.text,
            )

        usage = data.get("usage") or {}
        logger.debug(
            "Anthropic completion | model={} | web_search={} | input_tokens={} | output_tokens={}",
            data.get("model", self.model),
            enable_web_search,
            usage.get("input_tokens"),
            usage.get("output_tokens"),
        )
        return CompletionResult(
            content=normalize_web_search_blocks(content),
            model=data.get("model", self.model),
            usage=usage,
        )

    def _build_payload(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        enable_web_search: bool,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if system_prompt:
            payload["system"] = system_prompt
        if enable_web_search:
            payload["tools"] = [
                {
                    "type": WEB_SEARCH_TOOL_TYPE,
                    "name": "web_search",
                    "max_uses": self.web_search_max_uses,
                }
            ]
        return payload


def normalize_web_search_blocks(content: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Rewrite server-side ``web_search_tool_result`` blocks as ``web_search`` tool-use blocks.

    The Messages API returns search hits without snippet text; the text the
    answer actually cited (``cited_text``) is matched back onto each hit by URL.
    """
    cited: dict[str, str] = {}
    for block in content:
        if block.get("type") != "text":
            continue
        for citation in block.get("citations") or []:
            url = citation.get("url")
            if url and citation.get("cited_text") and url not in cited:
                cited[url] = citation["cited_text"]

    normalized: list[dict[str, Any]] = []
    for block in content:
        if block.get("type") != "web_search_tool_result":
            normalized.append(block)
            continue
        results = block.get("content")
        if not isinstance(results, list):
            # An error object instead of results, nothing to extract.
            continue
        normalized.append(
            {
                "type": "tool_use",
                "name": "web_search",
                "input": {
                    "search_results": [
                        {
                            "title": r.get("title"),
                            "snippet": cited.get(r.get("url"), ""),
                            "url": r.get("url"),
                        }
                        for r in results
                        if r.get("type") == "web_search_result"
                    ]
                },
            }
        )
    return normalized
