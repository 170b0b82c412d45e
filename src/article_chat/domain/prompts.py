"""System prompt assembly and the fixed request prompts.

Everything here is plain string concatenation and free of side effects, so
identical inputs always produce identical prompts.
"""

from __future__ import annotations

from collections.abc import Sequence

from article_chat.domain.models import WebSnippet

BASE_INSTRUCTIONS = """\
You are a knowledgeable and helpful AI assistant specialized in analyzing \
articles and providing insightful responses. You have access to web search \
capabilities and can access current information from the internet.

Your role is to help users understand and discuss articles they're reading. \
Be thorough, accurate, and helpful in your responses."""

FIRST_TURN_INSTRUCTIONS = """\
This is the first message in the conversation. Please provide a comprehensive \
response and include a brief summary (2-3 sentences) of the key points that \
would be useful for follow-up questions."""

_SUMMARY_REQUIREMENTS = """\
Your summary should:
1. Capture the essence of the content in a structured format
2. Be clear and informative
3. Be around 3-5 paragraphs
4. Include any relevant context or background information that would be helpful"""

_SEARCH_PREAMBLE = """\
You are a knowledgeable and helpful AI assistant. You have access to web \
search capabilities and can access current information from the internet."""


def build_system_prompt(
    is_first_message: bool,
    article_summary: str | None = None,
    web_snippets: Sequence[WebSnippet] | None = None,
    memory_summary: str | None = None,
) -> str:
    """Build the system prompt for a chat turn.

    Args:
        is_first_message: First turns ask for a recap; follow-ups carry the
            memory and article summary instead.
        article_summary: Summary produced on the first turn.
        web_snippets: Rolling web context, rendered as a numbered list.
        memory_summary: Compressed topics of older turns.
    """
    prompt = BASE_INSTRUCTIONS

    if is_first_message:
        prompt += f"\n\n{FIRST_TURN_INSTRUCTIONS}"
    else:
        if memory_summary:
            prompt += f"\n\nPrevious conversation context: {memory_summary}"
        if article_summary:
            prompt += f"\n\nArticle summary: {article_summary}"

    if web_snippets:
        prompt += "\n\nRelevant web search results:\n"
        for index, snippet in enumerate(web_snippets, 1):
            prompt += f"{index}. {snippet.title}: {snippet.content}\n"

    return prompt


def url_summary_prompt(article_url: str) -> str:
    return (
        f"{_SEARCH_PREAMBLE}\n\n"
        "Please provide a comprehensive yet concise summary of the content "
        f"available at: {article_url}\n\n"
        "Use the web search tool to access and analyze this content, then provide "
        "a summary. You can also draw upon your training data and web search to "
        "provide additional context or background information that would enhance "
        f"the summary.\n\n{_SUMMARY_REQUIREMENTS}"
    )


def content_summary_prompt(content: str) -> str:
    return (
        f"{_SEARCH_PREAMBLE}\n\n"
        "Please provide a comprehensive yet concise summary of the following content:\n"
        f'"""\n{content}\n"""\n\n'
        "You can also use web search to find additional relevant information, "
        "background context, or related insights that would enhance the summary.\n\n"
        f"{_SUMMARY_REQUIREMENTS}"
    )


def web_search_prompt(query: str) -> str:
    return (
        f"Please search for recent and relevant information about: {query}\n\n"
        "Focus on finding current, accurate information that would be helpful "
        "for understanding this topic."
    )
