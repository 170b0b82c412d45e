"""Application-level exceptions.

These are business-logic errors, not HTTP errors. The presentation layer
(e.g. FastAPI routes) translates them into appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Any


class NotFoundOrForbidden(LookupError):
    """Raised when a conversation does not exist or belongs to another user."""


class EmptyMessageError(ValueError):
    """Raised when a chat turn carries a blank user message."""


class ValidationError(ValueError):
    """Raised when a completion request is malformed (empty or not user-first).

    Indicates a programming defect in the caller, never retried.
    """


class CompletionProviderError(RuntimeError):
    """Raised when the completion provider fails or returns malformed content."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body


class PersistenceError(RuntimeError):
    """Raised when the conversation store fails to write."""
