"""FastAPI application for the article chat assistant.

This module is a thin **presentation layer**. All business logic lives in
the ``application`` package so it can be tested and reused independently of
any HTTP framework.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from article_chat import __version__
from article_chat.application.conversation import ConversationOrchestrator
from article_chat.config import Settings, get_settings
from article_chat.domain.protocols import ICompletionProvider
from article_chat.logging_config import setup_logging
from article_chat.presentation.routes import chat, conversations
from article_chat.services.conversation_store import SQLiteConversationStore
from article_chat.services.providers import create_completion_provider
from article_chat.telemetry import setup_telemetry


def create_app(
    settings: Settings | None = None,
    provider: ICompletionProvider | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Optional Settings override (defaults to get_settings()).
        provider: Optional completion provider; when given, provider
            credentials are not validated at startup.
    """
    s = settings or get_settings()
    setup_logging(level=s.log_level, json=s.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Set up and tear down services around the application lifetime."""
        if provider is None:
            s.validate_runtime()
        completion_provider = provider or create_completion_provider(s)

        store = SQLiteConversationStore(db_path=s.chat_db_path)
        store.connect()

        app.state.settings = s
        app.state.store = store
        app.state.orchestrator = ConversationOrchestrator(
            provider=completion_provider,
            store=store,
        )

        logger.info("Application startup complete")
        yield

        store.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Article Chat Assistant",
        description="Conversations about articles with summaries, web context and memory.",
        version=__version__,
        lifespan=lifespan,
    )
    # Available before startup so auth works on any request.
    app.state.settings = s

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # No-op when OBSERVABILITY=off
    setup_telemetry(app, s)

    app.include_router(chat.router)
    app.include_router(conversations.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("article_chat.main:app", host="0.0.0.0", port=8000, reload=True)
