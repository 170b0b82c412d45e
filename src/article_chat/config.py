"""Configuration for the article chat backend using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _PACKAGE_DIR.parent.parent  # src/article_chat/ → project root


class Settings(BaseSettings):
    """All backend settings, loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Completion provider: "anthropic" or "pydantic_ai" (Azure OpenAI)
    # ------------------------------------------------------------------
    llm_provider: Literal["anthropic", "pydantic_ai"] = "anthropic"

    # ------------------------------------------------------------------
    # Anthropic Messages API
    # ------------------------------------------------------------------
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_api_version: str = "2023-06-01"
    anthropic_max_tokens: int = 2000
    anthropic_temperature: float = 0.5
    anthropic_web_search_max_uses: int = 3
    anthropic_timeout_seconds: float = 60.0

    # ------------------------------------------------------------------
    # Azure OpenAI (used when LLM_PROVIDER=pydantic_ai)
    # ------------------------------------------------------------------
    azure_openai_api_key: str = ""
    azure_openai_endpoint: str = ""
    azure_openai_api_version: str = "2025-01-01-preview"
    azure_openai_chat_deployment: str = "gpt-4o-mini"

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------
    chat_db_path: Path = _PROJECT_ROOT / "database" / "article_chat.sqlite"

    # ------------------------------------------------------------------
    # Auth (JWT): set AUTH_ENABLED=false to disable for development
    # ------------------------------------------------------------------
    auth_enabled: bool = True
    jwt_secret: str = "dev-secret-change-in-production!!"
    jwt_expiry_hours: int = 24

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False

    # ------------------------------------------------------------------
    # Observability: "off" (default), "logfire" or "otel"
    # ------------------------------------------------------------------
    observability: Literal["off", "logfire", "otel"] = "off"
    otel_service_name: str = "article-chat-backend"
    otel_exporter_otlp_endpoint: str = "http://localhost:4318"

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------
    def validate_runtime(self) -> None:
        """Check that the selected provider has its credentials.

        Call this at application startup (not at import time) so that
        tests can override settings before validation runs.
        """
        if self.llm_provider == "anthropic":
            if not self.anthropic_api_key:
                raise ValueError("ANTHROPIC_API_KEY not set. Add it to .env")
        else:
            if not self.azure_openai_api_key:
                raise ValueError("AZURE_OPENAI_API_KEY not set. Add it to .env")
            if not self.azure_openai_endpoint:
                raise ValueError("AZURE_OPENAI_ENDPOINT not set. Add it to .env")
        if self.auth_enabled and len(self.jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters when auth is enabled.")


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings singleton."""
    return Settings()
