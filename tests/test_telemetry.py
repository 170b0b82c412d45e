"""Tests for tracing setup."""

from __future__ import annotations

from unittest.mock import patch

import pydantic
import pytest
from fastapi import FastAPI

from article_chat.config import Settings
from article_chat.telemetry import setup_telemetry


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSetupTelemetry:
    def test_off_is_noop(self):
        with patch("pydantic_ai.Agent.instrument_all") as instrument_all:
            assert setup_telemetry(FastAPI(), _settings()) is False
        instrument_all.assert_not_called()

    def test_otel_instruments_agents(self):
        with (
            patch("article_chat.telemetry._setup_otel") as setup_otel,
            patch("pydantic_ai.models.instrumented.InstrumentationSettings") as instrumentation,
            patch("pydantic_ai.Agent.instrument_all") as instrument_all,
        ):
            assert setup_telemetry(FastAPI(), _settings(observability="otel")) is True

        setup_otel.assert_called_once()
        instrument_all.assert_called_once_with(instrumentation.return_value)

    def test_unknown_mode_rejected_by_settings(self):
        with pytest.raises(pydantic.ValidationError):
            _settings(observability="jaeger")
