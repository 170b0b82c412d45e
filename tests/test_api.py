"""Tests for the FastAPI presentation layer (routes, auth, error mapping)."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from article_chat.application.exceptions import CompletionProviderError
from article_chat.auth import create_token
from article_chat.config import Settings
from article_chat.main import create_app

CHAT_BODY = {
    "message": "What is this article about?",
    "article_id": "article-1",
    "article_content": "Solar capacity doubled across the region last year.",
}


def _test_settings(tmp_path: Path, **overrides) -> Settings:
    """Settings for tests.

    Uses ``_env_file=None`` so a local .env is never loaded. Auth is disabled
    unless overridden, so the development user is used instead of a JWT.
    """
    fields = {
        "_env_file": None,
        "anthropic_api_key": "test-key",
        "chat_db_path": tmp_path / "article_chat.sqlite",
        "auth_enabled": False,
    }
    fields.update(overrides)
    return Settings(**fields)


@pytest.fixture()
def client(tmp_path, fake_provider):
    app = create_app(_test_settings(tmp_path), provider=fake_provider)
    with TestClient(app) as c:
        yield c


class TestHealthEndpoint:
    def test_health_returns_ok(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestChatEndpoint:
    def test_first_message(self, client: TestClient):
        response = client.post("/chat", json=CHAT_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["response"] == "Assistant answer."
        assert data["is_first_message"] is True
        assert data["persisted"] is True
        assert data["conversation_state"]["conversation_length"] == 2
        assert data["web_snippets"][0]["title"] == "Search hit"
        assert data["token_usage"] > 0

    def test_followup_message(self, client: TestClient):
        first = client.post("/chat", json=CHAT_BODY).json()

        response = client.post(
            "/chat",
            json={**CHAT_BODY, "message": "Tell me more", "conversation_id": first["conversation_id"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_first_message"] is False
        assert data["conversation_id"] == first["conversation_id"]
        assert data["conversation_state"]["conversation_length"] == 4

    def test_unknown_conversation_is_404(self, client: TestClient):
        response = client.post("/chat", json={**CHAT_BODY, "conversation_id": "missing"})
        assert response.status_code == 404

    def test_missing_fields_is_422(self, client: TestClient):
        response = client.post("/chat", json={"message": "hi"})
        assert response.status_code == 422

    def test_empty_message_is_422(self, client: TestClient):
        response = client.post("/chat", json={**CHAT_BODY, "message": ""})
        assert response.status_code == 422

    def test_provider_failure_is_502(self, tmp_path, provider_factory):
        provider = provider_factory(error=CompletionProviderError("HTTP 500", status_code=500))
        app = create_app(_test_settings(tmp_path), provider=provider)
        with TestClient(app) as c:
            response = c.post("/chat", json=CHAT_BODY)
        assert response.status_code == 502


class TestConversationEndpoints:
    def test_create_and_list(self, client: TestClient):
        created = client.post("/conversations", json={"article_id": "article-1"})
        assert created.status_code == 201
        assert created.json()["title"] == "New conversation"
        assert created.json()["conversation_length"] == 0

        client.post("/chat", json={**CHAT_BODY, "article_id": "article-2"})

        all_conversations = client.get("/conversations").json()
        assert len(all_conversations) == 2
        filtered = client.get("/conversations", params={"article_id": "article-1"}).json()
        assert [c["id"] for c in filtered] == [created.json()["id"]]

    def test_precreated_conversation_gets_first_turn(self, client: TestClient):
        conversation_id = client.post("/conversations", json={"article_id": "article-1"}).json()["id"]

        data = client.post("/chat", json={**CHAT_BODY, "conversation_id": conversation_id}).json()

        assert data["is_first_message"] is True
        assert data["conversation_id"] == conversation_id

    def test_messages_in_order(self, client: TestClient):
        first = client.post("/chat", json=CHAT_BODY).json()
        client.post(
            "/chat",
            json={**CHAT_BODY, "message": "Tell me more", "conversation_id": first["conversation_id"]},
        )

        response = client.get(f"/conversations/{first['conversation_id']}/messages")

        assert response.status_code == 200
        data = response.json()
        assert [m["role"] for m in data["messages"]] == ["user", "assistant", "user", "assistant"]
        assert data["state"]["article_summary"] == "Content summary of the article."

    def test_messages_unknown_conversation_is_404(self, client: TestClient):
        response = client.get("/conversations/missing/messages")
        assert response.status_code == 404


class TestAuth:
    @pytest.fixture()
    def auth_settings(self, tmp_path) -> Settings:
        return _test_settings(
            tmp_path,
            auth_enabled=True,
            jwt_secret="test-secret-that-is-long-enough-for-hs256",
        )

    @pytest.fixture()
    def auth_client(self, auth_settings, fake_provider):
        app = create_app(auth_settings, provider=fake_provider)
        with TestClient(app) as c:
            yield c

    def test_missing_token_is_401(self, auth_client: TestClient):
        assert auth_client.post("/chat", json=CHAT_BODY).status_code == 401

    def test_invalid_token_is_401(self, auth_client: TestClient):
        response = auth_client.get("/conversations", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_valid_token(self, auth_client: TestClient, auth_settings: Settings):
        token = create_token(auth_settings, "alice", name="Alice")
        headers = {"Authorization": f"Bearer {token}"}

        first = auth_client.post("/chat", json=CHAT_BODY, headers=headers)
        assert first.status_code == 200

        other = create_token(auth_settings, "bob")
        response = auth_client.get(
            f"/conversations/{first.json()['conversation_id']}/messages",
            headers={"Authorization": f"Bearer {other}"},
        )
        assert response.status_code == 404


class TestBlankMessages:
    def test_blank_first_message_is_422(self, client: TestClient, fake_provider):
        response = client.post("/chat", json={**CHAT_BODY, "message": "   "})

        assert response.status_code == 422
        assert fake_provider.calls == []
        assert client.get("/conversations").json() == []

    def test_blank_followup_is_422(self, client: TestClient, fake_provider):
        first = client.post("/chat", json=CHAT_BODY).json()
        calls_before = len(fake_provider.calls)

        response = client.post(
            "/chat",
            json={**CHAT_BODY, "message": "\n\t ", "conversation_id": first["conversation_id"]},
        )

        assert response.status_code == 422
        assert len(fake_provider.calls) == calls_before
        messages = client.get(f"/conversations/{first['conversation_id']}/messages").json()
        assert len(messages["messages"]) == 2
