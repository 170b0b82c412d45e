"""Conversation persistence service.

Stores conversations (with their prompt-building state) and the append-only
message log in a dedicated SQLite database.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from loguru import logger

from article_chat.application.exceptions import PersistenceError
from article_chat.domain.models import (
    Conversation,
    ConversationState,
    ConversationSummary,
    Message,
    WebSnippet,
    utcnow,
)

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS conversations (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    article_id TEXT NOT NULL,
    title TEXT,
    article_summary TEXT,
    web_snippets TEXT DEFAULT '[]',
    memory_summary TEXT,
    total_tokens INTEGER NOT NULL DEFAULT 0 CHECK(total_tokens >= 0),
    conversation_length INTEGER NOT NULL DEFAULT 0 CHECK(conversation_length >= 0),
    last_web_search_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
    role TEXT NOT NULL CHECK(role IN ('user', 'assistant', 'system')),
    content TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_messages_conversation_id ON messages(conversation_id);
CREATE INDEX IF NOT EXISTS idx_conversations_user_article ON conversations(user_id, article_id);
"""


def _to_text(value: datetime | None) -> str | None:
    return value.isoformat(timespec="microseconds") if value else None


def _from_text(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SQLiteConversationStore:
    """CRUD operations for article conversations stored in a SQLite file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open (or create) the database and ensure the schema exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")
        self.conn.executescript(_SCHEMA_SQL)
        self.conn.commit()
        logger.info("Conversation DB ready at {}", self.db_path)

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def get_conversation(self, conversation_id: str, user_id: str) -> Conversation | None:
        """Return the conversation only if it belongs to *user_id*."""
        assert self.conn
        row = self.conn.execute(
            "SELECT * FROM conversations WHERE id = ? AND user_id = ?",
            (conversation_id, user_id),
        ).fetchone()
        if not row:
            return None
        return self._row_to_conversation(row)

    def create_conversation(self, user_id: str, article_id: str, title: str) -> Conversation:
        """Insert an empty conversation (zero tokens, zero messages) and return it."""
        assert self.conn
        now = utcnow()
        conversation = Conversation(
            id=str(uuid.uuid4()),
            user_id=user_id,
            article_id=article_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        try:
            self.conn.execute(
                "INSERT INTO conversations "
                "(id, user_id, article_id, title, web_snippets, total_tokens, "
                "conversation_length, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, '[]', 0, 0, ?, ?)",
                (
                    conversation.id,
                    user_id,
                    article_id,
                    title,
                    _to_text(now),
                    _to_text(now),
                ),
            )
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise PersistenceError(f"Failed to create conversation: {exc}") from exc
        logger.info("Created conversation {} for article {}", conversation.id, article_id)
        return conversation

    def update_conversation_state(self, conversation_id: str, state: ConversationState) -> None:
        """Overwrite the mutable state columns of a conversation."""
        assert self.conn
        try:
            cursor = self.conn.execute(
                "UPDATE conversations SET article_summary = ?, web_snippets = ?, "
                "memory_summary = ?, total_tokens = ?, conversation_length = ?, "
                "last_web_search_at = ?, updated_at = ? WHERE id = ?",
                (
                    state.article_summary,
                    json.dumps([s.to_dict() for s in state.web_snippets]),
                    state.memory_summary,
                    state.total_tokens,
                    state.conversation_length,
                    _to_text(state.last_web_search_at),
                    _to_text(utcnow()),
                    conversation_id,
                ),
            )
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise PersistenceError(f"Failed to save conversation state: {exc}") from exc
        if cursor.rowcount == 0:
            raise PersistenceError(f"Conversation {conversation_id} no longer exists")

    def list_conversations(
        self, user_id: str, article_id: str | None = None
    ) -> list[ConversationSummary]:
        """Return a user's conversations, newest first, optionally for one article."""
        assert self.conn
        query = "SELECT * FROM conversations WHERE user_id = ?"
        params: list[str] = [user_id]
        if article_id is not None:
            query += " AND article_id = ?"
            params.append(article_id)
        query += " ORDER BY created_at DESC, rowid DESC"
        rows = self.conn.execute(query, params).fetchall()
        return [
            ConversationSummary(
                id=row["id"],
                article_id=row["article_id"],
                title=row["title"],
                conversation_length=row["conversation_length"],
                total_tokens=row["total_tokens"],
                created_at=_from_text(row["created_at"]),
                updated_at=_from_text(row["updated_at"]),
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def get_messages(self, conversation_id: str) -> list[Message]:
        """Return all messages of a conversation, ordered chronologically."""
        assert self.conn
        rows = self.conn.execute(
            "SELECT * FROM messages WHERE conversation_id = ? ORDER BY created_at ASC, rowid ASC",
            (conversation_id,),
        ).fetchall()
        return [self._row_to_message(row) for row in rows]

    def append_messages(self, conversation_id: str, messages: Sequence[Message]) -> None:
        """Insert *messages* in one transaction and assign their IDs."""
        assert self.conn
        ids = [str(uuid.uuid4()) for _ in messages]
        try:
            with self.conn:
                self.conn.executemany(
                    "INSERT INTO messages (id, conversation_id, role, content, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    [
                        (msg_id, conversation_id, m.role, m.content, _to_text(m.created_at))
                        for msg_id, m in zip(ids, messages)
                    ],
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to save messages: {exc}") from exc
        for msg_id, message in zip(ids, messages):
            message.id = msg_id

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_conversation(row: sqlite3.Row) -> Conversation:
        raw_snippets = row["web_snippets"] or "[]"
        try:
            snippets = [WebSnippet.from_dict(s) for s in json.loads(raw_snippets)]
        except (json.JSONDecodeError, TypeError, AttributeError):
            logger.warning("Discarding unreadable web snippets on conversation {}", row["id"])
            snippets = []
        return Conversation(
            id=row["id"],
            user_id=row["user_id"],
            article_id=row["article_id"],
            title=row["title"],
            article_summary=row["article_summary"],
            web_snippets=snippets,
            memory_summary=row["memory_summary"],
            total_tokens=row["total_tokens"],
            conversation_length=row["conversation_length"],
            last_web_search_at=_from_text(row["last_web_search_at"]),
            created_at=_from_text(row["created_at"]),
            updated_at=_from_text(row["updated_at"]),
        )

    @staticmethod
    def _row_to_message(row: sqlite3.Row) -> Message:
        return Message(
            id=row["id"],
            role=row["role"],
            content=row["content"],
            created_at=_from_text(row["created_at"]),
        )
