"""Shared pytest fixtures for MediaTrack tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest


def make_summary(nodes_deleted: int = 0, relationships_deleted: int = 0) -> MagicMock:
    """Result summary double exposing the counters the repositories read."""
    summary = MagicMock()
    summary.counters.nodes_deleted = nodes_deleted
    summary.counters.relationships_deleted = relationships_deleted
    return summary


class ScriptedTransaction:
    """Managed-transaction double that replays scripted results in order.

    Each scripted entry answers one tx.run() call: a list of row dicts
    (returned by .data()), a summary from make_summary() (returned by
    .consume()), or an exception instance (raised by run()).
    """

    def __init__(self):
        self.results: list[Any] = []
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def run(self, text: str, params: dict[str, Any] | None = None):
        self.calls.append((text, dict(params or {})))
        outcome = self.results.pop(0) if self.results else []
        if isinstance(outcome, Exception):
            raise outcome

        result = MagicMock()
        if isinstance(outcome, list):
            result.data.return_value = outcome
            result.consume.return_value = make_summary()
        else:
            result.data.return_value = []
            result.consume.return_value = outcome
        return result

    @property
    def texts(self) -> list[str]:
        return [text for text, _ in self.calls]

    @property
    def last_params(self) -> dict[str, Any]:
        return self.calls[-1][1]


class FakeConnection:
    """GraphConnection stand-in that runs each unit of work on a ScriptedTransaction."""

    def __init__(self):
        self.tx = ScriptedTransaction()
        self.sessions: list[tuple[str, str, float | None]] = []

    def script(self, *results: Any) -> "FakeConnection":
        self.tx.results.extend(results)
        return self

    def with_read_session(self, work, *, timeout=None, operation="read"):
        self.sessions.append(("read", operation, timeout))
        return work(self.tx)

    def with_write_session(self, work, *, timeout=None, operation="write"):
        self.sessions.append(("write", operation, timeout))
        return work(self.tx)

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        pass


@pytest.fixture
def fake_connection() -> FakeConnection:
    """Connection double for repository tests without a Neo4j server."""
    return FakeConnection()


@pytest.fixture
def user_id() -> str:
    return "6f1c2a4e-3b5d-4c7e-9f10-1a2b3c4d5e6f"


@pytest.fixture
def media_id() -> str:
    return "0d9e8f7a-6b5c-4d3e-8f21-0a1b2c3d4e5f"


@pytest.fixture
def user_node(user_id) -> dict[str, Any]:
    return {
        "id": user_id,
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "authProvider": "google",
        "createdAt": "2024-05-01T12:00:00",
        "updatedAt": "2024-05-01T12:00:00",
    }


@pytest.fixture
def movie_row(media_id) -> dict[str, Any]:
    """A media row as the repositories project it: node, labels, averageRating."""
    return {
        "node": {
            "id": media_id,
            "title": "Alien",
            "releaseDate": "1979-05-25",
            "description": "",
            "coverUrl": None,
            "runtime": 117,
            "budget": 11000000.0,
            "boxOffice": "106285522",
            "createdAt": "2024-05-01T12:00:00",
            "updatedAt": "2024-05-01T12:00:00",
        },
        "labels": ["Movie", "Media"],
        "averageRating": 4.5,
    }


@pytest.fixture
def activity_node(user_id, media_id) -> dict[str, Any]:
    return {
        "id": "a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d",
        "userId": user_id,
        "mediaId": media_id,
        "statusId": 2,
        "rating": 4,
        "review": "Tense",
        "startedAt": "2024-05-01",
        "finishedAt": None,
        "createdAt": "2024-05-01T12:00:00",
        "updatedAt": "2024-05-01T12:00:00",
    }


@pytest.fixture
def summary():
    """Factory for result summaries: summary(nodes_deleted=1)."""
    return make_summary
