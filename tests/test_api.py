"""
Tests for the HTTP chat endpoint.

Uses FastAPI's TestClient with an injected pipeline so no configuration
or network is involved.
"""

from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest
from fastapi.testclient import TestClient

from blog_rag.api import create_app
from blog_rag.completion import MockCompletion
from blog_rag.core import InvalidQuery, PipelineConfig
from blog_rag.pipeline import GENERIC_ERROR_MESSAGE, PipelineResponse, create_pipeline
from blog_rag.retrieval import InMemoryDocumentStore, get_blog_documents


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def store():
    store = InMemoryDocumentStore(embedding_dim=3)
    for doc in get_blog_documents():
        doc.embedding = np.array([0.0, 1.0, 0.0], dtype=np.float32)
        store.upsert(doc)
    return store


@pytest.fixture
def client(store):
    embeddings = MagicMock()
    embeddings.embed.return_value = np.array([1.0, 0.0, 0.0], dtype=np.float32)
    pipeline = create_pipeline(
        PipelineConfig(),
        store=store,
        embeddings=embeddings,
        completion=MockCompletion(),
    )
    return TestClient(create_app(pipeline))


def _client_for(response=None, error=None):
    pipeline = MagicMock()
    pipeline.aanswer = AsyncMock(return_value=response, side_effect=error)
    return TestClient(create_app(pipeline))


# ---------------------------------------------------------------------------
# POST /api/chat
# ---------------------------------------------------------------------------


class TestChatEndpoint:

    def test_answers_with_sources(self, client):
        resp = client.post("/api/chat", json={"message": "git"})

        assert resp.status_code == 200
        body = resp.json()
        assert "Git Branching Strategies" in body["response"]
        assert body["sources"] == [
            {"title": "Git Branching Strategies", "slug": "git-branching-strategies", "topic": "tooling"}
        ]

    def test_no_match_has_empty_sources(self, client):
        resp = client.post("/api/chat", json={"message": "quantum computing"})

        assert resp.status_code == 200
        assert resp.json()["sources"] == []

    def test_conversation_id_passed_through(self):
        client = _client_for(response=PipelineResponse(answer="Hi", sources=[]))

        client.post("/api/chat", json={"message": "hello", "conversation_id": "abc"})

        client.app.state.pipeline.aanswer.assert_awaited_once_with("hello", "abc")

    def test_pipeline_failure_returns_generic_500(self):
        client = _client_for(response=PipelineResponse.failure())

        resp = client.post("/api/chat", json={"message": "hash table"})

        assert resp.status_code == 500
        assert resp.json() == {"error": GENERIC_ERROR_MESSAGE}

    def test_invalid_query_from_pipeline_returns_400(self):
        client = _client_for(error=InvalidQuery("blank"))

        resp = client.post("/api/chat", json={"message": "x"})

        assert resp.status_code == 400
        assert "error" in resp.json()


class TestRequestValidation:

    @pytest.mark.parametrize("payload", [
        {},
        {"message": ""},
        {"message": "   "},
        {"message": "x" * 2001},
        {"message": 42},
    ])
    def test_bad_payload_rejected(self, client, payload):
        assert client.post("/api/chat", json=payload).status_code == 422

    def test_get_not_allowed(self, client):
        assert client.get("/api/chat").status_code == 405


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
