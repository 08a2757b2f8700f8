"""
Tests for the chat HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from voyant.graph import chat_api
from voyant.graph.nodes.common import IDENTITY_REPLY
from voyant.main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestChatEndpoint:
    """Tests for POST /api/chat."""

    def test_reply_for_new_thread(self, client):
        response = client.post("/api/chat", json={"message": "Who are you?"})

        assert response.status_code == 200
        body = response.json()
        assert body["reply"] == IDENTITY_REPLY
        assert body["thread_id"]
        assert body["receipts"] is None

    def test_existing_thread_kept(self, client):
        response = client.post("/api/chat", json={"message": "Who are you?", "thread_id": "abc"})
        assert response.json()["thread_id"] == "abc"

    def test_receipts_attached(self, client):
        response = client.post(
            "/api/chat", json={"message": "Who are you?", "thread_id": "abc", "receipts": True}
        )
        receipts = response.json()["receipts"]
        assert receipts["decisions"] == ["Identity question answered without routing"]

    @pytest.mark.parametrize("message", ["", "   "])
    def test_blank_message_rejected(self, client, message):
        response = client.post("/api/chat", json={"message": message})
        assert response.status_code == 422

    def test_overlong_message_rejected(self, client):
        response = client.post("/api/chat", json={"message": "a" * 4001})
        assert response.status_code == 422

    def test_turn_failure_returns_500(self, client, monkeypatch):
        def _boom(message, thread_id=None, receipts=False):
            raise RuntimeError("graph exploded")

        monkeypatch.setattr(chat_api, "handle_chat", _boom)
        response = client.post("/api/chat", json={"message": "Who are you?"})

        assert response.status_code == 500
        assert "graph exploded" in response.json()["detail"]


class TestReceiptsEndpoint:
    """Tests for GET /api/chat/{thread_id}/receipts."""

    def test_receipts_after_turn(self, client):
        client.post("/api/chat", json={"message": "Who are you?", "thread_id": "abc"})
        body = client.get("/api/chat/abc/receipts").json()

        assert body["thread_id"] == "abc"
        assert body["explanation"].startswith("Here's how I got my last answer:")
        assert body["receipts"]["reply"] == IDENTITY_REPLY

    def test_unknown_thread(self, client):
        body = client.get("/api/chat/nobody/receipts").json()
        assert body["explanation"] == "I don't have any details about a previous answer in this conversation yet."
        assert body["sources"] == []


class TestClearEndpoint:
    """Tests for DELETE /api/chat/{thread_id}."""

    def test_clear_existing_thread(self, client):
        client.post("/api/chat", json={"message": "Who are you?", "thread_id": "abc"})
        body = client.delete("/api/chat/abc").json()

        assert body == {"thread_id": "abc", "cleared": True}
        assert client.get("/api/chat/abc/receipts").json()["receipts"]["decisions"] == []

    def test_clear_unknown_thread(self, client):
        assert client.delete("/api/chat/nobody").json() == {"thread_id": "nobody", "cleared": False}


class TestServiceEndpoints:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root_lists_endpoints(self, client):
        body = client.get("/").json()
        assert body["name"] == "Voyant"
        assert body["endpoints"]["chat"] == "/api/chat"
