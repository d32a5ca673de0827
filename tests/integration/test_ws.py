"""End-to-end WebSocket tests against the FastAPI app with in-memory backends."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from presence_relay.app import create_app
from presence_relay.config import Settings
from tests.conftest import FakePushSender


@pytest.fixture
def push_sender() -> FakePushSender:
    return FakePushSender()


@pytest.fixture
def client(push_sender):
    app = create_app(
        Settings(PUSH_BACKEND="log", WS_HEARTBEAT_SECONDS=3600),
        push_sender=push_sender,
    )
    with TestClient(app) as c:
        yield c


def _join(ws, user_id: str) -> None:
    ws.send_json({"type": "join", "data": {"userId": user_id}})


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_readyz_without_redis(client):
    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ready"}


def test_join_presence_and_disconnect(client):
    with client.websocket_connect("/ws") as alice:
        _join(alice, "alice")
        assert alice.receive_json() == {"type": "update_online_users", "data": ["alice"]}

        with client.websocket_connect("/ws") as bob:
            _join(bob, "bob")
            assert bob.receive_json() == {"type": "update_online_users", "data": ["alice", "bob"]}
            assert alice.receive_json() == {"type": "user_online", "data": {"userId": "bob"}}
            assert alice.receive_json() == {"type": "update_online_users", "data": ["alice", "bob"]}

            bob.send_json({"type": "check_user_status", "data": {"userId": "alice"}})
            assert bob.receive_json() == {"type": "user_online", "data": {"userId": "alice"}}

            assert client.get("/api/v1/presence").json() == {"online": ["alice", "bob"]}

        assert alice.receive_json() == {"type": "user_offline", "data": {"userId": "bob"}}
        assert alice.receive_json() == {"type": "update_online_users", "data": ["alice"]}

        alice.send_json({"type": "check_user_status", "data": {"userId": "bob"}})
        assert alice.receive_json() == {"type": "user_offline", "data": {"userId": "bob"}}

    assert client.get("/api/v1/presence/alice").json() == {"userId": "alice", "online": False}


def test_send_message_typing_and_seen(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        _join(alice, "alice")
        alice.receive_json()
        _join(bob, "bob")
        bob.receive_json()
        alice.receive_json()
        alice.receive_json()

        bob.send_json({"type": "typing", "data": {"senderId": "bob", "receiverId": "alice"}})
        assert alice.receive_json() == {"type": "typing", "data": {"senderId": "bob"}}

        alice.send_json(
            {
                "type": "send_message",
                "data": {
                    "senderId": "alice",
                    "receiverId": "bob",
                    "body": "hi bob",
                    "time": "12:00",
                    "senderDisplayName": "Alice",
                },
            }
        )
        assert alice.receive_json() == {
            "type": "message_delivered",
            "data": {"receiverId": "bob", "time": "12:00"},
        }
        assert bob.receive_json() == {
            "type": "receive_message",
            "data": {"body": "hi bob", "senderId": "alice", "time": "12:00", "senderDisplayName": "Alice"},
        }
        assert bob.receive_json() == {
            "type": "notify",
            "data": {"from": "Alice", "body": "hi bob", "time": "12:00"},
        }

        bob.send_json(
            {
                "type": "mark_seen",
                "data": {
                    "receiverId": "bob",
                    "seenMessages": [
                        {"id": "m1", "senderId": "alice"},
                        {"id": "m2", "senderId": "carol"},
                    ],
                },
            }
        )
        seen = alice.receive_json()
        assert seen["type"] == "message_seen"
        assert seen["data"]["messageId"] == "m1"

        bob.send_json({"type": "ping"})
        assert bob.receive_json() == {"type": "pong", "data": {}}


def test_offline_receiver_only_gets_accept_ack(client):
    with client.websocket_connect("/ws") as alice:
        _join(alice, "alice")
        alice.receive_json()

        alice.send_json(
            {
                "type": "save_subscription",
                "data": {"userId": "bob", "subscription": {"endpoint": "https://push.example/bob"}},
            }
        )
        alice.send_json(
            {
                "type": "send_message",
                "data": {
                    "senderId": "alice",
                    "receiverId": "bob",
                    "message": "wake up",
                    "time": 1714550400000,
                    "senderName": "Alice",
                },
            }
        )
        assert alice.receive_json() == {
            "type": "message_delivered",
            "data": {"receiverId": "bob", "time": 1714550400000},
        }
        alice.send_json({"type": "ping"})
        assert alice.receive_json() == {"type": "pong", "data": {}}


def test_push_sent_once_after_shutdown_drain(push_sender):
    app = create_app(
        Settings(PUSH_BACKEND="log", WS_HEARTBEAT_SECONDS=3600),
        push_sender=push_sender,
    )
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as alice:
            alice.send_json(
                {"type": "save_subscription", "data": {"userId": "bob", "subscription": {"endpoint": "e"}}}
            )
            alice.send_json(
                {
                    "type": "send_message",
                    "data": {"senderId": "alice", "receiverId": "bob", "body": "ping", "time": "t"},
                }
            )
            alice.send_json({"type": "ping"})
            assert alice.receive_json() == {"type": "pong", "data": {}}

    assert len(push_sender.calls) == 1
    subscription, payload = push_sender.calls[0]
    assert subscription == {"endpoint": "e"}
    assert payload["body"] == "ping"
    assert payload["title"] == "New message from alice"


def test_malformed_events_do_not_break_connection(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        assert ws.receive_json() == {"type": "error", "data": {"code": "invalid_payload"}}

        ws.send_json({"type": "send_message", "data": {"senderId": "alice"}})
        error = ws.receive_json()
        assert error["type"] == "error"
        assert error["data"]["code"] == "invalid_data"

        ws.send_json({"type": "teleport", "data": {}})
        assert ws.receive_json() == {
            "type": "error",
            "data": {"code": "unknown_type", "type": "teleport"},
        }

        _join(ws, "alice")
        assert ws.receive_json() == {"type": "update_online_users", "data": ["alice"]}

        _join(ws, "mallory")
        error = ws.receive_json()
        assert error["data"]["code"] == "already_bound"


def test_numeric_ids_are_accepted(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        alice.send_json({"type": "join", "data": {"userId": 42}})
        assert alice.receive_json() == {"type": "update_online_users", "data": ["42"]}
        _join(bob, "bob")
        bob.receive_json()
        alice.receive_json()
        alice.receive_json()

        bob.send_json(
            {
                "type": "send_message",
                "data": {"senderId": "bob", "receiverId": 42, "body": "hi", "time": 1},
            }
        )
        assert bob.receive_json()["type"] == "message_delivered"
        assert alice.receive_json()["type"] == "receive_message"
        assert alice.receive_json()["type"] == "notify"

        bob.send_json(
            {
                "type": "mark_seen",
                "data": {
                    "receiverId": "bob",
                    "seenMessages": [
                        {"id": "m1", "senderId": 42},
                        {"id": 1714, "senderId": "42"},
                    ],
                },
            }
        )
        first = alice.receive_json()
        second = alice.receive_json()
        assert (first["type"], first["data"]["messageId"]) == ("message_seen", "m1")
        assert (second["type"], second["data"]["messageId"]) == ("message_seen", "1714")


def test_binary_frame_gets_error_and_connection_survives(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_bytes(b"\x00\x01")
        assert ws.receive_json() == {"type": "error", "data": {"code": "invalid_payload"}}

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong", "data": {}}
