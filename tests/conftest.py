"""Shared test fixtures."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pytest

from presence_relay.domain.entities.message import ChatMessage
from presence_relay.domain.value_objects.ids import ConnectionId, UserId
from presence_relay.infrastructure.presence.registry import ConnectionRegistry
from presence_relay.infrastructure.presence.subscriptions import SubscriptionStore
from presence_relay.services.background import BackgroundTasks
from presence_relay.services.message_router import MessageRouter
from presence_relay.services.presence_service import PresenceBroadcaster


def make_message(
    *,
    sender_id: str = "alice",
    receiver_id: str = "bob",
    body: str | None = "hello",
    time: Any = "10:42",
    sender_display_name: str | None = "Alice",
) -> ChatMessage:
    return ChatMessage(
        sender_id=UserId(sender_id),
        receiver_id=UserId(receiver_id),
        body=body,
        time=time,
        sender_display_name=sender_display_name,
    )


@dataclass
class RecordingEmitter:
    sent: list[tuple[str, str, Any]] = field(default_factory=list)

    async def send(self, handle: ConnectionId, event_type: str, data: Any) -> None:
        self.sent.append((handle, str(event_type), data))

    def events_for(self, handle: str) -> list[tuple[str, Any]]:
        return [(event, data) for h, event, data in self.sent if h == handle]


@dataclass
class RecordingBus:
    broadcasts: list[tuple[str, Any, str | None]] = field(default_factory=list)

    async def broadcast(
        self,
        event_type: str,
        data: Any,
        *,
        exclude: ConnectionId | None = None,
    ) -> None:
        self.broadcasts.append((str(event_type), data, exclude))

    def of_type(self, event_type: str) -> list[tuple[Any, str | None]]:
        return [(data, exclude) for event, data, exclude in self.broadcasts if event == event_type]


@dataclass
class FakePushSender:
    result: bool = True
    error: Exception | None = None
    calls: list[tuple[dict[str, Any], dict[str, Any]]] = field(default_factory=list)

    async def send(self, subscription: dict[str, Any], payload: dict[str, Any]) -> bool:
        self.calls.append((subscription, payload))
        if self.error is not None:
            raise self.error
        return self.result


@dataclass
class FixedClock:
    value: datetime = field(default_factory=lambda: datetime(2024, 5, 1, 9, 7, 30))

    def now(self) -> datetime:
        return self.value


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def subscriptions() -> SubscriptionStore:
    return SubscriptionStore()


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture
def push_sender() -> FakePushSender:
    return FakePushSender()


@pytest.fixture
def tasks() -> BackgroundTasks:
    return BackgroundTasks()


@pytest.fixture
def broadcaster(registry, bus, emitter) -> PresenceBroadcaster:
    return PresenceBroadcaster(registry, bus, emitter)


@pytest.fixture
def router(registry, subscriptions, emitter, push_sender, tasks) -> MessageRouter:
    return MessageRouter(registry, subscriptions, emitter, push_sender, tasks)
