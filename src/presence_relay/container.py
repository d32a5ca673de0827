"""Wires the relay components for one application instance."""
from __future__ import annotations

from dataclasses import dataclass

import redis.asyncio as aioredis

from presence_relay.application.ports.bus import EventBus
from presence_relay.application.ports.clock import Clock, SystemClock
from presence_relay.application.ports.push import PushSender
from presence_relay.config import Settings
from presence_relay.infrastructure.bus.local import LocalEventBus
from presence_relay.infrastructure.presence.registry import ConnectionRegistry
from presence_relay.infrastructure.presence.subscriptions import SubscriptionStore
from presence_relay.infrastructure.push.logging_sender import LoggingPushSender
from presence_relay.infrastructure.push.redis_stream import RedisStreamPushSender
from presence_relay.infrastructure.ws.manager import ConnectionManager
from presence_relay.services.background import BackgroundTasks
from presence_relay.services.message_router import MessageRouter
from presence_relay.services.presence_service import PresenceBroadcaster
from presence_relay.services.seen_relay import SeenRelay


@dataclass
class RelayContainer:
    manager: ConnectionManager
    registry: ConnectionRegistry
    subscriptions: SubscriptionStore
    bus: EventBus
    tasks: BackgroundTasks
    broadcaster: PresenceBroadcaster
    router: MessageRouter
    seen: SeenRelay


def build_container(
    settings: Settings,
    *,
    redis: aioredis.Redis | None = None,
    push_sender: PushSender | None = None,
    clock: Clock | None = None,
) -> RelayContainer:
    manager = ConnectionManager()
    registry = ConnectionRegistry()
    subscriptions = SubscriptionStore()
    tasks = BackgroundTasks()

    # Presence is process-local, so fan-out stays process-local too.
    bus: EventBus = LocalEventBus(manager)

    if push_sender is None:
        if settings.PUSH_BACKEND == "redis":
            assert redis is not None, "PUSH_BACKEND=redis needs a Redis client"
            push_sender = RedisStreamPushSender(redis, settings.PUSH_STREAM)
        else:
            push_sender = LoggingPushSender()

    return RelayContainer(
        manager=manager,
        registry=registry,
        subscriptions=subscriptions,
        bus=bus,
        tasks=tasks,
        broadcaster=PresenceBroadcaster(registry, bus, manager),
        router=MessageRouter(registry, subscriptions, manager, push_sender, tasks),
        seen=SeenRelay(registry, manager, clock or SystemClock(), settings.SEEN_TIME_FORMAT),
    )
