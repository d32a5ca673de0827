from __future__ import annotations

import logging
from typing import Any

from presence_relay.application.exceptions import ValidationError
from presence_relay.application.ports.bus import ConnectionEmitter, EventBus
from presence_relay.domain.entities.session import Session
from presence_relay.domain.events.presence_changed import PresenceChanged
from presence_relay.domain.value_objects.enums import OutboundEvent
from presence_relay.domain.value_objects.ids import ConnectionId, UserId
from presence_relay.infrastructure.presence.registry import ConnectionRegistry
from presence_relay.infrastructure.presence.subscriptions import SubscriptionStore

logger = logging.getLogger(__name__)


class PresenceBroadcaster:
    """Projects registry mutations onto online/offline/roster events.

    The full roster goes out on every join and every disconnect, whether or
    not presence actually changed.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        bus: EventBus,
        emitter: ConnectionEmitter,
    ) -> None:
        self._registry = registry
        self._bus = bus
        self._emitter = emitter

    async def on_bind(self, handle: ConnectionId, change: PresenceChanged | None) -> None:
        if change is not None and change.online:
            await self._bus.broadcast(
                OutboundEvent.USER_ONLINE, {"userId": change.user_id}, exclude=handle,
            )
        await self._broadcast_roster()

    async def on_unbind(self, handle: ConnectionId, user_id: UserId | None) -> None:
        if user_id is not None:
            await self._bus.broadcast(
                OutboundEvent.USER_OFFLINE, {"userId": user_id}, exclude=handle,
            )
        await self._broadcast_roster(exclude=handle)

    async def check_status(self, requester: ConnectionId, user_id: UserId) -> bool:
        online = self._registry.is_online(user_id)
        event = OutboundEvent.USER_ONLINE if online else OutboundEvent.USER_OFFLINE
        await self._emitter.send(requester, event, {"userId": user_id})
        return online

    async def _broadcast_roster(self, *, exclude: ConnectionId | None = None) -> None:
        await self._bus.broadcast(
            OutboundEvent.UPDATE_ONLINE_USERS, self._registry.snapshot(), exclude=exclude,
        )


async def join(
    session: Session,
    user_id: UserId,
    registry: ConnectionRegistry,
    broadcaster: PresenceBroadcaster,
) -> None:
    """Bind the session to ``user_id`` and announce it.

    Raises AlreadyBoundError if the session already carries another identity.
    """
    if not user_id:
        raise ValidationError("userId is required")
    session.bind(user_id)
    change = registry.bind(user_id, session.handle)
    logger.info("%s joined on %s", user_id, session.handle)
    await broadcaster.on_bind(session.handle, change)


async def leave(
    session: Session,
    registry: ConnectionRegistry,
    broadcaster: PresenceBroadcaster,
) -> UserId | None:
    freed: UserId | None = None
    if session.bound_user_id is not None:
        freed = registry.unbind(session.handle, session.bound_user_id)
        if freed is None:
            logger.info(
                "Stale disconnect for %s on %s, newer binding kept",
                session.bound_user_id,
                session.handle,
            )
    await broadcaster.on_unbind(session.handle, freed)
    return freed


def save_subscription(
    user_id: UserId,
    subscription: dict[str, Any],
    store: SubscriptionStore,
) -> None:
    if not user_id:
        raise ValidationError("userId is required")
    if not subscription:
        raise ValidationError("subscription is required")
    store.save(user_id, subscription)
