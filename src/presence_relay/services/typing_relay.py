from __future__ import annotations

from presence_relay.application.ports.bus import ConnectionEmitter
from presence_relay.domain.value_objects.enums import OutboundEvent
from presence_relay.domain.value_objects.ids import UserId
from presence_relay.infrastructure.presence.registry import ConnectionRegistry


async def relay_typing(
    sender_id: UserId,
    receiver_id: UserId,
    registry: ConnectionRegistry,
    emitter: ConnectionEmitter,
) -> bool:
    """Forward a typing signal; offline receivers are ignored."""
    handle = registry.lookup(receiver_id)
    if handle is None:
        return False
    await emitter.send(handle, OutboundEvent.TYPING, {"senderId": sender_id})
    return True
