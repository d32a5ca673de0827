from __future__ import annotations

import logging
from typing import Iterable

from presence_relay.application.ports.bus import ConnectionEmitter
from presence_relay.application.ports.clock import Clock
from presence_relay.domain.entities.message import SeenEntry
from presence_relay.domain.value_objects.enums import OutboundEvent
from presence_relay.infrastructure.presence.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class SeenRelay:
    """Sends read receipts back to the original senders, in input order."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        emitter: ConnectionEmitter,
        clock: Clock,
        time_format: str = "%H:%M",
    ) -> None:
        self._registry = registry
        self._emitter = emitter
        self._clock = clock
        self._time_format = time_format

    async def relay(self, entries: Iterable[SeenEntry]) -> int:
        delivered = 0
        for entry in entries:
            handle = self._registry.lookup(entry.sender_id)
            if handle is None:
                logger.debug("Skipping receipt for %s: sender offline", entry.message_id)
                continue
            await self._emitter.send(
                handle,
                OutboundEvent.MESSAGE_SEEN,
                {
                    "messageId": entry.message_id,
                    "time": self._clock.now().strftime(self._time_format),
                },
            )
            delivered += 1
        return delivered
