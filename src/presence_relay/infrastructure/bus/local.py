from __future__ import annotations

from typing import Any

from presence_relay.domain.value_objects.ids import ConnectionId
from presence_relay.infrastructure.ws.manager import ConnectionManager


class LocalEventBus:
    """Implements application.ports.bus.EventBus for a single process."""

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager

    async def broadcast(
        self,
        event_type: str,
        data: Any,
        *,
        exclude: ConnectionId | None = None,
    ) -> None:
        await self._manager.broadcast(event_type, data, exclude=exclude)
