from __future__ import annotations

from typing import Any, Protocol

from presence_relay.domain.value_objects.ids import ConnectionId


class ConnectionEmitter(Protocol):
    """Point-to-point send to one live connection."""

    async def send(self, handle: ConnectionId, event_type: str, data: Any) -> None: ...


class EventBus(Protocol):
    """Fan-out to every live connection, optionally skipping one."""

    async def broadcast(
        self,
        event_type: str,
        data: Any,
        *,
        exclude: ConnectionId | None = None,
    ) -> None: ...
