"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import WebSocket

from presence_relay.domain.value_objects.ids import ConnectionId
from presence_relay.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the live sockets of this process, keyed by connection handle.

    Implements application.ports.bus.ConnectionEmitter.
    """

    def __init__(self) -> None:
        self._connections: dict[ConnectionId, WebSocket] = {}

    async def connect(self, ws: WebSocket) -> ConnectionId:
        await ws.accept()
        handle = ConnectionId(uuid.uuid4().hex)
        self._connections[handle] = ws
        logger.debug("WS connected: %s (total=%d)", handle, len(self._connections))
        return handle

    def disconnect(self, handle: ConnectionId) -> None:
        if self._connections.pop(handle, None) is not None:
            logger.debug("WS disconnected: %s", handle)

    async def send(self, handle: ConnectionId, event_type: str, data: Any) -> None:
        """Send one event to one connection; unknown handles are ignored."""
        ws = self._connections.get(handle)
        if ws is None:
            return
        raw = WsOutbound(type=str(event_type), data=data).model_dump_json()
        try:
            await ws.send_text(raw)
        except Exception:
            logger.warning("WS send to %s failed, dropping socket", handle, exc_info=True)
            self.disconnect(handle)

    async def broadcast(
        self,
        event_type: str,
        data: Any,
        *,
        exclude: ConnectionId | None = None,
    ) -> None:
        """Send one event to every local connection except ``exclude``."""
        raw = WsOutbound(type=str(event_type), data=data).model_dump_json()
        dead: list[ConnectionId] = []
        for handle, ws in list(self._connections.items()):
            if handle == exclude:
                continue
            try:
                await ws.send_text(raw)
            except Exception:
                dead.append(handle)
        for handle in dead:
            logger.warning("WS broadcast to %s failed, dropping socket", handle)
            self.disconnect(handle)
