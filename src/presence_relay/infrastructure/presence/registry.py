"""In-process presence registry: user identity -> live connection handle."""
from __future__ import annotations

import logging
import threading

from presence_relay.domain.events.presence_changed import PresenceChanged
from presence_relay.domain.value_objects.ids import ConnectionId, UserId

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Single source of truth for presence.

    At most one handle per user; the most recent ``bind`` wins. Every public
    method runs under one lock and never awaits, so readers always see a
    consistent map.
    """

    def __init__(self) -> None:
        self._handles: dict[UserId, ConnectionId] = {}
        self._lock = threading.Lock()

    def bind(self, user_id: UserId, handle: ConnectionId) -> PresenceChanged | None:
        """Bind ``user_id`` to ``handle``.

        Returns an online event only when the user had no binding before.
        Overwriting an existing binding orphans the previous handle without
        re-announcing the user.
        """
        with self._lock:
            previous = self._handles.get(user_id)
            self._handles[user_id] = handle

        if previous is None:
            logger.debug("Bound %s -> %s", user_id, handle)
            return PresenceChanged(user_id=user_id, handle=handle, online=True)
        if previous != handle:
            logger.info("Rebound %s: %s -> %s", user_id, previous, handle)
        return None

    def unbind(
        self,
        handle: ConnectionId,
        user_id: UserId | None = None,
    ) -> UserId | None:
        """Remove the binding owned by ``handle``.

        With ``user_id`` this is a compare-and-remove on the exact pair, so a
        late disconnect of an overwritten handle leaves the newer binding in
        place. Returns the freed user id, or None.
        """
        with self._lock:
            if user_id is not None:
                if self._handles.get(user_id) != handle:
                    return None
                del self._handles[user_id]
                return user_id

            for uid, h in self._handles.items():
                if h == handle:
                    del self._handles[uid]
                    return uid
        return None

    def lookup(self, user_id: UserId) -> ConnectionId | None:
        with self._lock:
            return self._handles.get(user_id)

    def is_online(self, user_id: UserId) -> bool:
        with self._lock:
            return user_id in self._handles

    def snapshot(self) -> list[UserId]:
        """Currently bound identities, in first-bind order."""
        with self._lock:
            return list(self._handles)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)
