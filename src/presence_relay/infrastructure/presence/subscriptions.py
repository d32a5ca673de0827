from __future__ import annotations

import logging
import threading
from typing import Any

from presence_relay.domain.value_objects.ids import UserId

logger = logging.getLogger(__name__)


class SubscriptionStore:
    """Push subscription descriptors per user. Entries never expire."""

    def __init__(self) -> None:
        self._subscriptions: dict[UserId, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def save(self, user_id: UserId, subscription: dict[str, Any]) -> None:
        with self._lock:
            replaced = user_id in self._subscriptions
            self._subscriptions[user_id] = dict(subscription)
        logger.info("Push subscription %s for %s", "replaced" if replaced else "saved", user_id)

    def get(self, user_id: UserId) -> dict[str, Any] | None:
        with self._lock:
            return self._subscriptions.get(user_id)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._subscriptions
