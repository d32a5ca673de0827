"""Hands push notifications to an external gateway through a Redis stream."""
from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class RedisStreamPushSender:
    """Implements application.ports.push.PushSender.

    The gateway reading ``stream`` owns VAPID signing and delivery; this side
    only enqueues.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        stream: str,
        *,
        maxlen: int | None = 10_000,
    ) -> None:
        self._redis = redis
        self._stream = stream
        self._maxlen = maxlen

    async def send(self, subscription: dict[str, Any], payload: dict[str, Any]) -> bool:
        fields = {
            "event_type": "push.notification",
            "subscription": json.dumps(subscription),
            "payload": json.dumps(payload),
        }
        try:
            entry_id = await self._redis.xadd(
                self._stream, fields, maxlen=self._maxlen, approximate=True,
            )
        except aioredis.RedisError:
            logger.exception("XADD to %s failed", self._stream)
            return False
        logger.debug("Queued push %s on %s", entry_id, self._stream)
        return True
