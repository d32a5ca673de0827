from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class LoggingPushSender:
    """Development PushSender: records the notification in the log only."""

    async def send(self, subscription: dict[str, Any], payload: dict[str, Any]) -> bool:
        logger.info(
            "Push to %s: %s",
            subscription.get("endpoint", "<no endpoint>"),
            payload.get("title"),
        )
        return True
