from __future__ import annotations

from typing import Any, Protocol


class PushSender(Protocol):
    """Out-of-band notification transport.

    Returns False (or raises) on failure; callers treat both as non-fatal.
    """

    async def send(self, subscription: dict[str, Any], payload: dict[str, Any]) -> bool: ...
