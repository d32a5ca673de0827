from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Server-local wall clock; read receipts carry local time of day."""

    def now(self) -> datetime:
        return datetime.now().astimezone()
