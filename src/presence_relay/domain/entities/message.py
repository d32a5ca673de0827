from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from presence_relay.domain.value_objects.ids import UserId

# Client-supplied timestamp, echoed back untouched.
MessageTime = Union[str, int, float]


@dataclass(frozen=True, slots=True)
class ChatMessage:
    sender_id: UserId
    receiver_id: UserId
    body: str | None
    time: MessageTime | None
    sender_display_name: str | None = None


@dataclass(frozen=True, slots=True)
class SeenEntry:
    message_id: str
    sender_id: UserId
