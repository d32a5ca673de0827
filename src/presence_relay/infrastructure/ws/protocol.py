"""WebSocket message envelope and inbound payload models."""
from __future__ import annotations

from typing import Any, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # join | send_message | typing | mark_seen | check_user_status | save_subscription | ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str
    data: Any = None


class _Payload(BaseModel):
    # User and message ids are opaque; clients may send them as numbers.
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class JoinPayload(_Payload):
    user_id: str = Field(alias="userId", min_length=1)


class CheckStatusPayload(_Payload):
    user_id: str = Field(alias="userId", min_length=1)


class SaveSubscriptionPayload(_Payload):
    user_id: str = Field(alias="userId", min_length=1)
    subscription: dict[str, Any]


class SendMessagePayload(_Payload):
    sender_id: str = Field(alias="senderId", min_length=1)
    receiver_id: str = Field(alias="receiverId", min_length=1)
    body: str = Field(validation_alias=AliasChoices("body", "message"))
    time: Union[int, float, str]
    sender_display_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("senderDisplayName", "senderName"),
    )


class TypingPayload(_Payload):
    sender_id: str = Field(alias="senderId", min_length=1)
    receiver_id: str = Field(alias="receiverId", min_length=1)


class SeenMessagePayload(_Payload):
    id: str
    sender_id: str = Field(alias="senderId", min_length=1)


class MarkSeenPayload(_Payload):
    receiver_id: str | None = Field(default=None, alias="receiverId")
    seen_messages: list[SeenMessagePayload] = Field(alias="seenMessages")
