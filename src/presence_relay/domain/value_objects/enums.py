from __future__ import annotations

from enum import StrEnum


class OutboundEvent(StrEnum):
    USER_ONLINE = "user_online"
    USER_OFFLINE = "user_offline"
    UPDATE_ONLINE_USERS = "update_online_users"
    MESSAGE_DELIVERED = "message_delivered"
    RECEIVE_MESSAGE = "receive_message"
    NOTIFY = "notify"
    TYPING = "typing"
    MESSAGE_SEEN = "message_seen"
    PONG = "pong"
    ERROR = "error"


class DeliveryPath(StrEnum):
    LIVE = "live"
    PUSH = "push"
    DROPPED = "dropped"
