from __future__ import annotations

import logging
from typing import Any

from presence_relay.application.exceptions import ValidationError
from presence_relay.application.ports.bus import ConnectionEmitter
from presence_relay.application.ports.push import PushSender
from presence_relay.domain.entities.message import ChatMessage
from presence_relay.domain.value_objects.enums import DeliveryPath, OutboundEvent
from presence_relay.infrastructure.presence.registry import ConnectionRegistry
from presence_relay.infrastructure.presence.subscriptions import SubscriptionStore
from presence_relay.services.background import BackgroundTasks

logger = logging.getLogger(__name__)


def build_push_payload(message: ChatMessage) -> dict[str, Any]:
    name = message.sender_display_name or message.sender_id
    return {
        "title": f"New message from {name}",
        "body": message.body,
        "clickTarget": message.sender_id,
    }


class MessageRouter:
    """Resolves each message to a live connection, a push, or nothing.

    One pass per message: no retry, no queue. The sender always gets an
    accept-ack, which says nothing about whether the receiver got it.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        subscriptions: SubscriptionStore,
        emitter: ConnectionEmitter,
        push_sender: PushSender,
        tasks: BackgroundTasks,
    ) -> None:
        self._registry = registry
        self._subscriptions = subscriptions
        self._emitter = emitter
        self._push_sender = push_sender
        self._tasks = tasks

    async def route(self, message: ChatMessage) -> DeliveryPath:
        _validate(message)

        sender_handle = self._registry.lookup(message.sender_id)
        if sender_handle is not None:
            await self._emitter.send(
                sender_handle,
                OutboundEvent.MESSAGE_DELIVERED,
                {"receiverId": message.receiver_id, "time": message.time},
            )

        receiver_handle = self._registry.lookup(message.receiver_id)
        if receiver_handle is not None:
            await self._emitter.send(
                receiver_handle,
                OutboundEvent.RECEIVE_MESSAGE,
                {
                    "body": message.body,
                    "senderId": message.sender_id,
                    "time": message.time,
                    "senderDisplayName": message.sender_display_name,
                },
            )
            await self._emitter.send(
                receiver_handle,
                OutboundEvent.NOTIFY,
                {
                    "from": message.sender_display_name,
                    "body": message.body,
                    "time": message.time,
                },
            )
            return DeliveryPath.LIVE

        subscription = self._subscriptions.get(message.receiver_id)
        if subscription is not None:
            self._tasks.spawn(
                self._push(subscription, build_push_payload(message), message),
                name=f"push-{message.receiver_id}",
            )
            return DeliveryPath.PUSH

        logger.debug(
            "Dropped message %s -> %s: receiver offline and unsubscribed",
            message.sender_id,
            message.receiver_id,
        )
        return DeliveryPath.DROPPED

    async def _push(
        self,
        subscription: dict[str, Any],
        payload: dict[str, Any],
        message: ChatMessage,
    ) -> None:
        try:
            ok = await self._push_sender.send(subscription, payload)
        except Exception:
            logger.exception("Push to %s failed", message.receiver_id)
            return
        if not ok:
            logger.warning("Push to %s was rejected by the transport", message.receiver_id)


def _validate(message: ChatMessage) -> None:
    # An empty body is a message; only an absent one is rejected.
    missing = [
        name
        for name, value in (
            ("senderId", message.sender_id or None),
            ("receiverId", message.receiver_id or None),
            ("body", message.body),
            ("time", message.time),
        )
        if value is None
    ]
    if missing:
        raise ValidationError(f"missing required fields: {', '.join(missing)}")
