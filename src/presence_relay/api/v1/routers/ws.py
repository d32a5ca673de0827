from __future__ import annotations

import asyncio
import logging
from typing import Any

import pydantic
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from presence_relay.application.exceptions import AlreadyBoundError, ValidationError
from presence_relay.container import RelayContainer
from presence_relay.domain.entities.message import ChatMessage, SeenEntry
from presence_relay.domain.entities.session import Session
from presence_relay.domain.value_objects.enums import OutboundEvent
from presence_relay.domain.value_objects.ids import ConnectionId, UserId
from presence_relay.infrastructure.ws.protocol import (
    CheckStatusPayload,
    JoinPayload,
    MarkSeenPayload,
    SaveSubscriptionPayload,
    SendMessagePayload,
    TypingPayload,
    WsInbound,
)
from presence_relay.services import presence_service
from presence_relay.services.typing_relay import relay_typing

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def ws_relay(websocket: WebSocket) -> None:
    relay: RelayContainer = websocket.app.state.relay
    interval: int = websocket.app.state.settings.WS_HEARTBEAT_SECONDS

    handle = await relay.manager.connect(websocket)
    session = Session(handle=handle)
    logger.info("Connection opened: %s", handle)

    heartbeat_task = asyncio.create_task(
        _heartbeat(relay, handle, interval), name=f"ws-heartbeat-{handle}",
    )
    try:
        await _read_loop(websocket, session, relay)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", handle)
    finally:
        heartbeat_task.cancel()
        relay.manager.disconnect(handle)
        await presence_service.leave(session, relay.registry, relay.broadcaster)
        logger.info("Connection closed: %s (user=%s)", handle, session.bound_user_id)


async def _heartbeat(relay: RelayContainer, handle: ConnectionId, interval: int) -> None:
    try:
        while True:
            await asyncio.sleep(interval)
            await relay.manager.send(handle, OutboundEvent.PONG, {})
    except asyncio.CancelledError:
        pass


async def _read_loop(ws: WebSocket, session: Session, relay: RelayContainer) -> None:
    while True:
        frame = await ws.receive()
        if frame["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(frame.get("code", 1000), frame.get("reason"))
        raw = frame.get("text")
        if raw is None:
            await _send_error(relay, session.handle, "invalid_payload")
            continue
        try:
            msg = WsInbound.model_validate_json(raw)
        except pydantic.ValidationError:
            await _send_error(relay, session.handle, "invalid_payload")
            continue

        handler = _HANDLERS.get(msg.type)
        if handler is None:
            await _send_error(relay, session.handle, "unknown_type", type=msg.type)
            continue

        try:
            await handler(session, relay, msg.data)
        except (pydantic.ValidationError, ValidationError) as exc:
            logger.debug("Rejected %s from %s: %s", msg.type, session.handle, exc)
            await _send_error(relay, session.handle, "invalid_data", detail=str(exc))
        except AlreadyBoundError as exc:
            await _send_error(relay, session.handle, "already_bound", detail=exc.detail)


async def _send_error(
    relay: RelayContainer,
    handle: ConnectionId,
    code: str,
    **extra: Any,
) -> None:
    await relay.manager.send(handle, OutboundEvent.ERROR, {"code": code, **extra})


async def _handle_ping(session: Session, relay: RelayContainer, data: dict) -> None:
    await relay.manager.send(session.handle, OutboundEvent.PONG, {})


async def _handle_join(session: Session, relay: RelayContainer, data: dict) -> None:
    payload = JoinPayload.model_validate(data)
    await presence_service.join(
        session, UserId(payload.user_id), relay.registry, relay.broadcaster,
    )


async def _handle_save_subscription(session: Session, relay: RelayContainer, data: dict) -> None:
    payload = SaveSubscriptionPayload.model_validate(data)
    presence_service.save_subscription(
        UserId(payload.user_id), payload.subscription, relay.subscriptions,
    )


async def _handle_send_message(session: Session, relay: RelayContainer, data: dict) -> None:
    payload = SendMessagePayload.model_validate(data)
    path = await relay.router.route(
        ChatMessage(
            sender_id=UserId(payload.sender_id),
            receiver_id=UserId(payload.receiver_id),
            body=payload.body,
            time=payload.time,
            sender_display_name=payload.sender_display_name,
        )
    )
    logger.debug("Message %s -> %s routed via %s", payload.sender_id, payload.receiver_id, path)


async def _handle_typing(session: Session, relay: RelayContainer, data: dict) -> None:
    payload = TypingPayload.model_validate(data)
    await relay_typing(
        UserId(payload.sender_id), UserId(payload.receiver_id), relay.registry, relay.manager,
    )


async def _handle_mark_seen(session: Session, relay: RelayContainer, data: dict) -> None:
    payload = MarkSeenPayload.model_validate(data)
    await relay.seen.relay(
        SeenEntry(message_id=m.id, sender_id=UserId(m.sender_id))
        for m in payload.seen_messages
    )


async def _handle_check_status(session: Session, relay: RelayContainer, data: dict) -> None:
    payload = CheckStatusPayload.model_validate(data)
    await relay.broadcaster.check_status(session.handle, UserId(payload.user_id))


_HANDLERS = {
    "ping": _handle_ping,
    "join": _handle_join,
    "save_subscription": _handle_save_subscription,
    "send_message": _handle_send_message,
    "typing": _handle_typing,
    "mark_seen": _handle_mark_seen,
    "check_user_status": _handle_check_status,
}
