from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from app.core.config import Settings
from app.schemas.events import (
    InboundEvent,
    JoinRoom,
    LeaveRoom,
    SendMessage,
    TypingStart,
    TypingStop,
    decode_event,
)
from app.services.message_relay import MessageRelay
from app.services.notifier import NotificationDispatcher
from app.services.typing_tracker import TypingTracker
from app.state.connection_registry import Connection, ConnectionRegistry
from app.ws.outbox import Outbox


router = APIRouter()

logger = logging.getLogger(__name__)


def get_registry(websocket: WebSocket) -> ConnectionRegistry:
    return websocket.app.state.registry  # type: ignore[attr-defined]


def get_relay(websocket: WebSocket) -> MessageRelay:
    return websocket.app.state.relay  # type: ignore[attr-defined]


def get_typing(websocket: WebSocket) -> TypingTracker:
    return websocket.app.state.typing  # type: ignore[attr-defined]


def get_notifier(websocket: WebSocket) -> NotificationDispatcher:
    return websocket.app.state.notifier  # type: ignore[attr-defined]


def get_ws_settings(websocket: WebSocket) -> Settings:
    return websocket.app.state.settings  # type: ignore[attr-defined]


def handle_event(
    conn: Connection,
    event: InboundEvent,
    registry: ConnectionRegistry,
    relay: MessageRelay,
    tracker: TypingTracker,
) -> None:
    match event:
        case JoinRoom(payload=room_id):
            if registry.join(conn.id, room_id):
                conn.send("room_joined", {"roomId": room_id})
        case LeaveRoom(payload=room_id):
            if registry.leave(conn.id, room_id):
                conn.send("room_left", {"roomId": room_id})
        case SendMessage(payload=data):
            relay.relay(data)
        case TypingStart(payload=data):
            tracker.start(conn, data)
        case TypingStop(payload=data):
            tracker.stop(conn, data)


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    user_id: Optional[str] = Query(default=None, alias="userId"),
    registry: ConnectionRegistry = Depends(get_registry),
    relay: MessageRelay = Depends(get_relay),
    tracker: TypingTracker = Depends(get_typing),
    notifier: NotificationDispatcher = Depends(get_notifier),
    settings: Settings = Depends(get_ws_settings),
) -> None:
    await websocket.accept()
    outbox = Outbox(websocket, max_size=settings.outbox_max_size)
    conn = registry.on_connect(outbox, user_id=user_id or None)
    writer = asyncio.create_task(outbox.run())
    try:
        if conn.user_id:
            registry.join(conn.id, notifier.private_room(conn.user_id))
        conn.send("ready", {"connectionId": conn.id})
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                event, reason = None, "binary frames not supported"
            else:
                event, reason = decode_event(raw)
            if event is None:
                logger.warning("dropped frame conn=%s: %s", conn.id, reason)
                if settings.emit_errors:
                    conn.send("error", {"reason": reason})
                continue
            handle_event(conn, event, registry, relay, tracker)
    except WebSocketDisconnect:
        pass
    finally:
        rooms = registry.on_disconnect(conn.id)
        tracker.on_disconnect(conn, rooms)
        outbox.close()
        writer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await writer
