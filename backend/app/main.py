from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings, get_settings
from app.core.logging import configure_logging
from app.events.bus import NOTIFICATION_DISPATCH, ROOM_BROADCAST, EventBus
from app.services.message_relay import MessageRelay
from app.services.notifier import NotificationDispatcher
from app.services.typing_tracker import TypingTracker
from app.state.connection_registry import ConnectionRegistry
from app.ws.manager import RoomRouter
from app.ws.routes import router as ws_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logger = configure_logging(settings.log_level)

    app = FastAPI(title="Meetrix Realtime", version="0.1.0")
    app.state.settings = settings

    # One owned set of realtime state per app; handlers reach it via app.state
    registry = ConnectionRegistry()
    manager = RoomRouter(registry)
    notifier = NotificationDispatcher(manager, settings.private_room_prefix)
    app.state.registry = registry
    app.state.relay = MessageRelay(manager)
    app.state.typing = TypingTracker(manager, stop_on_disconnect=settings.typing_stop_on_disconnect)
    app.state.notifier = notifier
    app.state.event_bus = EventBus()

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "connections": registry.connection_count,
            "rooms": registry.room_count,
        }

    app.include_router(ws_router)

    async def _on_notification(payload: dict) -> None:
        user_id = payload.get("userId")
        notification = payload.get("notification")
        if not user_id or notification is None:
            logger.warning("notification:dispatch without userId/notification, ignored")
            return
        notifier.dispatch(user_id, notification)

    async def _on_room_broadcast(payload: dict) -> None:
        room_id = payload.get("roomId")
        event = payload.get("event")
        if not room_id or not event:
            logger.warning("room:broadcast without roomId/event, ignored")
            return
        notifier.broadcast_to_room(room_id, event, payload.get("payload"))

    app.state.event_bus.subscribe(NOTIFICATION_DISPATCH, _on_notification)
    app.state.event_bus.subscribe(ROOM_BROADCAST, _on_room_broadcast)

    logger.info("realtime app ready env=%s", settings.app_env)
    return app


app = create_app()


def serve() -> None:
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)
