from __future__ import annotations

from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.services.message_relay import MessageRelay
from app.services.notifier import NotificationDispatcher
from app.services.typing_tracker import TypingTracker
from app.state.connection_registry import ConnectionRegistry
from app.ws.manager import RoomRouter


class RecordingSink:
    """Outbound sink that keeps every frame it is handed."""

    def __init__(self, accept: bool = True) -> None:
        self.frames: List[dict] = []
        self.accept = accept

    def put(self, message: dict) -> bool:
        if not self.accept:
            return False
        self.frames.append(message)
        return True

    @property
    def events(self) -> List[Tuple[str, object]]:
        return [(f["event"], f["payload"]) for f in self.frames]


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def router(registry: ConnectionRegistry) -> RoomRouter:
    return RoomRouter(registry)


@pytest.fixture
def relay(router: RoomRouter) -> MessageRelay:
    return MessageRelay(router)


@pytest.fixture
def typing_tracker(router: RoomRouter) -> TypingTracker:
    return TypingTracker(router)


@pytest.fixture
def notifier(router: RoomRouter) -> NotificationDispatcher:
    return NotificationDispatcher(router)


@pytest.fixture
def connect(registry: ConnectionRegistry):
    """Open a registry connection backed by a RecordingSink."""

    def _connect(user_id=None, accept=True):
        sink = RecordingSink(accept=accept)
        conn = registry.on_connect(sink, user_id=user_id)
        return conn, sink

    return _connect


@pytest.fixture
def settings() -> Settings:
    return Settings(log_level="warning")


@pytest.fixture
def client(settings: Settings):
    # Context manager keeps one event loop for every websocket in the test
    with TestClient(create_app(settings)) as c:
        yield c
