from __future__ import annotations

import logging
from typing import Iterable

from app.schemas.events import TypingStartPayload, TypingStopPayload
from app.state.connection_registry import Connection
from app.ws.manager import RoomRouter


logger = logging.getLogger(__name__)

USER_TYPING = "user_typing"
USER_STOPPED_TYPING = "user_stopped_typing"


class TypingTracker:
    """Relays start/stop typing signals to the other members of a room.

    No timeouts and no memory of who is typing, unless ``stop_on_disconnect``
    is set: then each connection's announced typers are remembered so a stop
    can be sent for them when the socket goes away.
    """

    def __init__(self, router: RoomRouter, stop_on_disconnect: bool = False) -> None:
        self._router = router
        self._stop_on_disconnect = stop_on_disconnect

    def start(self, conn: Connection, data: TypingStartPayload) -> int:
        if self._stop_on_disconnect:
            conn.typing[data.roomId] = data.user.userId
        return self._router.broadcast(
            data.roomId,
            USER_TYPING,
            data.user.model_dump(),
            exclude=conn.id,
        )

    def stop(self, conn: Connection, data: TypingStopPayload) -> int:
        conn.typing.pop(data.roomId, None)
        return self._router.broadcast(data.roomId, USER_STOPPED_TYPING, data.userId, exclude=conn.id)

    def on_disconnect(self, conn: Connection, rooms: Iterable[str]) -> int:
        """Send stops for rooms ``conn`` was still typing in. Call after it left them."""
        if not self._stop_on_disconnect or not conn.typing:
            return 0
        sent = 0
        rooms = set(rooms)
        for room_id, user_id in list(conn.typing.items()):
            if room_id not in rooms:
                continue
            logger.debug("synthesized typing stop room=%s user=%s", room_id, user_id)
            sent += self._router.broadcast(room_id, USER_STOPPED_TYPING, user_id, exclude=conn.id)
        conn.typing.clear()
        return sent
