from __future__ import annotations

import logging
from typing import Optional

from fastapi.encoders import jsonable_encoder

from app.state.connection_registry import ConnectionRegistry


logger = logging.getLogger(__name__)


class RoomRouter:
    """Fans events out to the connections currently joined to a room.

    Delivery is enqueue-only: each member's outbox is handed the frame and
    the router moves on, so one slow socket never holds up another.
    At-most-once per recipient, no retries.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    def broadcast(
        self,
        room_id: str,
        event: str,
        payload: object,
        exclude: Optional[str] = None,
    ) -> int:
        """Deliver ``payload`` tagged ``event`` to every member except ``exclude``.

        Returns how many connections accepted the frame. An empty or unknown
        room is a no-op.
        """
        members = self._registry.members(room_id)
        if not members:
            return 0
        # Encode once so every member gets the same JSON-safe frame
        message = jsonable_encoder({"event": event, "payload": payload})
        delivered = 0
        for conn in members:
            if conn.id == exclude:
                continue
            if conn.sink.put(message):
                delivered += 1
            else:
                logger.debug("drop event=%s room=%s conn=%s", event, room_id, conn.id)
        return delivered

    def send_to(self, connection_id: str, event: str, payload: object) -> bool:
        conn = self._registry.get(connection_id)
        if conn is None:
            return False
        return conn.send(event, jsonable_encoder(payload))
