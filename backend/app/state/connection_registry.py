from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Anything a connection's outbound events can be handed to without blocking."""

    def put(self, message: dict) -> bool: ...


@dataclass(eq=False)
class Connection:
    id: str
    sink: Sink
    user_id: Optional[str] = None
    rooms: Set[str] = field(default_factory=set)
    # room -> userId last announced via typing_start
    typing: Dict[str, str] = field(default_factory=dict)
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def send(self, event: str, payload: object) -> bool:
        return self.sink.put({"event": event, "payload": payload})


class ConnectionRegistry:
    """Live connections and their room memberships.

    In-memory, single event loop; every mutation runs to completion between
    awaits so the membership sets have a single writer.
    """

    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}
        self._room_to_members: Dict[str, Set[str]] = {}

    def on_connect(self, sink: Sink, user_id: Optional[str] = None) -> Connection:
        conn = Connection(id=uuid.uuid4().hex, sink=sink, user_id=user_id)
        self._connections[conn.id] = conn
        logger.info("connected conn=%s user=%s", conn.id, user_id)
        return conn

    def join(self, connection_id: str, room_id: str) -> bool:
        conn = self._connections.get(connection_id)
        if conn is None or room_id in conn.rooms:
            return False
        conn.rooms.add(room_id)
        self._room_to_members.setdefault(room_id, set()).add(connection_id)
        logger.info("conn=%s joined room=%s", connection_id, room_id)
        return True

    def leave(self, connection_id: str, room_id: str) -> bool:
        conn = self._connections.get(connection_id)
        if conn is None or room_id not in conn.rooms:
            return False
        conn.rooms.discard(room_id)
        conn.typing.pop(room_id, None)
        self._discard_member(room_id, connection_id)
        logger.info("conn=%s left room=%s", connection_id, room_id)
        return True

    def on_disconnect(self, connection_id: str) -> FrozenSet[str]:
        conn = self._connections.pop(connection_id, None)
        if conn is None:
            return frozenset()
        rooms = frozenset(conn.rooms)
        for room_id in rooms:
            self._discard_member(room_id, connection_id)
        conn.rooms.clear()
        logger.info("disconnected conn=%s rooms=%d", connection_id, len(rooms))
        return rooms

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def members(self, room_id: str) -> List[Connection]:
        """Snapshot of the room's connections, safe to iterate while mutating."""
        ids = self._room_to_members.get(room_id)
        if not ids:
            return []
        return [self._connections[cid] for cid in list(ids) if cid in self._connections]

    def rooms_of(self, connection_id: str) -> FrozenSet[str]:
        conn = self._connections.get(connection_id)
        return frozenset(conn.rooms) if conn else frozenset()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    @property
    def room_count(self) -> int:
        return len(self._room_to_members)

    def _discard_member(self, room_id: str, connection_id: str) -> None:
        members = self._room_to_members.get(room_id)
        if not members:
            return
        members.discard(connection_id)
        if not members:
            # Cleanup empty room sets to avoid unbounded growth
            self._room_to_members.pop(room_id, None)
