from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from app.schemas.notification import Notification
from app.ws.manager import RoomRouter


logger = logging.getLogger(__name__)

NOTIFICATION = "notification"


class NotificationDispatcher:
    """Server-side pushes: per-user notifications and class-wide events.

    Called in-process by the CRUD handlers after they have persisted their
    record; an offline user simply gets nothing pushed.
    """

    def __init__(self, router: RoomRouter, private_room_prefix: str = "user_") -> None:
        self._router = router
        self._prefix = private_room_prefix

    def private_room(self, user_id: str) -> str:
        return f"{self._prefix}{user_id}"

    def dispatch(self, user_id: str, notification: Union[Notification, Mapping[str, Any]]) -> int:
        if isinstance(notification, Notification):
            payload: Any = notification.model_dump(mode="json", exclude_none=True)
        else:
            payload = dict(notification)
        delivered = self._router.broadcast(self.private_room(user_id), NOTIFICATION, payload)
        if not delivered:
            logger.debug("user=%s offline, notification not pushed", user_id)
        return delivered

    def broadcast_to_room(self, room_id: str, event: str, payload: Any) -> int:
        return self._router.broadcast(room_id, event, payload)
