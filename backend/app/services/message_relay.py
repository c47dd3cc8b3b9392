from __future__ import annotations

import logging
import secrets
import time
from datetime import datetime, timezone
from typing import Optional

from app.schemas.chat import ChatMessage
from app.schemas.events import SendMessagePayload
from app.ws.manager import RoomRouter


logger = logging.getLogger(__name__)

RECEIVE_MESSAGE = "receive_message"


def new_message_id() -> str:
    # Millisecond clock plus 64 random bits keeps ids apart within one tick
    return f"msg_{int(time.time() * 1000)}_{secrets.token_hex(8)}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MessageRelay:
    """Stamps inbound chat messages and broadcasts them to the whole room.

    The sender is not excluded: it renders the server's copy, same as everyone
    else. Nothing is stored.
    """

    def __init__(self, router: RoomRouter) -> None:
        self._router = router

    def stamp(self, data: SendMessagePayload) -> ChatMessage:
        return ChatMessage(
            id=new_message_id(),
            roomId=data.roomId,
            senderId=data.senderId,
            senderName=data.senderName,
            content=data.content,
            fileUrl=data.fileUrl,
            createdAt=utc_now_iso(),
        )

    def relay(self, data: SendMessagePayload) -> Optional[ChatMessage]:
        if not data.roomId or not data.content:
            return None
        message = self.stamp(data)
        delivered = self._router.broadcast(data.roomId, RECEIVE_MESSAGE, message.to_wire())
        logger.debug("message %s room=%s delivered=%d", message.id, data.roomId, delivered)
        return message
