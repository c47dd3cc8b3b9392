from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ChatMessage(BaseModel):
    """Server-stamped chat message as broadcast in ``receive_message``.

    Transient: built by the relay, serialized once and discarded.
    """

    id: str
    roomId: str
    senderId: str
    senderName: str
    content: str
    fileUrl: Optional[str] = None
    createdAt: str

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)
