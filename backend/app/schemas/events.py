from __future__ import annotations

import json
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError


RoomId = Annotated[str, Field(min_length=1)]


class TypingUser(BaseModel):
    userId: str = Field(min_length=1)
    name: str


class SendMessagePayload(BaseModel):
    roomId: RoomId
    senderId: str = Field(min_length=1)
    senderName: str
    content: str = Field(min_length=1)
    fileUrl: Optional[str] = None


class TypingStartPayload(BaseModel):
    roomId: RoomId
    user: TypingUser


class TypingStopPayload(BaseModel):
    roomId: RoomId
    userId: str = Field(min_length=1)


class JoinRoom(BaseModel):
    event: Literal["join_room"]
    payload: RoomId


class LeaveRoom(BaseModel):
    event: Literal["leave_room"]
    payload: RoomId


class SendMessage(BaseModel):
    event: Literal["send_message"]
    payload: SendMessagePayload


class TypingStart(BaseModel):
    event: Literal["typing_start"]
    payload: TypingStartPayload


class TypingStop(BaseModel):
    event: Literal["typing_stop"]
    payload: TypingStopPayload


InboundEvent = Annotated[
    Union[JoinRoom, LeaveRoom, SendMessage, TypingStart, TypingStop],
    Field(discriminator="event"),
]

_inbound = TypeAdapter(InboundEvent)


def decode_event(raw: str) -> Tuple[Optional[InboundEvent], str]:
    """Decode one client text frame into a typed inbound event.

    Returns ``(event, "")`` on success, ``(None, reason)`` when the frame must
    be dropped. Never raises for bad input.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        return None, "invalid json"
    if not isinstance(data, dict):
        return None, "frame must be an object"
    try:
        return _inbound.validate_python(data), ""
    except ValidationError as e:
        errors = e.errors()
        if errors and errors[0].get("type") in ("union_tag_invalid", "union_tag_not_found"):
            return None, f"unknown event {data.get('event')!r}"
        return None, f"invalid payload for {data.get('event')!r}"
