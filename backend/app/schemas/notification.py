from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field


NotificationType = Literal[
    "ASSIGNMENT_CREATED",
    "SUBMISSION_GRADED",
    "ANNOUNCEMENT",
    "SESSION_LIVE",
    "MESSAGE",
    "CLASS_JOINED",
]


class Notification(BaseModel):
    # id/userId are set by the store that persisted the record
    id: Optional[str] = None
    userId: Optional[str] = None
    type: NotificationType
    content: str
    read: bool = False
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
