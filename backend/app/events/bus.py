from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Dict, Set


AsyncHandler = Callable[[Any], Coroutine[Any, Any, None]]

logger = logging.getLogger(__name__)

NOTIFICATION_DISPATCH = "notification:dispatch"
ROOM_BROADCAST = "room:broadcast"


class EventBus:
    """Simple in-process pub/sub event bus for a single-process server.

    - subscribe(topic, handler): register an async handler
    - unsubscribe(topic, handler): remove a handler
    - publish(topic, payload): schedule all handlers for that topic
    """

    def __init__(self) -> None:
        self._topic_to_handlers: Dict[str, Set[AsyncHandler]] = {}
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, topic: str, handler: AsyncHandler) -> None:
        handlers = self._topic_to_handlers.setdefault(topic, set())
        handlers.add(handler)

    def unsubscribe(self, topic: str, handler: AsyncHandler) -> None:
        handlers = self._topic_to_handlers.get(topic)
        if not handlers:
            return
        handlers.discard(handler)
        if not handlers:
            self._topic_to_handlers.pop(topic, None)

    async def publish(self, topic: str, payload: Any) -> None:
        # Snapshot to avoid mutation during iteration
        for handler in list(self._topic_to_handlers.get(topic, set())):
            task = asyncio.create_task(self._run(topic, handler, payload))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def wait_idle(self) -> None:
        """Wait for every handler scheduled so far to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _run(self, topic: str, handler: AsyncHandler, payload: Any) -> None:
        try:
            await handler(payload)
        except Exception:
            logger.exception("handler for topic=%s failed", topic)
