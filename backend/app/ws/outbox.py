from __future__ import annotations

import asyncio
import logging
from typing import Any

logger = logging.getLogger(__name__)


class Outbox:
    """Bounded FIFO of outbound frames for one WebSocket.

    ``put`` never blocks; a single writer (``run``) hands frames to the
    socket in order. Once closed, further frames are refused.
    """

    def __init__(self, websocket: Any, max_size: int = 256) -> None:
        self._websocket = websocket
        self._queue: asyncio.Queue[dict] = asyncio.Queue(maxsize=max_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, message: dict) -> bool:
        if self._closed:
            return False
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning("outbox full, dropping %s", message.get("event"))
            return False
        return True

    async def run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._websocket.send_json(message)
            except Exception as e:
                logger.warning("send failed, closing connection: %r", e)
                self._closed = True
                self._discard_pending()
                await self._close_socket()
                return
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        await self._queue.join()

    def close(self) -> None:
        self._closed = True
        self._discard_pending()

    async def _close_socket(self) -> None:
        # Ends the session's receive loop so its cleanup runs
        try:
            await self._websocket.close(code=1011)
        except Exception as e:
            logger.debug("close after send failure: %r", e)

    def _discard_pending(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._queue.task_done()
