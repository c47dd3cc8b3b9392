"""
Tests for the in-process event bus.
"""

from unittest.mock import AsyncMock

import pytest

from app.events.bus import EventBus


class TestEventBus:
    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers(self):
        bus = EventBus()
        handler = AsyncMock()
        bus.subscribe("topic", handler)

        await bus.publish("topic", {"x": 1})
        await bus.wait_idle()

        handler.assert_awaited_once_with({"x": 1})

    @pytest.mark.asyncio
    async def test_unsubscribed_handler_not_called(self):
        bus = EventBus()
        handler = AsyncMock()
        bus.subscribe("topic", handler)
        bus.unsubscribe("topic", handler)
        bus.unsubscribe("other", handler)

        await bus.publish("topic", {})
        await bus.wait_idle()

        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_handler_is_contained(self, caplog):
        bus = EventBus()
        bad = AsyncMock(side_effect=ValueError("boom"))
        good = AsyncMock()
        bus.subscribe("topic", bad)
        bus.subscribe("topic", good)

        await bus.publish("topic", 1)
        await bus.wait_idle()

        good.assert_awaited_once_with(1)
        assert "handler for topic=topic failed" in caplog.text
