"""
Tests for the Broadcaster
=========================
Ordering, failure isolation, cancellation, pacing and the worker pool.
"""
import asyncio

import pytest

from navbot.core.navigation.broadcaster import Broadcaster, BroadcastReport, IntervalLimiter

from .conftest import FakeTransport


def sent_to(transport):
    return [call[1] for call in transport.ops("send")]


class CancellingTransport(FakeTransport):
    """Sets the cancel event right after delivering to ``cancel_after``."""

    def __init__(self, cancel_event, cancel_after):
        super().__init__()
        self.cancel_event = cancel_event
        self.cancel_after = cancel_after

    async def send_message(self, chat_id, text, keyboard=None):
        message_id = await super().send_message(chat_id, text, keyboard)
        if chat_id == self.cancel_after:
            self.cancel_event.set()
        return message_id


# =============================================================================
# Sequential broadcast
# =============================================================================

class TestBroadcast:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failures_are_counted_and_skipped(self, transport):
        transport.failing_chats = {2}
        broadcaster = Broadcaster(transport, delay_seconds=0)

        sent = await broadcaster.broadcast([1, 2, 3], "News")

        assert sent == 2
        assert sent_to(transport) == [1, 2, 3]
        assert all(call[3] == "News" for call in transport.ops("send"))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_report(self, transport):
        transport.failing_chats = {2}
        report = await Broadcaster(transport, delay_seconds=0).run([1, 2, 3], "News")

        assert report == BroadcastReport(total=3, sent=2, failed=1, cancelled=False)
        assert report.attempted == 3
        assert report.summary() == "Sent to 2 of 3 users."

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_recipients(self, transport):
        report = await Broadcaster(transport, delay_seconds=0).run([], "News")
        assert report.summary() == "Sent to 0 of 0 users."
        assert transport.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_all_failing(self, transport):
        transport.failing_chats = {1, 2}
        assert await Broadcaster(transport, delay_seconds=0).broadcast([1, 2], "News") == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_accepts_any_iterable(self, transport):
        sent = await Broadcaster(transport, delay_seconds=0).broadcast(iter([5, 6]), "News")
        assert sent == 2
        assert sent_to(transport) == [5, 6]

    @pytest.mark.unit
    def test_invalid_concurrency(self, transport):
        with pytest.raises(ValueError):
            Broadcaster(transport, max_concurrency=0)


# =============================================================================
# Cancellation
# =============================================================================

class TestCancellation:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancel_stops_remaining_sends(self):
        cancel_event = asyncio.Event()
        transport = CancellingTransport(cancel_event, cancel_after=2)

        report = await Broadcaster(transport, delay_seconds=0).run([1, 2, 3, 4], "News", cancel_event)

        assert sent_to(transport) == [1, 2]
        assert report.sent == 2
        assert report.cancelled
        assert report.summary() == "Sent to 2 of 4 users. Broadcast was cancelled."

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, transport):
        cancel_event = asyncio.Event()
        cancel_event.set()

        report = await Broadcaster(transport, delay_seconds=0).run([1, 2], "News", cancel_event)

        assert transport.calls == []
        assert report.sent == 0
        assert report.cancelled

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unset_event_runs_to_completion(self, transport):
        report = await Broadcaster(transport, delay_seconds=0).run([1, 2], "News", asyncio.Event())
        assert report.sent == 2
        assert not report.cancelled


# =============================================================================
# Pacing and worker pool
# =============================================================================

class TestPacing:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_interval_limiter_spaces_slots(self):
        limiter = IntervalLimiter(0.02)
        loop = asyncio.get_running_loop()

        start = loop.time()
        for _ in range(4):
            await limiter.wait()
        elapsed = loop.time() - start

        # First slot is immediate, the next three wait one interval each.
        assert elapsed >= 0.055

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_zero_interval_does_not_wait(self):
        limiter = IntervalLimiter(0)
        loop = asyncio.get_running_loop()
        start = loop.time()
        for _ in range(100):
            await limiter.wait()
        assert loop.time() - start < 0.05

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pool_delivers_each_recipient_once(self, transport):
        transport.failing_chats = {4}
        broadcaster = Broadcaster(transport, delay_seconds=0, max_concurrency=3)

        report = await broadcaster.run(range(10), "News")

        assert sorted(sent_to(transport)) == list(range(10))
        assert report.sent == 9
        assert report.failed == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pool_larger_than_recipients(self, transport):
        report = await Broadcaster(transport, delay_seconds=0, max_concurrency=8).run([1, 2], "News")
        assert report.sent == 2
