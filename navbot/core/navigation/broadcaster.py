"""
Broadcaster
===========

Sends one message to every known recipient.

- Recipients are tried in the order given.
- A failed recipient is counted and skipped, never aborting the batch.
- Sends are spaced by a fixed minimum interval to stay under the
  endpoint's rate limits.
- Setting the cancel event stops new sends; delivered messages stay.

One worker (sequential sends) is the default. ``max_concurrency`` above 1
runs a bounded pool of workers sharing the same interval limiter.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from ..foundation.exceptions import TransportError

logger = logging.getLogger(__name__)

DEFAULT_SEND_INTERVAL = 0.05


@dataclass
class BroadcastReport:
    """Aggregated outcome of one broadcast. Per-recipient errors are not kept."""
    total: int = 0
    sent: int = 0
    failed: int = 0
    cancelled: bool = False

    @property
    def attempted(self) -> int:
        return self.sent + self.failed

    def summary(self) -> str:
        text = f"Sent to {self.sent} of {self.total} users."
        if self.cancelled:
            text += " Broadcast was cancelled."
        return text


class IntervalLimiter:
    """Grants at most one slot per ``interval`` seconds."""

    def __init__(self, interval: float):
        self.interval = interval
        self._lock = asyncio.Lock()
        self._next_slot = 0.0

    async def wait(self) -> None:
        if self.interval <= 0:
            return
        async with self._lock:
            loop = asyncio.get_running_loop()
            delay = self._next_slot - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            self._next_slot = loop.time() + self.interval


class Broadcaster:
    """
    Fan-out of a text message over a MessagingEndpoint.

    Holds no state between runs; concurrent broadcasts each get their
    own report and limiter.
    """

    def __init__(
        self,
        transport,
        delay_seconds: float = DEFAULT_SEND_INTERVAL,
        max_concurrency: int = 1
    ):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.transport = transport
        self.delay_seconds = delay_seconds
        self.max_concurrency = max_concurrency

    async def broadcast(
        self,
        recipient_ids: Iterable[int],
        text: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> int:
        """Send ``text`` to every recipient and return the success count."""
        report = await self.run(recipient_ids, text, cancel_event)
        return report.sent

    async def run(
        self,
        recipient_ids: Iterable[int],
        text: str,
        cancel_event: Optional[asyncio.Event] = None
    ) -> BroadcastReport:
        recipients = list(recipient_ids)
        report = BroadcastReport(total=len(recipients))
        if not recipients:
            return report

        limiter = IntervalLimiter(self.delay_seconds)
        pending = iter(recipients)
        workers = min(self.max_concurrency, len(recipients))

        logger.info(f"Broadcast started: {report.total} recipients, {workers} worker(s)")
        await asyncio.gather(*(
            self._worker(pending, text, report, limiter, cancel_event)
            for _ in range(workers)
        ))
        logger.info(
            f"Broadcast finished: sent={report.sent} failed={report.failed} "
            f"total={report.total} cancelled={report.cancelled}"
        )
        return report

    async def _worker(
        self,
        pending: Iterator[int],
        text: str,
        report: BroadcastReport,
        limiter: IntervalLimiter,
        cancel_event: Optional[asyncio.Event]
    ) -> None:
        # Workers share one iterator, so each recipient is handed out once.
        for recipient_id in pending:
            if _is_cancelled(cancel_event):
                report.cancelled = True
                return
            await limiter.wait()
            if _is_cancelled(cancel_event):
                report.cancelled = True
                return

            if await self._deliver(recipient_id, text):
                report.sent += 1
            else:
                report.failed += 1

    async def _deliver(self, recipient_id: int, text: str) -> bool:
        try:
            await self.transport.send_message(recipient_id, text)
            return True
        except TransportError as e:
            logger.warning(f"Broadcast to {recipient_id} failed: {e}")
            return False


def _is_cancelled(cancel_event: Optional[asyncio.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()
