from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Work = Callable[[], Awaitable[Any]]
Sleep = Callable[[float], Awaitable[Any]]


@dataclass(slots=True)
class QueuedRequest:
    work: Work
    future: asyncio.Future


@dataclass(slots=True)
class RequestQueue:
    """FIFO work queue drained by a single worker with a minimum gap.

    Only one unit of work runs at a time; after each unit, and only if more
    work is waiting, the worker sleeps `min_interval_s` before the next one.
    A unit enqueued after the queue went idle starts immediately, so callers
    that await each result before enqueuing the next get no spacing.
    """

    min_interval_s: float = 0.025
    sleep: Sleep = asyncio.sleep

    _pending: deque[QueuedRequest] = field(default_factory=deque, init=False, repr=False)
    _draining: bool = field(default=False, init=False, repr=False)
    _worker: asyncio.Task | None = field(default=None, init=False, repr=False)

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def draining(self) -> bool:
        return self._draining

    def enqueue(self, work: Work) -> asyncio.Future:
        """Queue a unit of work and return a future for its result."""

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending.append(QueuedRequest(work=work, future=future))
        if not self._draining and (self._worker is None or self._worker.done()):
            self._worker = asyncio.create_task(self.drain())
        return future

    async def drain(self) -> None:
        if self._draining:
            return

        self._draining = True
        try:
            while self._pending:
                request = self._pending.popleft()
                try:
                    result = await request.work()
                except Exception as exc:
                    logger.warning("Queued request failed: %s", exc, exc_info=True)
                    if not request.future.done():
                        request.future.set_exception(exc)
                else:
                    if not request.future.done():
                        request.future.set_result(result)

                if self._pending:
                    await self.sleep(self.min_interval_s)
        finally:
            self._draining = False
