"""Sink that simulates slow I/O (a database, a congested network).

Each chunk is held for ``delay_seconds`` before ``accept`` returns, then
handed to an optional downstream sink. Used to exercise and demonstrate
backpressure: the orchestrator cannot pull faster than this sink accepts.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 0.2


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class SlowSink:
    sink_type = "slow"

    def __init__(
        self,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        downstream: Optional[Any] = None,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be non-negative")
        self.delay_seconds = delay_seconds
        self.downstream = downstream
        self.in_flight = 0
        self.max_in_flight = 0
        self.accepted_bytes = 0
        # (start, end) monotonic timestamps of every accept call
        self.accept_windows: List[tuple] = []
        self.finalized = False
        self.aborted = False

    async def accept(self, chunk: bytes) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        started = time.monotonic()
        try:
            await asyncio.sleep(self.delay_seconds)
            if self.downstream is not None:
                await _maybe_await(self.downstream.accept(chunk))
            self.accepted_bytes += len(chunk)
        finally:
            self.in_flight -= 1
            self.accept_windows.append((started, time.monotonic()))

    async def finalize(self) -> None:
        self.finalized = True
        if self.downstream is not None:
            await _maybe_await(self.downstream.finalize())
        logger.debug(
            "Slow sink finalized after %d chunks (%d bytes)",
            len(self.accept_windows),
            self.accepted_bytes,
        )

    async def abort(self, error: BaseException) -> None:
        self.aborted = True
        if self.downstream is not None:
            await _maybe_await(self.downstream.abort(error))
