"""In-memory sink, handy for small payloads and tests."""

from __future__ import annotations

import logging
from typing import List, Optional

from ingestion.exceptions import SinkError

logger = logging.getLogger(__name__)


class MemorySink:
    """Collect accepted chunks in a list.

    Args:
        capacity: Optional maximum number of bytes to hold; a chunk that would
            exceed it raises SinkError and is not stored
    """

    sink_type = "memory"

    def __init__(self, capacity: Optional[int] = None) -> None:
        if capacity is not None and capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.capacity = capacity
        self.chunks: List[bytes] = []
        self._size = 0
        self.finalized = False
        self.aborted = False
        self.abort_error: Optional[BaseException] = None

    @property
    def size(self) -> int:
        return self._size

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)

    async def accept(self, chunk: bytes) -> None:
        if self.finalized or self.aborted:
            raise SinkError(
                "accept() called after the sink was closed",
                sink_type=self.sink_type,
                operation="accept",
            )
        data = bytes(chunk)
        if self.capacity is not None and self._size + len(data) > self.capacity:
            raise SinkError(
                f"Memory sink capacity of {self.capacity} bytes exceeded",
                sink_type=self.sink_type,
                operation="accept",
            )
        self.chunks.append(data)
        self._size += len(data)

    async def finalize(self) -> None:
        if self.finalized:
            raise SinkError(
                "finalize() called twice", sink_type=self.sink_type, operation="finalize"
            )
        self.finalized = True
        logger.debug("Memory sink finalized with %d bytes", self.size)

    async def abort(self, error: BaseException) -> None:
        self.aborted = True
        self.abort_error = error
        self.chunks.clear()
        self._size = 0
