"""Source contract consumed by the ingestion orchestrator.

A source produces byte chunks on demand. ``pull()`` suspends until the next
chunk is ready and returns ``None`` once the data is exhausted; read failures
are raised, never returned. ``release()`` frees whatever the source holds and
is safe to call any number of times, before, during or after consumption.

Sources must only produce when pulled. That is what carries the sink's pace
back to the upstream producer.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Optional, Protocol, runtime_checkable

from ingestion.exceptions import SourceError

logger = logging.getLogger(__name__)


@runtime_checkable
class IngestionSource(Protocol):
    """Pull-based producer of ordered byte chunks."""

    @property
    def released(self) -> bool: ...

    async def pull(self) -> Optional[bytes]: ...

    async def release(self) -> None: ...


class ChunkSource(ABC):
    """Convenience base implementing the release guard of the source contract.

    Subclasses implement ``_read_next`` and, when they hold resources,
    ``_close``. Both run at most once per call of ``pull`` / ``release``.
    """

    source_type = "custom"

    def __init__(self) -> None:
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def pull(self) -> Optional[bytes]:
        if self._released:
            raise SourceError(
                "Cannot pull from a released source", source_type=self.source_type
            )
        return await self._read_next()

    async def release(self) -> None:
        if self._released:
            return
        self._released = True
        logger.debug("Releasing %s source", self.source_type)
        await self._close()

    @abstractmethod
    async def _read_next(self) -> Optional[bytes]:
        """Return the next chunk, or None when the source is exhausted."""

    async def _close(self) -> None:
        return None

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.pull()
        if chunk is None:
            raise StopAsyncIteration
        return chunk

    async def __aenter__(self) -> "ChunkSource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.release()
