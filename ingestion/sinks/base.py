"""Sink contract consumed by the ingestion orchestrator.

Any object exposing ``accept``, ``finalize`` and ``abort`` is a sink; there
is no required base class. The orchestrator guarantees:

- ``accept(chunk)`` is never called again before the previous call returns.
- ``finalize()`` is called at most once, only after every chunk was accepted.
- ``abort(error)`` is called at most once, only when the run failed, and may
  arrive before any ``accept`` call (for example when validation failed).
- Exactly one of ``finalize`` / ``abort`` is called per run.

Implementations return from ``accept`` only once the chunk is handed off
(written, buffered within capacity, or enqueued). Suspending inside
``accept`` is how a sink applies backpressure.
"""

from __future__ import annotations

from typing import Any, List, Protocol, runtime_checkable

SINK_CAPABILITIES = ("accept", "finalize", "abort")


@runtime_checkable
class IngestionSink(Protocol):
    """Destination for chunks with an explicit success/failure lifecycle."""

    async def accept(self, chunk: bytes) -> None:
        """Take ownership of one chunk; may suspend to apply backpressure."""

    async def finalize(self) -> None:
        """Complete buffered work and release resources after a clean run."""

    async def abort(self, error: BaseException) -> None:
        """Best-effort cleanup after a failed run."""


def missing_sink_capabilities(sink: Any) -> List[str]:
    """Return the names of required sink operations that are absent or not callable."""
    return [name for name in SINK_CAPABILITIES if not callable(getattr(sink, name, None))]
