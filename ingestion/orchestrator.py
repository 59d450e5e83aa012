"""Ingestion orchestrator: the loop between a source and a sink.

``ingest_stream`` owns the run lifecycle:

- pulls chunks from the source one at a time and forwards each to the sink,
  waiting for ``sink.accept`` before the next pull (backpressure)
- calls ``sink.finalize`` after a clean run, ``sink.abort`` after any failure
- releases the source on every exit path
- reports bytes moved and elapsed time

There is no retry, timeout, or parallel delivery here. Chunk contents are
never inspected.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from enum import Enum
from typing import Any, Callable, Optional

from ingestion.exceptions import AbortError, ConfigurationError, SourceError
from ingestion.logging_config import log_exception, log_performance
from ingestion.options import IngestionOptions
from ingestion.result import IngestionResult
from ingestion.sinks.base import missing_sink_capabilities
from ingestion.tracing import trace_span

logger = logging.getLogger(__name__)


class IngestionState(str, Enum):
    """Lifecycle states of one ingestion run."""

    VALIDATING = "validating"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    DONE = "done"
    ABORTING = "aborting"
    FAILED = "failed"


async def _call(operation: Callable[..., Any], *args: Any) -> Any:
    """Invoke a sink/source operation, awaiting it when it returns an awaitable."""
    result = operation(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def validate_ingestion_params(
    source: Any, sink: Any, options: Optional[IngestionOptions] = None
) -> None:
    """Reject a run before any data moves.

    Raises:
        ConfigurationError: source or sink missing, sink lacking one of
            accept/finalize/abort, source lacking pull, or options of the
            wrong type
    """
    if source is None:
        raise ConfigurationError("source is required", key="source")
    if not callable(getattr(source, "pull", None)):
        raise ConfigurationError(
            f"source {type(source).__name__} does not implement pull(); "
            "wrap plain iterables in IterableSource",
            key="source",
        )
    if sink is None:
        raise ConfigurationError("sink is required", key="sink")
    missing = missing_sink_capabilities(sink)
    if missing:
        raise ConfigurationError(
            f"sink must implement all required methods, missing: {', '.join(missing)}",
            key="sink",
        )
    if options is not None and not isinstance(options, IngestionOptions):
        raise ConfigurationError(
            f"options must be IngestionOptions, got {type(options).__name__}",
            key="options",
        )


def _chunk_length(chunk: Any) -> int:
    if isinstance(chunk, (bytes, bytearray)):
        return len(chunk)
    if isinstance(chunk, memoryview):
        return chunk.nbytes
    raise SourceError(f"Source produced a {type(chunk).__name__}, expected bytes")


async def _abort_sink(sink: Any, error: BaseException) -> None:
    """Notify the sink of the failure; a failing abort is logged, never raised."""
    abort = getattr(sink, "abort", None)
    if not callable(abort):
        return
    try:
        with trace_span("ingestion.abort", error_type=type(error).__name__):
            await _call(abort, error)
    except BaseException as abort_exc:
        secondary = AbortError(
            "Sink failed to abort cleanly",
            primary_error=error,
            original_error=abort_exc,
        )
        log_exception(logger, str(secondary), abort_exc, sink_type=type(sink).__name__)


async def _release_source(source: Any) -> None:
    """Release the source unless it already was; failures are logged only."""
    if source is None or getattr(source, "released", False):
        return
    release = getattr(source, "release", None)
    if not callable(release):
        return
    try:
        await _call(release)
    except Exception as exc:
        log_exception(
            logger, "Failed to release source", exc, source_type=type(source).__name__
        )


async def ingest_stream(
    source: Any,
    sink: Any,
    options: Optional[IngestionOptions] = None,
) -> IngestionResult:
    """Move every chunk of ``source`` into ``sink``.

    Args:
        source: Object with ``pull()`` (None at end of data) and ``release()``
        sink: Object with ``accept(chunk)``, ``finalize()`` and ``abort(error)``
        options: Run options, carried through unmodified

    Returns:
        IngestionResult with the bytes delivered and the elapsed time

    Raises:
        ConfigurationError: invalid arguments, raised before any data is read
        Exception: whatever the source or sink raised, re-raised unchanged
            after ``sink.abort`` ran and the source was released
    """
    state = IngestionState.VALIDATING
    run_fields = {
        "source_type": type(source).__name__,
        "sink_type": type(sink).__name__,
    }
    try:
        validate_ingestion_params(source, sink, options)
        if options is not None and options.extras():
            logger.debug("Ingestion options: %s", options.extras(), extra=run_fields)

        state = IngestionState.STREAMING
        started = time.monotonic()
        total_bytes = 0
        chunk_count = 0
        with trace_span("ingestion.run", **run_fields):
            while True:
                chunk = await _call(source.pull)
                if chunk is None:
                    break
                total_bytes += _chunk_length(chunk)
                chunk_count += 1
                # Next pull waits for this accept: the sink paces the source.
                await _call(sink.accept, chunk)

            state = IngestionState.FINALIZING
            with trace_span("ingestion.finalize"):
                await _call(sink.finalize)
    # Cancellation counts as a failed run too.
    except BaseException as error:
        failed_in = state
        state = IngestionState.ABORTING
        logger.error(
            "Ingestion failed while %s: %s",
            failed_in.value,
            error,
            extra={"ingestion_state": failed_in.value, **run_fields},
        )
        await _abort_sink(sink, error)
        state = IngestionState.FAILED
        raise
    else:
        # The sink is finalized; nothing below may lead to abort.
        result = IngestionResult(
            total_bytes=total_bytes,
            duration=time.monotonic() - started,
            chunk_count=chunk_count,
        )
        state = IngestionState.DONE
        log_performance(
            logger,
            "ingestion",
            result.duration,
            total_bytes=result.total_bytes,
            chunk_count=result.chunk_count,
            **run_fields,
        )
        return result
    finally:
        await _release_source(source)


def ingest_stream_sync(
    source: Any,
    sink: Any,
    options: Optional[IngestionOptions] = None,
) -> IngestionResult:
    """Blocking wrapper around ``ingest_stream`` for scripts and the CLI."""
    return asyncio.run(ingest_stream(source, sink, options))
