"""Tests for the ingestion orchestrator run lifecycle."""

import asyncio
import logging
import time
from array import array

import pytest

from ingestion import (
    ConfigurationError,
    IngestionOptions,
    IngestionResult,
    IterableSource,
    SourceError,
    ingest_stream,
    ingest_stream_sync,
    validate_ingestion_params,
)
from tests.doubles import RecordingSink, RecordingSource, SyncRecordingSink


class TestScenarios:
    """Reference behaviours of a single run."""

    def test_happy_path_delivers_all_bytes_and_finalizes(self):
        source = RecordingSource([b"a", b"b"])
        sink = RecordingSink()

        result = asyncio.run(ingest_stream(source, sink))

        assert bytes(sink.received) == b"ab"
        assert sink.finalize_calls == 1
        assert sink.abort_calls == []
        assert result.total_bytes == 2
        assert result.chunk_count == 2
        assert source.release_calls == 1

    def test_sink_failure_aborts_and_reraises_same_error(self):
        error = RuntimeError("DATABASE_OFFLINE")
        source = RecordingSource([b"a", b"b"])
        sink = RecordingSink(accept_error=error)

        with pytest.raises(RuntimeError) as exc_info:
            asyncio.run(ingest_stream(source, sink))

        assert exc_info.value is error
        assert sink.abort_calls == [error]
        assert sink.finalize_calls == 0
        assert source.release_calls == 1
        # No pull after the failing accept
        assert source.pulls == 1

    def test_missing_sink_raises_before_any_call(self):
        source = RecordingSource([b"a"])

        with pytest.raises(ConfigurationError) as exc_info:
            asyncio.run(ingest_stream(source, None))

        assert exc_info.value.error_code == "CFG001"
        assert source.pulls == 0
        assert source.release_calls == 1

    def test_source_failure_mid_stream_aborts_and_reraises(self):
        error = IOError("disk vanished")
        source = RecordingSource([b"abc", b"def"], fail_after=1, error=error)
        sink = RecordingSink()

        with pytest.raises(OSError) as exc_info:
            asyncio.run(ingest_stream(source, sink))

        assert exc_info.value is error
        assert sink.accepted == [b"abc"]
        assert sink.abort_calls == [error]
        assert sink.finalize_calls == 0
        assert source.release_calls == 1

    def test_slow_sink_paces_the_source(self):
        delay = 0.05
        chunks = [b"x" * 10 for _ in range(5)]
        source = RecordingSource(chunks)
        sink = RecordingSink(delay=delay)

        started = time.monotonic()
        result = asyncio.run(ingest_stream(source, sink))
        elapsed = time.monotonic() - started

        assert sink.max_in_flight == 1
        assert result.total_bytes == 50
        assert elapsed >= len(chunks) * delay - 0.01
        assert result.duration >= len(chunks) * delay - 0.01
        # Each pull after the first waited for the previous accept's delay
        gaps = [b - a for a, b in zip(source.pull_times, source.pull_times[1:])]
        assert all(gap >= delay - 0.01 for gap in gaps)


class TestRunProperties:
    """Invariants that must hold for every run."""

    @pytest.mark.parametrize(
        "chunks",
        [
            [],
            [b""],
            [b"single"],
            [b"a", b"bb", b"ccc", b"dddd"],
            [bytes([i]) * (i + 1) for i in range(32)],
        ],
    )
    def test_order_and_byte_count_preserved(self, chunks):
        source = RecordingSource(chunks)
        sink = RecordingSink()

        result = asyncio.run(ingest_stream(source, sink))

        assert sink.accepted == chunks
        assert result.total_bytes == sum(len(c) for c in chunks)
        assert result.total_bytes == len(sink.received)
        assert result.chunk_count == len(chunks)

    @pytest.mark.parametrize(
        "source_kwargs,sink_kwargs",
        [
            ({}, {}),
            ({"fail_after": 0, "error": ValueError("boom")}, {}),
            ({"fail_after": 2, "error": ValueError("boom")}, {}),
            ({}, {"accept_error": KeyError("k"), "fail_on_chunk": 3}),
        ],
    )
    def test_exactly_one_terminal_call_and_single_release(self, source_kwargs, sink_kwargs):
        source = RecordingSource([b"1", b"2", b"3"], **source_kwargs)
        sink = RecordingSink(**sink_kwargs)

        try:
            asyncio.run(ingest_stream(source, sink))
        except Exception:
            pass

        terminal = [call for call in sink.calls if call[0] in ("finalize", "abort")]
        assert len(terminal) == 1
        assert source.release_calls == 1

    def test_finalize_failure_calls_abort_with_that_error(self):
        """A finalize that raises did not complete; abort follows it."""
        error = RuntimeError("flush failed")
        sink = RecordingSink(finalize_error=error)
        source = RecordingSource([b"data"])

        with pytest.raises(RuntimeError) as exc_info:
            asyncio.run(ingest_stream(source, sink))

        assert exc_info.value is error
        assert [call[0] for call in sink.calls] == ["accept", "finalize", "abort"]
        assert sink.abort_calls == [error]

    def test_counters_are_per_run(self):
        sink_one, sink_two = RecordingSink(), RecordingSink()

        async def run_both():
            return await asyncio.gather(
                ingest_stream(RecordingSource([b"aa", b"bb"]), sink_one),
                ingest_stream(RecordingSource([b"ccc"]), sink_two),
            )

        first, second = asyncio.run(run_both())

        assert first.total_bytes == 4
        assert second.total_bytes == 3


class TestAbortAndRelease:
    def test_abort_failure_is_logged_and_original_error_wins(self, caplog):
        primary = RuntimeError("DATABASE_OFFLINE")
        sink = RecordingSink(accept_error=primary, abort_error=ValueError("rollback failed"))
        source = RecordingSource([b"a"])

        with caplog.at_level(logging.ERROR, logger="ingestion.orchestrator"):
            with pytest.raises(RuntimeError) as exc_info:
                asyncio.run(ingest_stream(source, sink))

        assert exc_info.value is primary
        assert source.release_calls == 1
        abort_records = [r for r in caplog.records if "ABT001" in r.getMessage()]
        assert len(abort_records) == 1
        assert abort_records[0].exception_type == "ValueError"
        assert "DATABASE_OFFLINE" in abort_records[0].getMessage()

    def test_cancelled_abort_does_not_replace_original_error(self, caplog):
        primary = RuntimeError("disk full")
        sink = RecordingSink(accept_error=primary, abort_error=asyncio.CancelledError())
        source = RecordingSource([b"a"])

        with caplog.at_level(logging.ERROR, logger="ingestion.orchestrator"):
            with pytest.raises(RuntimeError) as exc_info:
                asyncio.run(ingest_stream(source, sink))

        assert exc_info.value is primary
        assert source.release_calls == 1
        abort_records = [r for r in caplog.records if "ABT001" in r.getMessage()]
        assert [r.exception_type for r in abort_records] == ["CancelledError"]

    def test_failure_after_finalize_never_aborts(self, monkeypatch):
        def broken_log_performance(*args, **kwargs):
            raise RuntimeError("metrics backend down")

        monkeypatch.setattr("ingestion.orchestrator.log_performance", broken_log_performance)
        sink = RecordingSink()
        source = RecordingSource([b"a"])

        with pytest.raises(RuntimeError, match="metrics backend down"):
            asyncio.run(ingest_stream(source, sink))

        assert sink.finalize_calls == 1
        assert sink.abort_calls == []
        assert source.release_calls == 1

    @pytest.mark.parametrize(
        "sink_kwargs, expected_state",
        [
            ({"finalize_error": RuntimeError("flush failed")}, "finalizing"),
            ({"accept_error": RuntimeError("write failed")}, "streaming"),
        ],
    )
    def test_failure_record_carries_ingestion_state(self, caplog, sink_kwargs, expected_state):
        sink = RecordingSink(**sink_kwargs)

        with caplog.at_level(logging.ERROR, logger="ingestion.orchestrator"):
            with pytest.raises(RuntimeError):
                asyncio.run(ingest_stream(RecordingSource([b"a"]), sink))

        records = [r for r in caplog.records if r.getMessage().startswith("Ingestion failed")]
        assert len(records) == 1
        assert records[0].ingestion_state == expected_state
        assert records[0].sink_type == "RecordingSink"

    def test_release_failure_does_not_replace_success(self, caplog):
        source = RecordingSource([b"ok"], release_error=OSError("close failed"))
        sink = RecordingSink()

        with caplog.at_level(logging.ERROR, logger="ingestion.orchestrator"):
            result = asyncio.run(ingest_stream(source, sink))

        assert result.total_bytes == 2
        assert sink.finalize_calls == 1
        assert "Failed to release source" in caplog.text

    def test_release_failure_does_not_replace_run_error(self):
        error = RuntimeError("accept failed")
        source = RecordingSource([b"a"], release_error=OSError("close failed"))
        sink = RecordingSink(accept_error=error)

        with pytest.raises(RuntimeError) as exc_info:
            asyncio.run(ingest_stream(source, sink))

        assert exc_info.value is error

    def test_already_released_source_is_not_released_again(self):
        source = RecordingSource([])
        asyncio.run(source.release())

        with pytest.raises(ConfigurationError):
            asyncio.run(ingest_stream(source, None))

        assert source.release_calls == 1

    def test_cancellation_aborts_sink_and_releases_source(self):
        class BlockingSource(RecordingSource):
            async def pull(self):
                if self.pulls:
                    await asyncio.Event().wait()
                return await super().pull()

        source = BlockingSource([b"first", b"never"])
        sink = RecordingSink()

        async def run_and_cancel():
            task = asyncio.ensure_future(ingest_stream(source, sink))
            while not sink.accepted:
                await asyncio.sleep(0.001)
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run_and_cancel())

        assert len(sink.abort_calls) == 1
        assert isinstance(sink.abort_calls[0], asyncio.CancelledError)
        assert sink.finalize_calls == 0
        assert source.release_calls == 1


class TestValidation:
    def test_missing_source(self):
        sink = RecordingSink()

        with pytest.raises(ConfigurationError, match="source is required"):
            asyncio.run(ingest_stream(None, sink))

        # The sink is valid, so it still hears about the failed run.
        assert len(sink.abort_calls) == 1
        assert sink.accepted == []

    def test_sink_missing_capability(self):
        class HalfSink:
            async def accept(self, chunk):
                pass

            async def abort(self, error):
                self.error = error

        sink = HalfSink()
        source = RecordingSource([b"a"])

        with pytest.raises(ConfigurationError, match="missing: finalize"):
            asyncio.run(ingest_stream(source, sink))

        assert isinstance(sink.error, ConfigurationError)
        assert source.pulls == 0
        assert source.release_calls == 1

    def test_plain_list_is_not_a_source(self):
        with pytest.raises(ConfigurationError, match="IterableSource"):
            validate_ingestion_params([b"a"], RecordingSink())

    def test_options_must_be_ingestion_options(self):
        with pytest.raises(ConfigurationError, match="IngestionOptions"):
            validate_ingestion_params(RecordingSource([]), RecordingSink(), {"retry": 3})

    def test_options_are_passed_through(self):
        options = IngestionOptions(label="nightly", priority=2)
        result = asyncio.run(ingest_stream(RecordingSource([b"x"]), RecordingSink(), options))

        assert result.total_bytes == 1
        assert options.extras() == {"label": "nightly", "priority": 2}


class TestChunkTypes:
    def test_memoryview_length_counts_bytes(self):
        view = memoryview(array("H", [1, 2, 3]))
        sink = RecordingSink()

        result = asyncio.run(ingest_stream(RecordingSource([view]), sink))

        assert result.total_bytes == 6
        assert len(sink.received) == 6

    def test_non_bytes_chunk_fails_the_run(self):
        sink = RecordingSink()

        with pytest.raises(SourceError, match="expected bytes"):
            asyncio.run(ingest_stream(RecordingSource(["text"]), sink))

        assert sink.accepted == []
        assert len(sink.abort_calls) == 1


def test_sync_sink_methods_are_supported():
    sink = SyncRecordingSink()

    result = ingest_stream_sync(IterableSource([b"he", b"llo"]), sink)

    assert isinstance(result, IngestionResult)
    assert bytes(sink.received) == b"hello"
    assert sink.finalized == 1
    assert sink.aborted == []


def test_success_logs_performance(caplog):
    with caplog.at_level(logging.INFO, logger="ingestion.orchestrator"):
        ingest_stream_sync(RecordingSource([b"abc"]), RecordingSink())

    records = [r for r in caplog.records if getattr(r, "operation", None) == "ingestion"]
    assert len(records) == 1
    assert records[0].total_bytes == 3
    assert records[0].chunk_count == 1
