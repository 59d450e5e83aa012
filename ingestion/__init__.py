"""stream-ingestion: move byte chunks from a source to a sink with backpressure.

Usage:
    from ingestion import FileSink, IterableSource, ingest_stream

    result = await ingest_stream(IterableSource([b"a", b"b"]), FileSink("./out.bin"))
"""

from ingestion.exceptions import (
    AbortError,
    ConfigurationError,
    IngestionError,
    SinkError,
    SourceError,
)
from ingestion.options import IngestionOptions
from ingestion.orchestrator import (
    IngestionState,
    ingest_stream,
    ingest_stream_sync,
    validate_ingestion_params,
)
from ingestion.result import IngestionResult
from ingestion.sinks import FileSink, IngestionSink, MemorySink, S3Sink, SlowSink
from ingestion.sources import ChunkSource, FileSource, IngestionSource, IterableSource

__version__ = "0.1.0"

__all__ = [
    "ingest_stream",
    "ingest_stream_sync",
    "validate_ingestion_params",
    "IngestionState",
    "IngestionResult",
    "IngestionOptions",
    "IngestionSink",
    "IngestionSource",
    "ChunkSource",
    "FileSink",
    "MemorySink",
    "S3Sink",
    "SlowSink",
    "FileSource",
    "IterableSource",
    "IngestionError",
    "ConfigurationError",
    "SourceError",
    "SinkError",
    "AbortError",
]
