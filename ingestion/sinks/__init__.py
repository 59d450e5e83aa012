"""Sinks: destinations of an ingestion run.

Usage:
    from ingestion.sinks import FileSink, S3Sink

    sink = FileSink("./out/data.bin")
    sink = S3Sink("my-bucket", "landing/data.bin")
"""

from ingestion.sinks.base import SINK_CAPABILITIES, IngestionSink, missing_sink_capabilities
from ingestion.sinks.file_sink import FileSink
from ingestion.sinks.memory_sink import MemorySink
from ingestion.sinks.s3_sink import S3Sink
from ingestion.sinks.slow_sink import SlowSink

__all__ = [
    "IngestionSink",
    "SINK_CAPABILITIES",
    "missing_sink_capabilities",
    "FileSink",
    "MemorySink",
    "S3Sink",
    "SlowSink",
]
