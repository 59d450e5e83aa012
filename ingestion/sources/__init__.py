"""Chunk sources: the producer side of an ingestion run."""

from ingestion.sources.base import ChunkSource, IngestionSource
from ingestion.sources.file_source import DEFAULT_CHUNK_SIZE, FileSource
from ingestion.sources.iterable_source import IterableSource

__all__ = [
    "ChunkSource",
    "IngestionSource",
    "FileSource",
    "IterableSource",
    "DEFAULT_CHUNK_SIZE",
]
