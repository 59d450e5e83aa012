"""Result value returned by a successful ingestion run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class IngestionResult:
    """Bytes transferred and elapsed time of one completed run.

    Attributes:
        total_bytes: Sum of the lengths of every chunk the sink accepted
        duration: Elapsed wall time in seconds, measured on a monotonic clock
        chunk_count: Number of chunks delivered to the sink
    """

    total_bytes: int
    duration: float
    chunk_count: int = 0

    def __post_init__(self) -> None:
        if self.total_bytes < 0:
            raise ValueError("total_bytes must be non-negative")
        if self.duration < 0:
            raise ValueError("duration must be non-negative")

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000.0

    @property
    def throughput_bytes_per_second(self) -> float:
        if self.duration <= 0:
            return 0.0
        return self.total_bytes / self.duration

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_bytes": self.total_bytes,
            "duration_seconds": self.duration,
            "chunk_count": self.chunk_count,
            "throughput_bytes_per_second": self.throughput_bytes_per_second,
        }

    def __str__(self) -> str:
        return (
            f"IngestionResult: {self.total_bytes} bytes in {self.chunk_count} chunks "
            f"({self.duration_ms:.1f}ms)"
        )
