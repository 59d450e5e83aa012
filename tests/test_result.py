import dataclasses

import pytest

from ingestion import IngestionResult


def test_derived_values():
    result = IngestionResult(total_bytes=2048, duration=2.0, chunk_count=4)

    assert result.duration_ms == 2000.0
    assert result.throughput_bytes_per_second == 1024.0
    assert result.to_dict() == {
        "total_bytes": 2048,
        "duration_seconds": 2.0,
        "chunk_count": 4,
        "throughput_bytes_per_second": 1024.0,
    }
    assert "2048 bytes in 4 chunks" in str(result)


def test_zero_duration_throughput():
    assert IngestionResult(total_bytes=10, duration=0.0).throughput_bytes_per_second == 0.0


@pytest.mark.parametrize("kwargs", [{"total_bytes": -1, "duration": 0.0}, {"total_bytes": 0, "duration": -0.5}])
def test_negative_values_rejected(kwargs):
    with pytest.raises(ValueError):
        IngestionResult(**kwargs)


def test_frozen():
    result = IngestionResult(total_bytes=1, duration=0.1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.total_bytes = 2
