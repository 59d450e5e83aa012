"""Tests for the job runner."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from ingestion import FileSource, MemorySink
from ingestion.config import parse_job_config
from ingestion.exceptions import ConfigurationError, SourceError
from ingestion.runner import apply_logging_config, build_job, run_job


def _job(source_path: Path, sink: dict, **extra) -> dict:
    return {"name": "test-job", "source": {"path": str(source_path), "chunk_size": 1000}, "sink": sink, **extra}


class TestBuildJob:
    def test_builds_source_and_sink(self, sample_file):
        config = parse_job_config(_job(sample_file, {"type": "memory"}))

        source, sink = build_job(config)

        assert isinstance(source, FileSource)
        assert isinstance(sink, MemorySink)
        assert source.chunk_size == 1000

    def test_unknown_sink_fails_before_source_exists(self, sample_file):
        config = parse_job_config(_job(sample_file, {"type": "nowhere"}))

        with patch("ingestion.runner.create_source") as create_source:
            with pytest.raises(ConfigurationError, match="Sink type 'nowhere'"):
                build_job(config)
        create_source.assert_not_called()


class TestRunJob:
    def test_file_to_file(self, sample_file, tmp_path):
        target = tmp_path / "out" / "copy.bin"
        config = parse_job_config(_job(sample_file, {"type": "file", "path": str(target)}))

        result = run_job(config)

        assert target.read_bytes() == sample_file.read_bytes()
        assert result.total_bytes == 10_000
        assert result.chunk_count == 10

    def test_slow_sink_into_file(self, sample_file, tmp_path):
        target = tmp_path / "slow.bin"
        config = parse_job_config(
            _job(
                sample_file,
                {
                    "type": "slow",
                    "delay_seconds": 0.001,
                    "downstream": {"type": "file", "path": str(target)},
                },
            )
        )

        result = run_job(config)

        assert target.read_bytes() == sample_file.read_bytes()
        assert result.chunk_count == 10

    def test_missing_source_file_raises_source_error(self, tmp_path):
        target = tmp_path / "never.bin"
        config = parse_job_config(_job(tmp_path / "missing.bin", {"type": "file", "path": str(target)}))

        with pytest.raises(SourceError):
            run_job(config)

        assert not target.exists()
        assert not Path(str(target) + ".partial").exists()

    def test_configure_logging_applies_job_section(self, sample_file, tmp_path, reset_logging):
        log_file = tmp_path / "job.log"
        config = parse_job_config(
            _job(
                sample_file,
                {"type": "memory"},
                logging={"level": "debug", "format": "json", "file": str(log_file)},
            )
        )

        run_job(config, configure_logging=True)

        assert logging.getLogger().level == logging.DEBUG
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "Performance: ingestion completed" in log_file.read_text()


def test_apply_logging_config_none_is_noop(reset_logging):
    root = logging.getLogger()
    before = list(root.handlers)

    apply_logging_config(None)

    assert root.handlers == before
