"""Run an ingestion job described by a JobConfig."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Tuple

from ingestion.config.models import JobConfig, LoggingConfig
from ingestion.logging_config import parse_log_level, setup_logging
from ingestion.orchestrator import ingest_stream
from ingestion.registry import create_sink, create_source
from ingestion.result import IngestionResult

logger = logging.getLogger(__name__)


def apply_logging_config(log_cfg: Optional[LoggingConfig]) -> None:
    """Configure root logging from the job file's ``logging`` section."""
    if log_cfg is None:
        return
    setup_logging(
        level=parse_log_level(log_cfg.level),
        format_type=log_cfg.format,
        log_file=Path(log_cfg.file) if log_cfg.file else None,
    )


def build_job(config: JobConfig) -> Tuple[Any, Any]:
    """Create the (source, sink) pair of a job.

    The source is built last so a sink factory failure leaves nothing
    to release.
    """
    sink = create_sink(config.sink)
    source = create_source(config.source)
    return source, sink


async def run_job_async(config: JobConfig) -> IngestionResult:
    source, sink = build_job(config)
    logger.info(
        "Running job '%s': %s source -> %s sink", config.name, config.source.type, config.sink.type
    )
    return await ingest_stream(source, sink, config.options)


def run_job(config: JobConfig, configure_logging: bool = False) -> IngestionResult:
    """Build and run a job to completion.

    Args:
        config: Validated job configuration
        configure_logging: Apply the job's ``logging`` section first

    Raises:
        ConfigurationError: unknown source or sink type
        Exception: whatever the run raised, after abort and release
    """
    if configure_logging:
        apply_logging_config(config.logging)
    return asyncio.run(run_job_async(config))
