"""Sink and source registries.

This module provides:
- register_sink / register_source: decorators mapping a type name to a factory
- list_sinks / list_sources: registered type names
- create_sink / create_source: build an adapter from its typed config
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Union

from ingestion.config.models import SinkConfig, SourceConfig
from ingestion.exceptions import ConfigurationError
from ingestion.sinks import FileSink, MemorySink, S3Sink, SlowSink
from ingestion.sources import FileSource

logger = logging.getLogger(__name__)

SinkFactory = Callable[[SinkConfig], Any]
SourceFactory = Callable[[SourceConfig], Any]

SINK_REGISTRY: Dict[str, SinkFactory] = {}
SOURCE_REGISTRY: Dict[str, SourceFactory] = {}


def _type_name(value: Union[str, Enum]) -> str:
    if isinstance(value, Enum):
        value = value.value
    return str(value).lower()


def register_sink(name: str) -> Callable[[SinkFactory], SinkFactory]:
    """Decorator to register a sink factory.

    Usage:
        @register_sink("my_sink")
        def my_sink_factory(config: SinkConfig) -> IngestionSink:
            return MySink(config.path)
    """

    def decorator(factory: SinkFactory) -> SinkFactory:
        SINK_REGISTRY[name.lower()] = factory
        return factory

    return decorator


def register_source(name: str) -> Callable[[SourceFactory], SourceFactory]:
    """Decorator to register a source factory."""

    def decorator(factory: SourceFactory) -> SourceFactory:
        SOURCE_REGISTRY[name.lower()] = factory
        return factory

    return decorator


def list_sinks() -> List[str]:
    """Return all registered sink identifiers."""
    return sorted(SINK_REGISTRY.keys())


def list_sources() -> List[str]:
    """Return all registered source identifiers."""
    return sorted(SOURCE_REGISTRY.keys())


def _lookup(registry: Dict[str, Any], kind: str, name: str) -> Any:
    factory = registry.get(name)
    if factory is None:
        available = ", ".join(sorted(registry)) or "none"
        raise ConfigurationError(
            f"{kind.capitalize()} type '{name}' is not available. Available {kind}s: {available}.",
            key=f"{kind}.type",
        )
    return factory


def create_sink(config: Union[SinkConfig, Dict[str, Any]]) -> Any:
    """Build a sink instance from a SinkConfig (or an equivalent dict)."""
    if not isinstance(config, SinkConfig):
        config = SinkConfig.model_validate(config)
    name = _type_name(config.type)
    factory = _lookup(SINK_REGISTRY, "sink", name)
    logger.debug("Creating %s sink", name)
    return factory(config)


def create_source(config: Union[SourceConfig, Dict[str, Any]]) -> Any:
    """Build a source instance from a SourceConfig (or an equivalent dict)."""
    if not isinstance(config, SourceConfig):
        config = SourceConfig.model_validate(config)
    name = _type_name(config.type)
    factory = _lookup(SOURCE_REGISTRY, "source", name)
    logger.debug("Creating %s source", name)
    return factory(config)


# =============================================================================
# Built-in factories
# =============================================================================


@register_sink("file")
def _file_sink_factory(config: SinkConfig) -> FileSink:
    return FileSink(config.path, atomic=config.atomic, fsync=config.fsync)  # type: ignore[arg-type]


@register_sink("memory")
def _memory_sink_factory(config: SinkConfig) -> MemorySink:
    return MemorySink(capacity=config.capacity)


@register_sink("slow")
def _slow_sink_factory(config: SinkConfig) -> SlowSink:
    downstream = create_sink(config.downstream) if config.downstream else None
    return SlowSink(delay_seconds=config.delay_seconds, downstream=downstream)


@register_sink("s3")
def _s3_sink_factory(config: SinkConfig) -> S3Sink:
    return S3Sink(
        config.bucket,  # type: ignore[arg-type]
        config.key,  # type: ignore[arg-type]
        part_size=config.part_size,
        endpoint_url=config.endpoint_url,
        region_name=config.region,
        max_attempts=config.max_attempts,
    )


@register_source("file")
def _file_source_factory(config: SourceConfig) -> FileSource:
    return FileSource(config.path, chunk_size=config.chunk_size)
