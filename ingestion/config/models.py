"""Typed job configuration models using Pydantic for validation.

A job file names one source, one sink, optional run options, and optional
logging overrides:

    name: nightly-export
    source:
      type: file
      path: ./data/export.bin
      chunk_size: 1048576
    sink:
      type: s3
      bucket: ${LANDING_BUCKET}
      key: exports/export.bin
    logging:
      level: INFO
      format: json
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ingestion.options import IngestionOptions
from ingestion.sinks.s3_sink import DEFAULT_MAX_ATTEMPTS, DEFAULT_PART_SIZE, MIN_PART_SIZE
from ingestion.sinks.slow_sink import DEFAULT_DELAY_SECONDS
from ingestion.sources.file_source import DEFAULT_CHUNK_SIZE


class SinkType(str, Enum):
    file = "file"
    memory = "memory"
    slow = "slow"
    s3 = "s3"


class SourceType(str, Enum):
    file = "file"


class SourceConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str = SourceType.file.value
    path: str
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        return value.strip().lower()


class SinkConfig(BaseModel):
    """Sink settings; which fields apply depends on ``type``."""

    model_config = ConfigDict(extra="forbid")

    type: str = SinkType.file.value

    # file
    path: Optional[str] = None
    atomic: bool = True
    fsync: bool = False

    # memory
    capacity: Optional[int] = Field(default=None, ge=0)

    # slow
    delay_seconds: float = Field(default=DEFAULT_DELAY_SECONDS, ge=0)
    downstream: Optional[SinkConfig] = None

    # s3
    bucket: Optional[str] = None
    key: Optional[str] = None
    part_size: int = Field(default=DEFAULT_PART_SIZE, ge=MIN_PART_SIZE)
    endpoint_url: Optional[str] = None
    region: Optional[str] = None
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)

    # free-form settings for sinks registered outside this package
    settings: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        return value.strip().lower()

    @model_validator(mode="after")
    def _check_required_fields(self) -> "SinkConfig":
        if self.type == SinkType.file and not self.path:
            raise ValueError("file sink requires 'path'")
        if self.type == SinkType.s3 and not (self.bucket and self.key):
            raise ValueError("s3 sink requires 'bucket' and 'key'")
        if self.downstream is not None and self.type != SinkType.slow:
            raise ValueError("'downstream' is only supported by the slow sink")
        return self


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"
    format: Literal["human", "json", "simple"] = "human"
    file: Optional[str] = None

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return level


class JobConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = "ingestion"
    source: SourceConfig
    sink: SinkConfig
    options: IngestionOptions = Field(default_factory=IngestionOptions)
    logging: Optional[LoggingConfig] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


SinkConfig.model_rebuild()
