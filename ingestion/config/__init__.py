"""Job configuration: YAML loading, env substitution, typed models."""

from .env_substitution import apply_env_substitution, substitute_env_vars
from .loader import load_job_config, parse_job_config
from .models import JobConfig, LoggingConfig, SinkConfig, SinkType, SourceConfig, SourceType

__all__ = [
    "apply_env_substitution",
    "substitute_env_vars",
    "load_job_config",
    "parse_job_config",
    "JobConfig",
    "LoggingConfig",
    "SinkConfig",
    "SinkType",
    "SourceConfig",
    "SourceType",
]
