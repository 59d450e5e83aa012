from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ingestion.exceptions import ConfigurationError

from .env_substitution import apply_env_substitution
from .models import JobConfig

logger = logging.getLogger(__name__)


def _read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    logger.info("Loading job config from %s", path)

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {path}", config_path=str(path))

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            cfg = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Invalid YAML in config file: {exc}", config_path=str(path)
        ) from exc

    if not isinstance(cfg, dict):
        raise ConfigurationError(
            "Config must be a YAML dictionary/object", config_path=str(path)
        )
    return cfg


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def parse_job_config(
    raw: Dict[str, Any],
    *,
    config_path: Optional[str] = None,
    enable_env_substitution: bool = True,
) -> JobConfig:
    """Validate a job config dictionary into a JobConfig.

    Args:
        raw: Parsed config mapping
        config_path: Source file, used only in error messages
        enable_env_substitution: Substitute ${VAR} and ${VAR:default} first
    """
    if enable_env_substitution:
        try:
            raw = apply_env_substitution(raw)
        except ConfigurationError as exc:
            raise ConfigurationError(exc.message, config_path=config_path) from exc
    try:
        return JobConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid job config: {_format_validation_error(exc)}",
            config_path=config_path,
        ) from exc


def load_job_config(
    path: Union[str, Path], *, enable_env_substitution: bool = True
) -> JobConfig:
    """Load and validate a YAML job file.

    Raises:
        ConfigurationError: missing file, malformed YAML, unset environment
            variable, or a schema violation
    """
    raw = _read_yaml(path)
    return parse_job_config(
        raw, config_path=str(path), enable_env_substitution=enable_env_substitution
    )
