"""Environment variable substitution for job file values.

Strings may reference ``${VAR_NAME}`` or ``${VAR_NAME:default_value}``.
Mappings and lists are walked recursively; other values pass through.
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict

from ingestion.exceptions import ConfigurationError

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def _join(parent: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{parent}[{key}]"
    return f"{parent}.{key}" if parent else str(key)


def _expand(text: str, field: str) -> str:
    def replacer(match: re.Match) -> str:
        var_name, default_value = match.group(1), match.group(2)
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if default_value is not None:
            return default_value
        where = f" (referenced by '{field}')" if field else ""
        raise ConfigurationError(
            f"Environment variable '{var_name}' is not set and no default provided{where}",
            key=var_name,
        )

    return _ENV_VAR_PATTERN.sub(replacer, text)


def substitute_env_vars(value: Any, field: str = "") -> Any:
    """Return ``value`` with every environment reference expanded.

    Args:
        value: String, mapping, list or scalar taken from a job file
        field: Dotted location of ``value`` in the job, used in error messages

    Raises:
        ConfigurationError: A referenced variable is unset and has no default;
            the message names the variable and the field that references it
    """
    if isinstance(value, str):
        return _expand(value, field)
    if isinstance(value, dict):
        return {k: substitute_env_vars(v, _join(field, k)) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item, _join(field, i)) for i, item in enumerate(value)]
    return value


def apply_env_substitution(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable substitution to an entire job config."""
    return substitute_env_vars(config)
