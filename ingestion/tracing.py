from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace as otel_trace

_TRACER_NAME = "stream-ingestion"


def tracing_enabled() -> bool:
    val = os.environ.get("INGEST_TRACING", "0").lower()
    return val in ("1", "true", "yes", "on")


@contextmanager
def trace_span(name: str, **attributes: Any) -> Iterator[None]:
    """Open an OpenTelemetry span when INGEST_TRACING is enabled.

    Without a configured SDK the API tracer is itself a no-op, so enabling
    the flag is safe everywhere. Attribute values that are not primitives
    are stringified.
    """
    if not tracing_enabled():
        yield
        return
    tracer = otel_trace.get_tracer(_TRACER_NAME)
    clean = {
        key: value if isinstance(value, (str, bool, int, float)) else str(value)
        for key, value in attributes.items()
        if value is not None
    }
    with tracer.start_as_current_span(name, attributes=clean):
        yield
