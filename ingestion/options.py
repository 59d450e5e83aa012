"""Per-run ingestion options.

No option is interpreted by the orchestrator yet. Whatever a caller or a job
file puts here is carried through the run untouched and shows up in logs.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class IngestionOptions(BaseModel):
    """Extension point for run options; unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow", frozen=True)

    def extras(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})
