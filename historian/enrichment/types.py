"""
Module: types
Purpose: The enrichment result shared by client, cache, orchestrator and stores.
Dependencies: none (leaf module, safe to import from records.models)
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class EnrichmentResult(BaseModel):
    """
    Outcome of one generation attempt for one record.

    On success any section may be "" when the reply lacked its marker.
    On failure only ``error_message`` is meaningful.
    """

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    narrative_text: str = ""
    rewritten_text: str = ""
    key_points_text: str | None = None
    chronological_events_text: str | None = None
    error_message: str | None = None

    @classmethod
    def success(
        cls,
        narrative_text: str,
        rewritten_text: str,
        key_points_text: str | None = None,
        chronological_events_text: str | None = None,
    ) -> EnrichmentResult:
        return cls(
            succeeded=True,
            narrative_text=narrative_text,
            rewritten_text=rewritten_text,
            key_points_text=key_points_text,
            chronological_events_text=chronological_events_text,
        )

    @classmethod
    def failure(cls, error_message: str) -> EnrichmentResult:
        return cls(succeeded=False, error_message=error_message)


class RecordKind(str, Enum):
    """Which prompt template a record is enriched with."""

    TIMELINE = "timeline"
    LEARNING = "learning"


class PanelState(str, Enum):
    """Per-record state of an AI panel within one viewing session."""

    IDLE = "idle"
    CHECKING = "checking"
    CACHE_HIT = "cache_hit"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"
