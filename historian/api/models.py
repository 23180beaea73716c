"""Pydantic response models shared by the Historian API routers.

Request bodies live beside the route that accepts them; the summary shape is
returned by both the timeline and learning routers.
"""

from __future__ import annotations

from pydantic import BaseModel

from historian.enrichment.types import EnrichmentResult, PanelState


class SummaryResponse(BaseModel):
    """AI panel content for one record."""

    record_id: str
    state: PanelState
    succeeded: bool
    narrative_text: str = ""
    rewritten_text: str = ""
    key_points_text: str | None = None
    chronological_events_text: str | None = None
    error_message: str | None = None

    @classmethod
    def from_result(
        cls, record_id: str, state: PanelState, result: EnrichmentResult
    ) -> SummaryResponse:
        return cls(record_id=record_id, state=state, **result.model_dump())
