"""
Timeline API endpoints.

CRUD for timeline records (kept in chronological order by the store) and the
AI panel: view, regenerate, accept the enhanced description, close.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from historian.api.models import SummaryResponse
from historian.enrichment.orchestrator import EnrichmentOrchestrator
from historian.observability.logging import get_logger
from historian.records import (
    Era,
    TimelineRecord,
    TimelineRecordCreate,
    TimelineRecordStore,
    TimelineRecordUpdate,
)
from historian.services import get_orchestrator, get_timeline_store

router = APIRouter(prefix="/api/timeline", tags=["timeline"])
logger = get_logger(__name__)


# ============================================================================
# Request/Response Models
# ============================================================================


class TimelineRecordResponse(BaseModel):
    """API response for a single timeline record."""

    id: str
    year: int
    era: Era
    title: str
    description: str

    @classmethod
    def from_record(cls, record: TimelineRecord) -> TimelineRecordResponse:
        return cls(**record.model_dump())


class TimelineListResponse(BaseModel):
    records: list[TimelineRecordResponse]
    total: int


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=TimelineListResponse)
async def list_timeline(
    store: TimelineRecordStore = Depends(get_timeline_store),
) -> TimelineListResponse:
    """List timeline records, earliest first."""
    records = store.load_all()
    return TimelineListResponse(
        records=[TimelineRecordResponse.from_record(r) for r in records],
        total=len(records),
    )


@router.post("", response_model=TimelineRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_timeline_record(
    request: TimelineRecordCreate,
    store: TimelineRecordStore = Depends(get_timeline_store),
) -> TimelineRecordResponse:
    return TimelineRecordResponse.from_record(store.create(request))


@router.put("/{record_id}", response_model=TimelineRecordResponse)
async def update_timeline_record(
    record_id: str,
    request: TimelineRecordUpdate,
    store: TimelineRecordStore = Depends(get_timeline_store),
) -> TimelineRecordResponse:
    """Edit a record. Changing year or era moves it to its new position."""
    return TimelineRecordResponse.from_record(store.update(record_id, request))


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_timeline_record(
    record_id: str,
    store: TimelineRecordStore = Depends(get_timeline_store),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Delete a record and its cached summary. Unknown ids are ignored."""
    store.delete(record_id)
    orchestrator.forget_record(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{record_id}/summary", response_model=SummaryResponse)
async def view_summary(
    record_id: str,
    store: TimelineRecordStore = Depends(get_timeline_store),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> SummaryResponse:
    """
    Open the AI panel for a record.

    Served from the cache when possible; otherwise generates once. A failed
    generation is returned with succeeded=false and retried on the next view.
    """
    record = store.get(record_id)
    result = await orchestrator.open_panel(record)
    return SummaryResponse.from_result(record_id, orchestrator.panel_state(record_id), result)


@router.post("/{record_id}/summary/regenerate", response_model=SummaryResponse)
async def regenerate_summary(
    record_id: str,
    store: TimelineRecordStore = Depends(get_timeline_store),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> SummaryResponse:
    record = store.get(record_id)
    result = await orchestrator.regenerate(record)
    return SummaryResponse.from_result(record_id, orchestrator.panel_state(record_id), result)


@router.post("/{record_id}/accept-description", response_model=TimelineRecordResponse)
async def accept_description(
    record_id: str,
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> TimelineRecordResponse:
    """Replace the record's description with the AI rewritten description."""
    return TimelineRecordResponse.from_record(orchestrator.accept_enhanced_description(record_id))


@router.delete("/{record_id}/summary/session", status_code=status.HTTP_204_NO_CONTENT)
async def close_summary(
    record_id: str,
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Close the AI panel. A generation still in flight keeps running."""
    orchestrator.close_panel(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
