"""
Learning API endpoints.

Learning records are enriched once, in the background, right after they are
created. Regenerate replaces all enrichment fields together.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from pydantic import BaseModel

from historian.api.models import SummaryResponse
from historian.enrichment.orchestrator import EnrichmentOrchestrator
from historian.observability.logging import get_logger
from historian.records import (
    Enrichment,
    LearningRecord,
    LearningRecordCreate,
    LearningRecordStore,
    LearningRecordUpdate,
)
from historian.services import get_learning_store, get_orchestrator

router = APIRouter(prefix="/api/learning", tags=["learning"])
logger = get_logger(__name__)


class LearningRecordResponse(BaseModel):
    """API response for a single learning record."""

    id: str
    title: str
    year_range: str
    facts: str
    created_at: str
    enrichment: Enrichment | None
    generating: bool = False

    @classmethod
    def from_record(cls, record: LearningRecord, generating: bool = False) -> LearningRecordResponse:
        return cls(
            id=record.id,
            title=record.title,
            year_range=record.year_range,
            facts=record.facts,
            created_at=record.created_at.isoformat(),
            enrichment=record.enrichment,
            generating=generating,
        )


class LearningListResponse(BaseModel):
    records: list[LearningRecordResponse]
    total: int


@router.get("", response_model=LearningListResponse)
async def list_learning(
    store: LearningRecordStore = Depends(get_learning_store),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> LearningListResponse:
    records = store.load_all()
    return LearningListResponse(
        records=[
            LearningRecordResponse.from_record(r, orchestrator.is_generating(r.id)) for r in records
        ],
        total=len(records),
    )


@router.post("", response_model=LearningRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_learning_record(
    request: LearningRecordCreate,
    background_tasks: BackgroundTasks,
    store: LearningRecordStore = Depends(get_learning_store),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> LearningRecordResponse:
    """
    Create a learning record and schedule its enrichment.

    The record is returned unenriched; enrichment lands in the store once the
    model replies.
    """
    record = store.create(request)
    background_tasks.add_task(orchestrator.enrich_new_learning_record, record)
    return LearningRecordResponse.from_record(record)


@router.get("/{record_id}", response_model=LearningRecordResponse)
async def get_learning_record(
    record_id: str,
    store: LearningRecordStore = Depends(get_learning_store),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> LearningRecordResponse:
    record = store.get(record_id)
    return LearningRecordResponse.from_record(record, orchestrator.is_generating(record_id))


@router.put("/{record_id}", response_model=LearningRecordResponse)
async def update_learning_record(
    record_id: str,
    request: LearningRecordUpdate,
    store: LearningRecordStore = Depends(get_learning_store),
) -> LearningRecordResponse:
    """Edit title, year range or facts. Existing enrichment is kept as is."""
    return LearningRecordResponse.from_record(store.update(record_id, request))


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_learning_record(
    record_id: str,
    store: LearningRecordStore = Depends(get_learning_store),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> Response:
    store.delete(record_id)
    orchestrator.forget_record(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{record_id}/regenerate", response_model=SummaryResponse)
async def regenerate_learning_enrichment(
    record_id: str,
    store: LearningRecordStore = Depends(get_learning_store),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> SummaryResponse:
    """Generate fresh enrichment; on success all four fields are replaced."""
    record = store.get(record_id)
    result = await orchestrator.regenerate(record)
    return SummaryResponse.from_result(record_id, orchestrator.panel_state(record_id), result)
