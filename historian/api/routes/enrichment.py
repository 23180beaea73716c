"""Administrative enrichment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from historian.enrichment.orchestrator import EnrichmentOrchestrator
from historian.llm.gemini import clear_model_cache
from historian.observability.logging import get_logger
from historian.services import get_orchestrator

router = APIRouter(prefix="/api/enrichment", tags=["enrichment"])
logger = get_logger(__name__)


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_enrichment_cache(
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Drop every cached AI summary and open panel (e.g. after switching the model or API key)."""
    orchestrator.clear_results()
    clear_model_cache()
    logger.info("Enrichment cache cleared via API")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
