"""
Enrichment Orchestrator - decides between cached and freshly generated results.

Per record the AI panel moves through

    IDLE -> CHECKING -> CACHE_HIT
    IDLE -> CHECKING -> GENERATING -> {DONE, FAILED}

CACHE_HIT and DONE are both settled states; CACHE_HIT tells the viewer the
result came from the cache without a model call.

Sessions are keyed by record id only, so every caller of one process sees the
same panel (the deployment has a single user behind the access gate). At most
PANEL_SESSION_MAX sessions are kept; the least recently opened are dropped
first, which only costs a cache lookup on the next open.

Rules:
- Opening a panel checks the cache first; a hit never touches the network.
- At most one generation per record is outstanding; re-opening the panel (or
  a second viewer) joins the in-flight call instead of issuing another.
- Successful results are cached before they are returned. Failures are kept
  only in the session, so the next open retries.
- Regenerate skips the cache and always calls the model; for learning records
  the four enrichment fields are replaced together.
- Closing a panel never cancels generation; the cache write still lands.
- Clearing the cache also drops every panel session so nothing cached survives
  in memory.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from dataclasses import dataclass

from historian.config import PANEL_SESSION_MAX

from historian.enrichment.cache import EnrichmentCache
from historian.enrichment.client import EnrichmentClient
from historian.enrichment.types import EnrichmentResult, PanelState
from historian.errors import NotFound, ValidationError
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter, log_event
from historian.records.models import Enrichment, LearningRecord, TimelineRecord
from historian.records.repository import LearningRecordStore, TimelineRecordStore

logger = get_logger(__name__)

Record = TimelineRecord | LearningRecord
SETTLED_STATES = frozenset({PanelState.CACHE_HIT, PanelState.DONE})


@dataclass
class PanelSession:
    """What one open AI panel currently shows."""

    state: PanelState = PanelState.IDLE
    result: EnrichmentResult | None = None


class EnrichmentOrchestrator:
    """Coordinates EnrichmentCache, EnrichmentClient and the record stores. Holds no persistent state."""

    def __init__(
        self,
        cache: EnrichmentCache,
        client: EnrichmentClient,
        timeline_store: TimelineRecordStore,
        learning_store: LearningRecordStore,
        max_sessions: int = PANEL_SESSION_MAX,
    ) -> None:
        self.cache = cache
        self.client = client
        self.timeline_store = timeline_store
        self.learning_store = learning_store
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, PanelSession] = OrderedDict()
        self._inflight: dict[str, asyncio.Task[EnrichmentResult]] = {}

    # ------------------------------------------------------------------
    # Panel lifecycle
    # ------------------------------------------------------------------

    def panel_state(self, record_id: str) -> PanelState:
        session = self._sessions.get(record_id)
        return session.state if session else PanelState.IDLE

    def is_generating(self, record_id: str) -> bool:
        return record_id in self._inflight

    async def open_panel(self, record: Record) -> EnrichmentResult:
        """
        Show the AI panel for a record (view intent).

        Returns:
            The cached, joined or freshly generated result. A failed result is
            returned for display but not cached.

        Side Effects:
            - May call the text-generation endpoint (once per record at most concurrently)
            - Writes successful results to the cache (and learning enrichment to the store)
        """
        session = self._session(record.id)

        if session.state in SETTLED_STATES and session.result is not None:
            return session.result

        if record.id in self._inflight:
            session.state = PanelState.GENERATING
            counter("enrichment.orchestrator.joined")
            return await asyncio.shield(self._inflight[record.id])

        session.state = PanelState.CHECKING
        cached = self._cached_result(record)
        if cached is not None:
            session.state = PanelState.CACHE_HIT
            counter("enrichment.orchestrator.cache_hit")
            session.result = cached
            return cached

        session.state = PanelState.GENERATING
        return await asyncio.shield(self._start_generation(record))

    def close_panel(self, record_id: str) -> None:
        """Forget the panel session. An in-flight generation keeps running."""
        self._sessions.pop(record_id, None)

    async def regenerate(self, record: Record) -> EnrichmentResult:
        """
        Generate a fresh result regardless of the cache.

        Waits for any in-flight call first so only one call per record is
        outstanding, then always issues a new one.
        """
        while (pending := self._inflight.get(record.id)) is not None:
            await asyncio.shield(pending)

        session = self._session(record.id)
        session.state = PanelState.GENERATING
        counter("enrichment.orchestrator.regenerate")
        return await asyncio.shield(self._start_generation(record))

    async def enrich_new_learning_record(self, record: LearningRecord) -> EnrichmentResult | None:
        """
        Generate enrichment once for a just-created learning record.

        Returns None when the record is already enriched (never regenerated
        automatically).
        """
        if record.is_enriched:
            return None
        pending = self._inflight.get(record.id)
        if pending is not None:
            return await asyncio.shield(pending)
        return await asyncio.shield(self._start_generation(record))

    def accept_enhanced_description(self, record_id: str) -> TimelineRecord:
        """
        Replace a timeline record's description with its rewritten description.

        Raises:
            NotFound: If the timeline record does not exist
            ValidationError: If there is no successful result with rewritten text
        """
        self.timeline_store.get(record_id)

        session = self._sessions.get(record_id)
        result = session.result if session and session.result else self.cache.get(record_id)
        if result is None or not result.succeeded or not result.rewritten_text.strip():
            raise ValidationError("No enhanced description available to accept.")

        updated = self.timeline_store.replace_description(record_id, result.rewritten_text)
        log_event("enrichment.orchestrator.description_accepted", record_id=record_id)
        return updated

    def clear_results(self) -> None:
        """
        Empty the enrichment cache and every panel session.

        In-flight generations keep running and still cache their result.
        """
        self.cache.clear()
        self._sessions.clear()
        log_event("enrichment.orchestrator.cleared")

    def forget_record(self, record_id: str) -> None:
        """Drop session and cached result of a deleted record."""
        self.close_panel(record_id)
        self.cache.forget(record_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _session(self, record_id: str) -> PanelSession:
        session = self._sessions.get(record_id)
        if session is None:
            session = self._sessions[record_id] = PanelSession()
        self._sessions.move_to_end(record_id)
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)
        return session

    def _cached_result(self, record: Record) -> EnrichmentResult | None:
        cached = self.cache.get(record.id)
        if cached is not None and not cached.succeeded:
            # Failures may have been persisted by older data; they never suppress a retry
            logger.info("Ignoring cached failure for %s", record.id)
            cached = None

        if cached is None and isinstance(record, LearningRecord) and record.enrichment is not None:
            cached = EnrichmentResult.success(
                narrative_text=record.enrichment.narrative,
                rewritten_text=record.enrichment.organized_facts,
                key_points_text=record.enrichment.key_learning_points,
                chronological_events_text=record.enrichment.chronological_events,
            )
            self.cache.put(record.id, cached)
        return cached

    def _start_generation(self, record: Record) -> asyncio.Task[EnrichmentResult]:
        task = asyncio.get_running_loop().create_task(self._run_generation(record))
        self._inflight[record.id] = task
        return task

    async def _run_generation(self, record: Record) -> EnrichmentResult:
        try:
            try:
                result = await self._call_client(record)
            except Exception as e:
                logger.error("Enrichment for %s failed unexpectedly: %s", record.id, e)
                result = EnrichmentResult.failure("Failed to generate AI summary")

            if result.succeeded:
                self.cache.put(record.id, result)
                if isinstance(record, LearningRecord):
                    self._store_learning_enrichment(record.id, result)
                counter("enrichment.orchestrator.generated")
            else:
                counter("enrichment.orchestrator.failed")
                log_event("enrichment.orchestrator.failed", record_id=record.id)

            session = self._sessions.get(record.id)
            if session is not None and session.state is PanelState.GENERATING:
                session.state = PanelState.DONE if result.succeeded else PanelState.FAILED
                session.result = result
            return result
        finally:
            self._inflight.pop(record.id, None)

    async def _call_client(self, record: Record) -> EnrichmentResult:
        if isinstance(record, TimelineRecord):
            return await self.client.generate_event_summary(
                record.title, record.description, record.year, record.era.value
            )
        return await self.client.generate_learning_summary(record.title, record.facts, record.year_range)

    def _store_learning_enrichment(self, record_id: str, result: EnrichmentResult) -> None:
        try:
            self.learning_store.set_enrichment_fields(record_id, Enrichment.from_result(result))
        except NotFound:
            logger.info("Learning record %s was deleted before its enrichment landed", record_id)
