"""
Enrichment cache - at most one stored EnrichmentResult per record id.

The persisted mapping (local storage key ``ai_summaries``) is authoritative.
The in-memory index only saves a storage read within a process; a miss there
always falls through to storage, since the index starts empty after restart.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from historian.config import ENRICHMENT_STORAGE_KEY
from historian.enrichment.types import EnrichmentResult
from historian.errors import StorageCorruption
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter, log_event
from historian.storage import LocalStorage

logger = get_logger(__name__)


class EnrichmentCache:
    """Durable id -> EnrichmentResult mapping with a per-process index."""

    def __init__(self, storage: LocalStorage | None = None, name: str = "enrichment") -> None:
        self.storage = storage or LocalStorage()
        self.name = name
        self._index: dict[str, EnrichmentResult] = {}

    def _read_persisted(self) -> dict[str, dict]:
        try:
            raw = self.storage.read_json(ENRICHMENT_STORAGE_KEY)
        except StorageCorruption as e:
            logger.error("Treating enrichment cache as empty: %s", e)
            counter(f"cache.{self.name}.corrupt")
            return {}
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.error("Treating enrichment cache as empty: expected a mapping")
            counter(f"cache.{self.name}.corrupt")
            return {}
        return raw

    def has(self, record_id: str) -> bool:
        return self.get(record_id) is not None

    def get(self, record_id: str) -> EnrichmentResult | None:
        """
        Return the stored result for record_id, or None.

        Side Effects:
            - Hydrates the in-memory index from storage on an index miss
            - Increments cache.{name}.hit / .miss counters
        """
        cached = self._index.get(record_id)
        if cached is not None:
            counter(f"cache.{self.name}.hit")
            return cached

        payload = self._read_persisted().get(record_id)
        if payload is None:
            counter(f"cache.{self.name}.miss")
            return None

        try:
            result = EnrichmentResult.model_validate(payload)
        except PydanticValidationError as e:
            logger.warning("Ignoring unreadable cached result for %s: %s", record_id, e)
            counter(f"cache.{self.name}.miss")
            return None

        self._index[record_id] = result
        counter(f"cache.{self.name}.hit")
        return result

    def put(self, record_id: str, result: EnrichmentResult) -> None:
        """
        Store result for record_id, replacing any previous one (no merge).

        Side Effects:
            - Rewrites the persisted mapping
            - Updates the in-memory index
        """
        persisted = self._read_persisted()
        persisted[record_id] = result.model_dump(mode="json")
        self.storage.write_json(ENRICHMENT_STORAGE_KEY, persisted)
        self._index[record_id] = result
        counter(f"cache.{self.name}.write")

    def forget(self, record_id: str) -> None:
        """Drop the stored result for one record (used when the record is deleted)."""
        self._index.pop(record_id, None)
        persisted = self._read_persisted()
        if persisted.pop(record_id, None) is not None:
            self.storage.write_json(ENRICHMENT_STORAGE_KEY, persisted)
            counter(f"cache.{self.name}.invalidate")

    def clear(self) -> None:
        """
        Wipe the index and the persisted mapping (e.g. after the API key changes).

        Side Effects:
            - Removes the ai_summaries key from local storage
            - Writes telemetry event with index size
        """
        count = len(self._index)
        self._index.clear()
        self.storage.remove_item(ENRICHMENT_STORAGE_KEY)
        log_event("cache.cleared", cache=self.name, count=count)
