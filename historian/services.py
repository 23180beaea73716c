"""
Process-wide service instances.

Created lazily on first use (thread-safe singletons via @lru_cache, like the
connection pool) and live for the life of the process. The enrichment cache
hydrates its index from storage on demand, so nothing has to be preloaded.
reset_services() exists for tests that switch databases between cases.
"""

from __future__ import annotations

from functools import lru_cache

from historian.enrichment.cache import EnrichmentCache
from historian.enrichment.client import EnrichmentClient
from historian.enrichment.orchestrator import EnrichmentOrchestrator
from historian.records.repository import LearningRecordStore, TimelineRecordStore
from historian.storage import LocalStorage


@lru_cache(maxsize=1)
def get_local_storage() -> LocalStorage:
    return LocalStorage()


@lru_cache(maxsize=1)
def get_timeline_store() -> TimelineRecordStore:
    return TimelineRecordStore(get_local_storage())


@lru_cache(maxsize=1)
def get_learning_store() -> LearningRecordStore:
    return LearningRecordStore(get_local_storage())


@lru_cache(maxsize=1)
def get_enrichment_cache() -> EnrichmentCache:
    return EnrichmentCache(get_local_storage())


@lru_cache(maxsize=1)
def get_enrichment_client() -> EnrichmentClient:
    return EnrichmentClient()


@lru_cache(maxsize=1)
def get_orchestrator() -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(
        cache=get_enrichment_cache(),
        client=get_enrichment_client(),
        timeline_store=get_timeline_store(),
        learning_store=get_learning_store(),
    )


def reset_services() -> None:
    for factory in (
        get_orchestrator,
        get_enrichment_client,
        get_enrichment_cache,
        get_learning_store,
        get_timeline_store,
        get_local_storage,
    ):
        factory.cache_clear()
