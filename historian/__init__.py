"""Historian - personal timeline and history notes with AI summaries"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so that importing a leaf module does not pull in the LLM SDKs
def __getattr__(name: str):
    """
    Lazy imports to avoid loading heavy dependencies when only importing lightweight modules.
    """
    if name in ("TimelineRecordStore", "LearningRecordStore"):
        from historian.records import repository

        return getattr(repository, name)

    if name in ("EnrichmentCache", "EnrichmentClient", "EnrichmentOrchestrator"):
        from historian.enrichment import cache, client, orchestrator

        if name == "EnrichmentCache":
            return cache.EnrichmentCache
        if name == "EnrichmentClient":
            return client.EnrichmentClient
        return orchestrator.EnrichmentOrchestrator

    if name == "AccessGate":
        from historian.auth.access_gate import AccessGate

        return AccessGate

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "AccessGate",
    "EnrichmentCache",
    "EnrichmentClient",
    "EnrichmentOrchestrator",
    "LearningRecordStore",
    "TimelineRecordStore",
]
