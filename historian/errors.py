"""Domain exceptions shared by the record stores, enrichment layer and API."""

from __future__ import annotations


class HistorianError(Exception):
    """Base class for Historian domain errors."""


class ValidationError(HistorianError, ValueError):
    """Required input missing or malformed. Raised before anything is persisted."""


class NotFound(HistorianError, LookupError):
    """A mutation referenced a record id that does not exist."""

    def __init__(self, record_id: str, kind: str = "record") -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.record_id = record_id
        self.kind = kind


class EnrichmentTransportError(HistorianError):
    """Calling the text-generation endpoint failed (network, credential, empty reply).

    Never escapes EnrichmentClient; it is converted into a failed EnrichmentResult.
    """


class StorageCorruption(HistorianError):
    """A persisted JSON value could not be decoded."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"corrupt value under {key!r}: {reason}")
        self.key = key
        self.reason = reason
