"""
Module: models
Purpose: Pydantic models for timeline and learning records.
Dependencies: historian.enrichment.types (EnrichmentResult only)

Records are what the stores persist (``model_dump(mode="json")``); the
*Create / *Update models are the shapes accepted from callers. Semantic
checks (non-empty text, year range) live in historian.records.validators so
that they raise the domain ValidationError instead of pydantic's.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from historian.enrichment.types import EnrichmentResult


class Era(str, Enum):
    """Calendar era. Extends str so JSON holds the raw "AD"/"BC"."""

    AD = "AD"
    BC = "BC"


class TimelineRecord(BaseModel):
    """A dated historical event on the user's timeline."""

    id: str
    year: int = Field(ge=1, le=9999)
    era: Era
    title: str
    description: str

    @property
    def signed_year(self) -> int:
        return -self.year if self.era is Era.BC else self.year


class TimelineRecordCreate(BaseModel):
    # Year arrives as typed into the form, so both "1066" and 1066 are accepted
    year: str | int
    era: Era = Era.AD
    title: str
    description: str


class TimelineRecordUpdate(BaseModel):
    year: str | int | None = None
    era: Era | None = None
    title: str | None = None
    description: str | None = None


class Enrichment(BaseModel):
    """
    AI-derived content of a learning record.

    Built in one step from a successful EnrichmentResult and replaced as a
    whole, so a record is either unenriched (``None``) or carries all four.
    """

    model_config = ConfigDict(frozen=True)

    narrative: str = ""
    organized_facts: str = ""
    key_learning_points: str = ""
    chronological_events: str = ""

    @classmethod
    def from_result(cls, result: EnrichmentResult) -> Enrichment:
        if not result.succeeded:
            raise ValueError("cannot build enrichment from a failed result")
        return cls(
            narrative=result.narrative_text,
            organized_facts=result.rewritten_text,
            key_learning_points=result.key_points_text or "",
            chronological_events=result.chronological_events_text or "",
        )


class LearningRecord(BaseModel):
    """A history class entry: free-form notes plus optional AI enrichment."""

    id: str
    title: str
    year_range: str
    facts: str
    created_at: datetime
    enrichment: Enrichment | None = None

    @property
    def is_enriched(self) -> bool:
        return self.enrichment is not None


class LearningRecordCreate(BaseModel):
    title: str
    year_range: str
    facts: str


class LearningRecordUpdate(BaseModel):
    title: str | None = None
    year_range: str | None = None
    facts: str | None = None
