"""Records - timeline and learning entries with their persistent stores"""

from __future__ import annotations

from historian.records.models import (
    Enrichment,
    Era,
    LearningRecord,
    LearningRecordCreate,
    LearningRecordUpdate,
    TimelineRecord,
    TimelineRecordCreate,
    TimelineRecordUpdate,
)
from historian.records.repository import LearningRecordStore, RecordStore, TimelineRecordStore

__all__ = [
    "Enrichment",
    "Era",
    "LearningRecord",
    "LearningRecordCreate",
    "LearningRecordStore",
    "LearningRecordUpdate",
    "RecordStore",
    "TimelineRecord",
    "TimelineRecordCreate",
    "TimelineRecordStore",
    "TimelineRecordUpdate",
]
