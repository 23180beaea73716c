"""
Record stores - create/update/delete/read-all over local storage.

Each store owns one named collection (timeline entries, learning records) and
is its only writer. Every mutation rewrites the whole list immediately, so a
restart never observes a half-applied change. There is no optimistic
concurrency: last writer wins.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from historian.config import LEARNING_STORAGE_KEY, TIMELINE_STORAGE_KEY
from historian.errors import NotFound, StorageCorruption
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter, log_event
from historian.records.models import (
    Enrichment,
    LearningRecord,
    LearningRecordCreate,
    LearningRecordUpdate,
    TimelineRecord,
    TimelineRecordCreate,
    TimelineRecordUpdate,
)
from historian.records.ordering import order_changed, sort_chronologically
from historian.records.validators import (
    LEARNING_REQUIRED,
    TIMELINE_REQUIRED,
    reject_blank_changes,
    require_fields,
    validate_year,
)
from historian.storage import LocalStorage

logger = get_logger(__name__)

R = TypeVar("R", bound=BaseModel)

# First-run examples; fixed ids so repeated reads before the first write agree
TIMELINE_SEED: tuple[dict[str, Any], ...] = (
    {
        "id": "1",
        "year": 1066,
        "era": "AD",
        "title": "Battle of Hastings",
        "description": "A battle happened in 1066",
    },
    {
        "id": "2",
        "year": 1215,
        "era": "AD",
        "title": "Magna Carta",
        "description": "Important document was signed",
    },
    {
        "id": "3",
        "year": 1492,
        "era": "AD",
        "title": "Columbus Discovers America",
        "description": "Columbus found new land",
    },
)


def new_record_id() -> str:
    return uuid.uuid4().hex


class RecordStore(Generic[R]):
    """
    Base class for a persisted, ordered collection of records.

    Subclasses set ``storage_key``, ``record_type`` and ``kind`` and implement
    create/update.
    """

    storage_key: str
    record_type: type[R]
    kind: str = "record"

    def __init__(self, storage: LocalStorage | None = None) -> None:
        self.storage = storage or LocalStorage()

    def _initial_records(self) -> list[R]:
        """Records returned when the collection has never been written."""
        return []

    def load_all(self) -> list[R]:
        """
        Read the persisted collection.

        Returns:
            Records in stored order. A corrupt collection reads as empty;
            individual entries that no longer validate are skipped.

        Side Effects:
            - Logs and counts storage corruption
        """
        try:
            raw = self.storage.read_json(self.storage_key)
        except StorageCorruption as e:
            logger.error("Treating %s as empty: %s", self.storage_key, e)
            counter(f"records.{self.kind}.corrupt")
            return []

        if raw is None:
            return self._initial_records()

        if not isinstance(raw, list):
            logger.error("Treating %s as empty: expected a list, got %s", self.storage_key, type(raw).__name__)
            counter(f"records.{self.kind}.corrupt")
            return []

        records: list[R] = []
        for item in raw:
            try:
                records.append(self.record_type.model_validate(item))
            except PydanticValidationError as e:
                logger.warning("Skipping invalid %s entry in %s: %s", self.kind, self.storage_key, e)
                counter(f"records.{self.kind}.invalid_entry")
        return records

    def get(self, record_id: str) -> R:
        """
        Raises:
            NotFound: If no record has this id
        """
        for record in self.load_all():
            if record.id == record_id:
                return record
        raise NotFound(record_id, self.kind)

    def delete(self, record_id: str) -> None:
        """
        Remove the record with this id. Deleting an absent id is a no-op.

        Side Effects:
            - Rewrites the collection when something was removed
        """
        records = self.load_all()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            logger.debug("Delete of absent %s %s ignored", self.kind, record_id)
            return

        self._persist(remaining)
        log_event(f"records.{self.kind}.deleted", record_id=record_id)

    def _persist(self, records: list[R]) -> None:
        self.storage.write_json(
            self.storage_key,
            [record.model_dump(mode="json") for record in records],
        )

    def _index_of(self, records: list[R], record_id: str) -> int:
        for index, record in enumerate(records):
            if record.id == record_id:
                return index
        raise NotFound(record_id, self.kind)


class TimelineRecordStore(RecordStore[TimelineRecord]):
    """Timeline entries, always kept in ascending signed-year order."""

    storage_key = TIMELINE_STORAGE_KEY
    record_type = TimelineRecord
    kind = "timeline"

    def _initial_records(self) -> list[TimelineRecord]:
        return [TimelineRecord.model_validate(entry) for entry in TIMELINE_SEED]

    def create(self, data: TimelineRecordCreate) -> TimelineRecord:
        """
        Validate and insert a new timeline record in chronological position.

        Raises:
            ValidationError: Missing fields or a year outside 1-9999

        Side Effects:
            - Rewrites the timeline collection
        """
        require_fields(data.model_dump(), TIMELINE_REQUIRED)
        year = validate_year(data.year)

        record = TimelineRecord(
            id=new_record_id(),
            year=year,
            era=data.era,
            title=data.title,
            description=data.description,
        )

        records = self.load_all()
        records.append(record)
        # Stable sort: the new record lands after existing records with the same year
        self._persist(sort_chronologically(records))

        logger.info("Created timeline record %s (%d %s)", record.id, record.year, record.era.value)
        return record

    def update(self, record_id: str, data: TimelineRecordUpdate) -> TimelineRecord:
        """
        Merge the supplied fields into an existing record.

        Raises:
            NotFound: If no record has this id
            ValidationError: If a supplied field is blank or the year is invalid

        Side Effects:
            - Rewrites the timeline collection (re-sorted when year/era changed)
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        reject_blank_changes(changes)
        if "year" in changes:
            changes["year"] = validate_year(changes["year"])

        records = self.load_all()
        index = self._index_of(records, record_id)
        current = records[index]
        updated = TimelineRecord.model_validate({**current.model_dump(), **changes})
        records[index] = updated

        if order_changed(current, updated):
            records = sort_chronologically(records)
        self._persist(records)

        log_event("records.timeline.updated", record_id=record_id, fields=sorted(changes))
        return updated

    def replace_description(self, record_id: str, description: str) -> TimelineRecord:
        """Overwrite only the description (accepting an enhanced description)."""
        return self.update(record_id, TimelineRecordUpdate(description=description))


class LearningRecordStore(RecordStore[LearningRecord]):
    """Learning records in creation order. No seed data."""

    storage_key = LEARNING_STORAGE_KEY
    record_type = LearningRecord
    kind = "learning"

    def create(self, data: LearningRecordCreate) -> LearningRecord:
        """
        Validate and append a new, unenriched learning record.

        Raises:
            ValidationError: If title, year range or facts is blank

        Side Effects:
            - Rewrites the learning collection
        """
        require_fields(data.model_dump(), LEARNING_REQUIRED)

        record = LearningRecord(
            id=new_record_id(),
            title=data.title,
            year_range=data.year_range,
            facts=data.facts,
            created_at=datetime.now(UTC),
        )

        records = self.load_all()
        records.append(record)
        self._persist(records)

        logger.info("Created learning record %s", record.id)
        return record

    def update(self, record_id: str, data: LearningRecordUpdate) -> LearningRecord:
        """
        Merge user-editable fields. ``created_at`` and the enrichment are kept.

        Raises:
            NotFound: If no record has this id
            ValidationError: If a supplied field is blank
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        reject_blank_changes(changes)

        records = self.load_all()
        index = self._index_of(records, record_id)
        updated = records[index].model_copy(update=changes)
        records[index] = updated
        self._persist(records)

        log_event("records.learning.updated", record_id=record_id, fields=sorted(changes))
        return updated

    def set_enrichment_fields(self, record_id: str, enrichment: Enrichment) -> LearningRecord:
        """
        Replace the record's enrichment as a whole.

        The collection is re-read here, so user edits made while generation was
        in flight are kept; only the enrichment is touched.

        Raises:
            NotFound: If the record was deleted meanwhile
        """
        records = self.load_all()
        index = self._index_of(records, record_id)
        updated = records[index].model_copy(update={"enrichment": enrichment})
        records[index] = updated
        self._persist(records)

        log_event("records.learning.enriched", record_id=record_id)
        return updated


__all__ = [
    "LearningRecordStore",
    "RecordStore",
    "TIMELINE_SEED",
    "TimelineRecordStore",
    "new_record_id",
]
