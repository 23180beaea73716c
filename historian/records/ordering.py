"""Chronological ordering of timeline records (BC years sort before AD)."""

from __future__ import annotations

from collections.abc import Iterable

from historian.records.models import TimelineRecord


def chronological_key(record: TimelineRecord) -> int:
    """Signed year: 44 BC -> -44, 1066 AD -> 1066."""
    return record.signed_year


def sort_chronologically(records: Iterable[TimelineRecord]) -> list[TimelineRecord]:
    """Ascending by signed year. sorted() is stable, so ties keep their current order."""
    return sorted(records, key=chronological_key)


def order_changed(before: TimelineRecord, after: TimelineRecord) -> bool:
    return chronological_key(before) != chronological_key(after)
