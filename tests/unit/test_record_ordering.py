"""Chronological ordering: BC before AD, stable for equal years."""

from __future__ import annotations

from historian.records import Era, TimelineRecord, TimelineRecordCreate, TimelineRecordStore
from historian.records.ordering import order_changed, sort_chronologically


def _record(record_id: str, year: int, era: Era = Era.AD) -> TimelineRecord:
    return TimelineRecord(id=record_id, year=year, era=era, title=record_id, description="d")


def test_signed_year_negates_bc():
    assert _record("caesar", 44, Era.BC).signed_year == -44
    assert _record("hastings", 1066).signed_year == 1066


def test_bc_sorts_before_ad_and_earlier_bc_first():
    records = [_record("a", 1), _record("b", 44, Era.BC), _record("c", 500, Era.BC)]
    assert [r.id for r in sort_chronologically(records)] == ["c", "b", "a"]


def test_sort_is_stable_for_equal_years():
    records = [_record("first", 1215), _record("second", 1215), _record("early", 1066)]
    assert [r.id for r in sort_chronologically(records)] == ["early", "first", "second"]


def test_order_changed_only_for_order_keys():
    before = _record("x", 1066)
    assert not order_changed(before, before.model_copy(update={"title": "new"}))
    assert order_changed(before, before.model_copy(update={"era": Era.BC}))


def test_mixed_era_scenario_lists_caesar_first():
    """44 BC, 1066 AD and 1492 AD added out of order come back chronological."""
    store = TimelineRecordStore()
    store.storage.write_json(store.storage_key, [])

    store.create(TimelineRecordCreate(year="1492", era=Era.AD, title="Columbus", description="Voyage"))
    store.create(TimelineRecordCreate(year="44", era=Era.BC, title="Caesar", description="Ides of March"))
    store.create(TimelineRecordCreate(year="1066", era=Era.AD, title="Hastings", description="Battle"))

    assert [r.title for r in store.load_all()] == ["Caesar", "Hastings", "Columbus"]


def test_new_record_with_same_year_goes_after_existing():
    store = TimelineRecordStore()
    added = store.create(TimelineRecordCreate(year="1066", title="Domesday planning", description="d"))

    titles = [r.title for r in store.load_all()]
    assert titles.index("Battle of Hastings") < titles.index(added.title)
    assert titles[-1] == "Columbus Discovers America"
