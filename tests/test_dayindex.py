# -*- coding: utf-8 -*-
"""Tests for day keys and the DayIndex bucket structure."""
from datetime import date, datetime, timedelta, timezone

import pytest

from calendar_server.dayindex import DayIndex, bucket_id, canonical_day, parse_timestamp
from calendar_server.models import DayReferences, EntityKind

A = EntityKind.ASSIGNMENT
OH = EntityKind.OFFICE_HOURS


@pytest.mark.parametrize("value", [
    "2025-11-12",
    "2025-11-12T00:00:00Z",
    "2025-11-12T23:59:59Z",
    "2025-11-12T00:00:00+00:00",
    "2025-11-12T23:59:59",
    "2025-11-12T23:59:59.999999Z",
    datetime(2025, 11, 12, 12, 30),
    datetime(2025, 11, 12, 23, 59, 59, tzinfo=timezone.utc),
    date(2025, 11, 12),
])
def test_canonical_day_same_date(value) -> None:
    """Every timestamp on 2025-11-12 (UTC) maps to the same day key."""
    assert canonical_day(value) == "2025-11-12"


def test_canonical_day_boundaries_match() -> None:
    """Midnight and the last second of a day share a key; the next second does not."""
    assert canonical_day("2025-11-12T00:00:00Z") == canonical_day("2025-11-12T23:59:59Z")
    assert canonical_day("2025-11-13T00:00:00Z") == "2025-11-13"


def test_canonical_day_converts_offsets_to_utc() -> None:
    """Offsets are normalized to UTC before the date is taken."""
    assert canonical_day("2025-11-12T23:30:00-05:00") == "2025-11-13"
    assert canonical_day("2025-11-13T01:00:00+02:00") == "2025-11-12"
    tz = timezone(timedelta(hours=-8))
    assert canonical_day(datetime(2025, 11, 12, 20, 0, tzinfo=tz)) == "2025-11-13"


@pytest.mark.parametrize(
    "value",
    [
        "",
        "   ",
        "not a date",
        "2025-13-01",
        "12/11/2025",
        12345,
        None,
        # valid ISO, but the UTC date falls outside year 1..9999
        "9999-12-31T23:00:00-05:00",
        "0001-01-01T00:30:00+01:00",
    ],
)
def test_parse_timestamp_rejects_garbage(value) -> None:
    with pytest.raises(ValueError):
        parse_timestamp(value)


def test_parse_timestamp_is_utc_aware() -> None:
    parsed = parse_timestamp("2025-11-12T10:15:00+01:00")
    assert parsed.tzinfo == timezone.utc
    assert parsed.hour == 9


def test_bucket_id_is_composite() -> None:
    assert bucket_id("cal1", "2025-11-12") == "cal1_2025-11-12"


def test_empty_day_returns_empty_lists() -> None:
    index = DayIndex()
    assert index.references_on_day("cal1", "2025-11-12") == DayReferences([], [])
    assert index.references_on_day("cal1", "2025-11-12").day == "2025-11-12"
    assert len(index) == 0


def test_place_creates_bucket_lazily() -> None:
    index = DayIndex()
    day = index.place("cal1", A, "a1", "2025-11-12T17:00:00Z")

    assert day == "2025-11-12"
    bucket = index.get_bucket("cal1", "2025-11-12")
    assert bucket is not None
    assert bucket.id == "cal1_2025-11-12"
    assert bucket.calendar_id == "cal1"
    assert canonical_day(bucket.date) == "2025-11-12"
    assert bucket.assignment_refs == {"a1"}
    assert len(index) == 1


def test_place_twice_is_idempotent() -> None:
    index = DayIndex()
    index.place("cal1", A, "a1", "2025-11-12T09:00:00Z")
    index.place("cal1", A, "a1", "2025-11-12T21:00:00Z")

    assert index.references_on_day("cal1", "2025-11-12").assignments == ["a1"]
    assert index.days_of("cal1", A, "a1") == ["2025-11-12"]
    assert len(index) == 1


def test_place_moves_between_days_and_drops_empty_bucket() -> None:
    index = DayIndex()
    index.place("cal1", A, "a1", "2025-11-12")
    index.place("cal1", A, "a1", "2025-11-19")

    assert index.references_on_day("cal1", "2025-11-12").assignments == []
    assert index.references_on_day("cal1", "2025-11-19").assignments == ["a1"]
    assert index.get_bucket("cal1", "2025-11-12") is None


def test_move_keeps_other_references_in_old_bucket() -> None:
    index = DayIndex()
    index.place("cal1", A, "a1", "2025-11-12")
    index.place("cal1", A, "a2", "2025-11-12")
    index.place("cal1", OH, "oh1", "2025-11-12T15:00:00Z")
    index.place("cal1", A, "a1", "2025-11-14")

    refs = index.references_on_day("cal1", "2025-11-12")
    assert refs.assignments == ["a2"]
    assert refs.office_hours == ["oh1"]


def test_kinds_do_not_collide() -> None:
    """An assignment and office hours with the same id are separate references."""
    index = DayIndex()
    index.place("cal1", A, "x", "2025-11-12")
    index.place("cal1", OH, "x", "2025-11-13")

    assert index.references_on_day("cal1", "2025-11-12") == DayReferences(["x"], [])
    assert index.references_on_day("cal1", "2025-11-13") == DayReferences([], ["x"])


def test_place_only_moves_within_one_calendar() -> None:
    index = DayIndex()
    index.place("cal1", A, "a1", "2025-11-12")
    index.place("cal2", A, "a1", "2025-11-19")

    assert index.references_on_day("cal1", "2025-11-12").assignments == ["a1"]
    assert index.references_on_day("cal2", "2025-11-19").assignments == ["a1"]
    assert index.calendars_of(A, "a1") == {"cal1", "cal2"}


def test_remove_from_calendar() -> None:
    index = DayIndex()
    index.place("cal1", A, "a1", "2025-11-12")
    index.place("cal2", A, "a1", "2025-11-12")

    assert index.remove_from_calendar("cal1", A, "a1") == 1
    assert index.references_on_day("cal1", "2025-11-12").assignments == []
    assert index.references_on_day("cal2", "2025-11-12").assignments == ["a1"]
    assert index.remove_from_calendar("cal1", A, "a1") == 0


def test_remove_everywhere() -> None:
    index = DayIndex()
    index.place("cal1", A, "a1", "2025-11-12")
    index.place("cal2", A, "a1", "2025-11-20")
    index.place("cal2", A, "a2", "2025-11-20")

    assert index.remove_everywhere(A, "a1") == 2
    assert index.calendars_of(A, "a1") == set()
    assert index.references_on_day("cal2", "2025-11-20").assignments == ["a2"]
    assert len(index) == 1


def test_references_are_sorted() -> None:
    index = DayIndex()
    for ref in ["c", "a", "b"]:
        index.place("cal1", A, ref, "2025-11-12")
    assert index.references_on_day("cal1", "2025-11-12").assignments == ["a", "b", "c"]
