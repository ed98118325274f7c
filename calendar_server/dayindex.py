"""
Day-index for class calendars.

Keeps one DayBucket per (calendar, day) pair and guarantees that a given
assignment or office-hours reference sits in at most one bucket of a calendar.
Days are UTC calendar dates: a timestamp is converted to UTC and its date
component becomes the bucket's day key ("YYYY-MM-DD").
"""
from __future__ import annotations

import logging
import threading
import typing as t
from datetime import date, datetime, time, timezone

from calendar_server.models import DayBucket, DayReferences, EntityKind

logger = logging.getLogger(__name__)

Timestamp = t.Union[str, datetime, date]


def parse_timestamp(value: Timestamp) -> datetime:
    """Parses an ISO-8601 timestamp into an aware UTC datetime.

    Date-only values map to midnight UTC and naive datetimes are read as UTC.

    :param value: ISO string, datetime or date.
    :return: A timezone-aware datetime in UTC.
    :raises ValueError: If the value can not be parsed.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty timestamp")
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    else:
        raise ValueError(f"unsupported timestamp type: {type(value).__name__}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        raise ValueError(f"timestamp out of range in UTC: {value!r}")


def canonical_day(value: Timestamp) -> str:
    """Returns the UTC calendar date of a timestamp as "YYYY-MM-DD"."""
    return parse_timestamp(value).date().isoformat()


def day_start(day_key: str) -> datetime:
    """Midnight UTC of a day key."""
    return datetime.combine(date.fromisoformat(day_key), time.min, tzinfo=timezone.utc)


def bucket_id(calendar_id: str, day_key: str) -> str:
    return f"{calendar_id}_{day_key}"


class DayIndex:
    """
    Bucket collection shared by every calendar.

    Buckets are keyed by bucket_id(calendar_id, day_key) and created on the
    first placement for that day. A reverse map from (kind, ref) to the
    bucket ids holding it lets removals touch only the buckets that matter.
    Empty buckets are dropped.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, DayBucket] = {}
        self._placements: dict[tuple[EntityKind, str], set[str]] = {}
        self._lock = threading.RLock()

    def get_bucket(self, calendar_id: str, day_key: str) -> t.Optional[DayBucket]:
        with self._lock:
            return self._buckets.get(bucket_id(calendar_id, day_key))

    def references_on_day(self, calendar_id: str, day_key: str) -> DayReferences:
        """Returns the ids placed on a day; empty lists when there is no bucket."""
        with self._lock:
            bucket = self._buckets.get(bucket_id(calendar_id, day_key))
            if bucket is None:
                return DayReferences(day=day_key)
            return DayReferences(
                assignments=sorted(bucket.assignment_refs),
                office_hours=sorted(bucket.office_hour_refs),
                day=day_key,
            )

    def days_of(self, calendar_id: str, kind: EntityKind, ref: str) -> list[str]:
        """Day keys on a calendar whose bucket holds the reference."""
        with self._lock:
            return sorted(
                self._buckets[bid].date.date().isoformat()
                for bid in self._placements.get((kind, ref), ())
                if self._buckets[bid].calendar_id == calendar_id
            )

    def calendars_of(self, kind: EntityKind, ref: str) -> set[str]:
        with self._lock:
            return {self._buckets[bid].calendar_id for bid in self._placements.get((kind, ref), ())}

    def place(self, calendar_id: str, kind: EntityKind, ref: str, when: Timestamp) -> str:
        """Places a reference on the day of `when`, removing it from any other
        day of the same calendar first. Both steps run under one lock.

        :return: The day key the reference now sits on.
        """
        day_key = canonical_day(when)
        target = bucket_id(calendar_id, day_key)
        with self._lock:
            for bid in list(self._placements.get((kind, ref), ())):
                if bid != target and self._buckets[bid].calendar_id == calendar_id:
                    self._discard(bid, kind, ref)

            bucket = self._buckets.get(target)
            if bucket is None:
                bucket = DayBucket(id=target, calendar_id=calendar_id, date=day_start(day_key))
                self._buckets[target] = bucket
                logger.debug("Created bucket %s", target)
            bucket.refs(kind).add(ref)
            self._placements.setdefault((kind, ref), set()).add(target)
        return day_key

    def remove_from_calendar(self, calendar_id: str, kind: EntityKind, ref: str) -> int:
        """Pulls a reference from every bucket of one calendar.

        :return: Number of buckets it was removed from.
        """
        with self._lock:
            held = [
                bid for bid in self._placements.get((kind, ref), ())
                if self._buckets[bid].calendar_id == calendar_id
            ]
            for bid in held:
                self._discard(bid, kind, ref)
            return len(held)

    def remove_everywhere(self, kind: EntityKind, ref: str) -> int:
        """Pulls a reference from every bucket on every calendar."""
        with self._lock:
            held = list(self._placements.get((kind, ref), ()))
            for bid in held:
                self._discard(bid, kind, ref)
            return len(held)

    def _discard(self, bid: str, kind: EntityKind, ref: str) -> None:
        bucket = self._buckets[bid]
        bucket.refs(kind).discard(ref)
        placements = self._placements.get((kind, ref))
        if placements is not None:
            placements.discard(bid)
            if not placements:
                del self._placements[(kind, ref)]
        if bucket.is_empty():
            del self._buckets[bid]
            logger.debug("Dropped empty bucket %s", bid)

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)
