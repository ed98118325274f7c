"""
Index maintenance for class calendars.

CalendarService ties the EntityStore to the DayIndex. The board service pushes
mirror records in (create-or-update under its own ids) and then asks for them
to be placed on, or taken off, an owner's calendar. Placement always derives
the day from the mirror's current date, so re-assigning after a date change
moves the reference.

Every mutating operation on an entity runs inside a critical section keyed by
(kind, entity id): the mirror read and the index write for one entity never
interleave with another operation on the same entity.
"""
from __future__ import annotations

import logging
import typing as t

from calendar_server.dayindex import DayIndex, Timestamp, canonical_day
from calendar_server.locks import KeyedLock
from calendar_server.models import (
    Assignment,
    AssignmentUpsert,
    Calendar,
    DayReferences,
    DaySchedule,
    EntityKind,
    NotFound,
    OfficeHours,
    OfficeHoursUpsert,
    Ok,
    Result,
    ValidationError,
)
from calendar_server.store import EntityStore

logger = logging.getLogger(__name__)

_LABELS = {
    EntityKind.ASSIGNMENT: "assignment",
    EntityKind.OFFICE_HOURS: "office hours",
}


def _entity_date(record: t.Union[Assignment, OfficeHours]):
    if isinstance(record, Assignment):
        return record.due_date
    return record.start_time


class CalendarService:
    """Calendar creation, placement, removal and day queries."""

    def __init__(self, store: t.Optional[EntityStore] = None, index: t.Optional[DayIndex] = None) -> None:
        self.store = store if store is not None else EntityStore()
        self.index = index if index is not None else DayIndex()
        self._entity_locks = KeyedLock()

    # Calendars

    def create_calendar(self, owner: str) -> Result[Calendar]:
        result = self.store.add_calendar(owner)
        if not result.is_ok:
            logger.info("Calendar not created for %r: %s", owner, result.message)
        return result

    def get_calendar_for_owner(self, owner: str) -> t.Optional[Calendar]:
        return self.store.get_calendar_for_owner(owner)

    # Mirror records

    def upsert_assignment(self, upsert: AssignmentUpsert) -> Result[str]:
        result = self.store.upsert_assignment(upsert)
        if not result.is_ok:
            logger.info("Rejected assignment upsert: %s", result.message)
        return result

    def upsert_office_hours(self, upsert: OfficeHoursUpsert) -> Result[str]:
        result = self.store.upsert_office_hours(upsert)
        if not result.is_ok:
            logger.info("Rejected office hours upsert: %s", result.message)
        return result

    def get_assignment(self, assignment_id: str) -> t.Optional[Assignment]:
        return self.store.get_assignment(assignment_id)

    def get_office_hours(self, office_hours_id: str) -> t.Optional[OfficeHours]:
        return self.store.get_office_hours(office_hours_id)

    # Placement

    def assign(self, owner: str, assignment_id: str) -> Result[str]:
        """Places an assignment on its due day in the owner's calendar.

        :return: Ok(day_key), or NotFound for a missing calendar or mirror.
        """
        return self._place(owner, EntityKind.ASSIGNMENT, assignment_id)

    def assign_office_hours(self, owner: str, office_hours_id: str) -> Result[str]:
        """Places office hours on their start day in the owner's calendar."""
        return self._place(owner, EntityKind.OFFICE_HOURS, office_hours_id)

    def unassign(self, owner: str, assignment_id: str) -> Result[None]:
        """Takes an assignment off the owner's calendar; the mirror is kept.

        Missing calendars and missing mirrors are successful no-ops.
        """
        return self._remove(owner, EntityKind.ASSIGNMENT, assignment_id)

    def remove_office_hours(self, owner: str, office_hours_id: str) -> Result[None]:
        return self._remove(owner, EntityKind.OFFICE_HOURS, office_hours_id)

    def delete_entity(self, entity_id: str, kind: EntityKind) -> Result[None]:
        """Deletes a mirror record and pulls its reference from every bucket
        on every calendar. An entity is expected to live on one calendar, but
        the cleanup does not rely on it.

        :return: Ok(None), or NotFound when the mirror did not exist.
        """
        with self._entity_locks.hold((kind, entity_id)):
            result = self.store.delete(kind, entity_id)
            if not result.is_ok:
                logger.info("Delete rejected: %s", result.message)
                return result
            calendars = self.index.calendars_of(kind, entity_id)
            if len(calendars) > 1:
                logger.warning(
                    "%s %s was placed on %d calendars", _LABELS[kind], entity_id, len(calendars)
                )
            removed = self.index.remove_everywhere(kind, entity_id)
        logger.debug("Deleted %s %s, cleared %d bucket(s)", _LABELS[kind], entity_id, removed)
        return result

    def _place(self, owner: str, kind: EntityKind, entity_id: str) -> Result[str]:
        calendar = self.store.get_calendar_for_owner(owner)
        if calendar is None:
            logger.info("No calendar for %r, %s %s not placed", owner, _LABELS[kind], entity_id)
            return NotFound(f"no calendar for owner {owner}")

        with self._entity_locks.hold((kind, entity_id)):
            record = self.store.get(kind, entity_id)
            if record is None:
                logger.info("%s %s not found", _LABELS[kind], entity_id)
                return NotFound(f"{_LABELS[kind]} {entity_id} not found")
            day_key = self.index.place(calendar.id, kind, entity_id, _entity_date(record))

        logger.debug("Placed %s %s on %s of calendar %s", _LABELS[kind], entity_id, day_key, calendar.id)
        return Ok(day_key)

    def _remove(self, owner: str, kind: EntityKind, entity_id: str) -> Result[None]:
        calendar = self.store.get_calendar_for_owner(owner)
        if calendar is None:
            return Ok()

        with self._entity_locks.hold((kind, entity_id)):
            if self.store.get(kind, entity_id) is None:
                return Ok()
            removed = self.index.remove_from_calendar(calendar.id, kind, entity_id)

        logger.debug("Removed %s %s from %d bucket(s) of calendar %s", _LABELS[kind], entity_id, removed, calendar.id)
        return Ok()

    # Queries

    def get_references_on_day(self, calendar_id: str, day: Timestamp) -> Result[DayReferences]:
        """Entity ids placed on a day of a calendar.

        :param day: A day key or any timestamp on that day.
        :return: Ok(DayReferences) with the normalized day key, and empty
            lists for an empty day.
        """
        try:
            day_key = canonical_day(day)
        except ValueError:
            return ValidationError(f"invalid day: {day!r}")
        return Ok(self.index.references_on_day(calendar_id, day_key))

    def get_day_items(self, calendar_id: str, day: Timestamp) -> Result[DaySchedule]:
        """A day's references resolved to mirror records, assignments ordered
        by due date and office hours by start time.

        :return: Ok(DaySchedule) carrying the normalized day key.
        """
        refs = self.get_references_on_day(calendar_id, day)
        if not refs.is_ok:
            return refs
        return Ok(DaySchedule(
            day=refs.value.day,
            assignments=self._resolve_assignments(refs.value.assignments),
            office_hours=self._resolve_office_hours(refs.value.office_hours),
        ))

    def get_assignments_on_day(self, calendar_id: str, day: Timestamp) -> Result[list[Assignment]]:
        """Assignments on a day, resolved to their mirror records and ordered by due date."""
        refs = self.get_references_on_day(calendar_id, day)
        if not refs.is_ok:
            return refs
        return Ok(self._resolve_assignments(refs.value.assignments))

    def get_office_hours_on_day(self, calendar_id: str, day: Timestamp) -> Result[list[OfficeHours]]:
        """Office hours on a day, resolved to their mirror records and ordered by start time."""
        refs = self.get_references_on_day(calendar_id, day)
        if not refs.is_ok:
            return refs
        return Ok(self._resolve_office_hours(refs.value.office_hours))

    def _resolve_assignments(self, refs: list[str]) -> list[Assignment]:
        records = [self.store.get_assignment(ref) for ref in refs]
        return sorted((r for r in records if r is not None), key=lambda r: (r.due_date, r.name))

    def _resolve_office_hours(self, refs: list[str]) -> list[OfficeHours]:
        records = [self.store.get_office_hours(ref) for ref in refs]
        return sorted((r for r in records if r is not None), key=lambda r: (r.start_time, r.id))

    def get_day_of(self, owner: str, entity_id: str, kind: EntityKind) -> Result[t.Optional[str]]:
        """The day an entity currently sits on in the owner's calendar, or None."""
        calendar = self.store.get_calendar_for_owner(owner)
        if calendar is None:
            return NotFound(f"no calendar for owner {owner}")
        days = self.index.days_of(calendar.id, kind, entity_id)
        return Ok(days[0] if days else None)
