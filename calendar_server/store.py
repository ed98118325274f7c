# -*- coding: utf-8 -*-
import logging
import threading
import typing as t
import uuid

from .dayindex import parse_timestamp
from .models import (
    Assignment,
    AssignmentUpsert,
    Calendar,
    Conflict,
    CreateAssignment,
    CreateOfficeHours,
    EntityKind,
    NotFound,
    OfficeHours,
    OfficeHoursUpsert,
    Ok,
    Result,
    ValidationError,
)

logger = logging.getLogger(__name__)


# In-memory storage for calendars and mirror records.
# In a real deployment this would be replaced with a persistent database.


def new_id() -> str:
    return uuid.uuid4().hex


class EntityStore:
    """Calendars plus the assignment and office-hours mirrors, keyed by id."""

    def __init__(self) -> None:
        self.calendars: dict[str, Calendar] = {}
        self.assignments: dict[str, Assignment] = {}
        self.office_hours: dict[str, OfficeHours] = {}
        self._lock = threading.RLock()

    # Calendars

    def add_calendar(self, owner: str) -> Result[Calendar]:
        """Creates the calendar for an owner.

        :param owner: Owner (user) id.
        :return: Ok(Calendar), ValidationError for an empty owner, or
                 Conflict when the owner already has one.
        """
        if not owner or not owner.strip():
            return ValidationError("owner must not be empty")
        with self._lock:
            if self.get_calendar_for_owner(owner) is not None:
                return Conflict(f"calendar already exists for owner {owner}")
            calendar = Calendar(id=new_id(), owner=owner)
            self.calendars[calendar.id] = calendar
        logger.debug("Created calendar %s for %s", calendar.id, owner)
        return Ok(calendar)

    def get_calendar(self, calendar_id: str) -> t.Optional[Calendar]:
        return self.calendars.get(calendar_id)

    def get_calendar_for_owner(self, owner: str) -> t.Optional[Calendar]:
        with self._lock:
            for calendar in self.calendars.values():
                if calendar.owner == owner:
                    return calendar
        return None

    # Mirrors

    def upsert_assignment(self, upsert: AssignmentUpsert) -> Result[str]:
        """Creates or fully replaces an assignment mirror.

        :param upsert: CreateAssignment (fresh id) or UpdateAssignment (shared id).
        :return: Ok(id) or ValidationError.
        """
        fields = upsert.fields
        if not fields.class_id:
            return ValidationError("class_id must not be empty")
        if not fields.name or not fields.name.strip():
            return ValidationError("name must not be empty")
        try:
            due_date = parse_timestamp(fields.due_date)
        except ValueError:
            return ValidationError(f"invalid due date: {fields.due_date!r}")

        record_id = self._resolve_id(upsert)
        if isinstance(record_id, ValidationError):
            return record_id
        with self._lock:
            self.assignments[record_id] = Assignment(
                id=record_id,
                class_id=fields.class_id,
                name=fields.name,
                due_date=due_date,
            )
        return Ok(record_id)

    def upsert_office_hours(self, upsert: OfficeHoursUpsert) -> Result[str]:
        """Creates or fully replaces an office-hours mirror.

        :param upsert: CreateOfficeHours (fresh id) or UpdateOfficeHours (shared id).
        :return: Ok(id) or ValidationError.
        """
        fields = upsert.fields
        if not fields.class_id:
            return ValidationError("class_id must not be empty")
        try:
            start_time = parse_timestamp(fields.start_time)
        except ValueError:
            return ValidationError(f"invalid start time: {fields.start_time!r}")
        if isinstance(fields.duration, bool) or not isinstance(fields.duration, int):
            return ValidationError("duration must be a whole number of minutes")
        if fields.duration < 0:
            return ValidationError("duration must not be negative")

        record_id = self._resolve_id(upsert)
        if isinstance(record_id, ValidationError):
            return record_id
        with self._lock:
            self.office_hours[record_id] = OfficeHours(
                id=record_id,
                class_id=fields.class_id,
                start_time=start_time,
                duration=fields.duration,
            )
        return Ok(record_id)

    @staticmethod
    def _resolve_id(upsert: t.Union[AssignmentUpsert, OfficeHoursUpsert]) -> t.Union[str, ValidationError]:
        if isinstance(upsert, (CreateAssignment, CreateOfficeHours)):
            return new_id()
        if not upsert.id:
            return ValidationError("id must not be empty")
        return upsert.id

    def get_assignment(self, assignment_id: str) -> t.Optional[Assignment]:
        return self.assignments.get(assignment_id)

    def get_office_hours(self, office_hours_id: str) -> t.Optional[OfficeHours]:
        return self.office_hours.get(office_hours_id)

    def get(self, kind: EntityKind, entity_id: str) -> t.Union[Assignment, OfficeHours, None]:
        if kind is EntityKind.ASSIGNMENT:
            return self.get_assignment(entity_id)
        return self.get_office_hours(entity_id)

    def delete_assignment(self, assignment_id: str) -> Result[None]:
        with self._lock:
            if self.assignments.pop(assignment_id, None) is None:
                return NotFound(f"assignment {assignment_id} not found")
        return Ok()

    def delete_office_hours(self, office_hours_id: str) -> Result[None]:
        with self._lock:
            if self.office_hours.pop(office_hours_id, None) is None:
                return NotFound(f"office hours {office_hours_id} not found")
        return Ok()

    def delete(self, kind: EntityKind, entity_id: str) -> Result[None]:
        if kind is EntityKind.ASSIGNMENT:
            return self.delete_assignment(entity_id)
        return self.delete_office_hours(entity_id)
