"""
Data models for the class calendar day-index.

This module contains the dataclasses used to represent calendars, the
assignment and office-hours mirror records, day buckets, the tagged
create/update variants used to upsert mirrors, and the typed results
returned by every store and service operation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import typing as t


T = t.TypeVar("T")


class EntityKind(str, Enum):
    """Kinds of entity that can be placed on a calendar day."""
    ASSIGNMENT = "assignment"
    OFFICE_HOURS = "office_hours"


@dataclass
class Calendar:
    """One calendar per owner."""
    id: str
    owner: str


@dataclass
class Assignment:
    """Local mirror of an assignment owned by the board service."""
    id: str
    class_id: str
    name: str
    due_date: datetime


@dataclass
class OfficeHours:
    """Local mirror of an office-hours slot owned by the board service."""
    id: str
    class_id: str
    start_time: datetime
    duration: int  # minutes


@dataclass
class DayBucket:
    """All references placed on one calendar for one day."""
    id: str
    calendar_id: str
    date: datetime  # midnight UTC of the bucket's day
    assignment_refs: set[str] = field(default_factory=set)
    office_hour_refs: set[str] = field(default_factory=set)

    def refs(self, kind: EntityKind) -> set[str]:
        if kind is EntityKind.ASSIGNMENT:
            return self.assignment_refs
        return self.office_hour_refs

    def is_empty(self) -> bool:
        return not self.assignment_refs and not self.office_hour_refs


@dataclass
class DayReferences:
    """Entity ids placed on a single day, as returned to the presentation layer."""
    assignments: list[str] = field(default_factory=list)
    office_hours: list[str] = field(default_factory=list)
    day: str = field(default="", compare=False)  # normalized day key


@dataclass
class DaySchedule:
    """A day's references resolved to their mirror records."""
    day: str
    assignments: list[Assignment] = field(default_factory=list)
    office_hours: list[OfficeHours] = field(default_factory=list)


# Upsert variants. A Create lets the store pick the id; an Update carries the
# id the board service already uses and creates the mirror under that id when
# this store has not seen it yet.

@dataclass
class AssignmentFields:
    class_id: str
    name: str
    due_date: t.Union[str, datetime]


@dataclass
class OfficeHoursFields:
    class_id: str
    start_time: t.Union[str, datetime]
    duration: int


@dataclass
class CreateAssignment:
    fields: AssignmentFields


@dataclass
class UpdateAssignment:
    id: str
    fields: AssignmentFields


@dataclass
class CreateOfficeHours:
    fields: OfficeHoursFields


@dataclass
class UpdateOfficeHours:
    id: str
    fields: OfficeHoursFields


AssignmentUpsert = t.Union[CreateAssignment, UpdateAssignment]
OfficeHoursUpsert = t.Union[CreateOfficeHours, UpdateOfficeHours]


# Typed results. Operations return these instead of raising.

@dataclass
class Ok(t.Generic[T]):
    value: T = None  # type: ignore[assignment]
    is_ok: t.ClassVar[bool] = True


@dataclass
class ValidationError:
    """Malformed input, rejected before any mutation."""
    message: str
    is_ok: t.ClassVar[bool] = False


@dataclass
class NotFound:
    """Missing calendar or mirror record, rejected before any mutation."""
    message: str
    is_ok: t.ClassVar[bool] = False


@dataclass
class Conflict:
    """A calendar already exists for the owner."""
    message: str
    is_ok: t.ClassVar[bool] = False


Error = t.Union[ValidationError, NotFound, Conflict]
Result = t.Union[Ok[T], ValidationError, NotFound, Conflict]
