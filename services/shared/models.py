"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the dataclass models in
calendar_server.models, ensuring consistent JSON serialization between the
calendar service and its HTTP clients. Timestamps travel as ISO-8601 strings.
"""
from __future__ import annotations

import typing as t
from pydantic import BaseModel, Field


EntityKindName = t.Literal["assignment", "office_hours"]


class Calendar(BaseModel):
    """A user's calendar."""
    id: str
    owner: str


class Assignment(BaseModel):
    """Assignment mirror record."""
    id: str
    class_id: str
    name: str
    due_date: str  # ISO datetime, UTC


class OfficeHours(BaseModel):
    """Office-hours mirror record."""
    id: str
    class_id: str
    start_time: str  # ISO datetime, UTC
    duration: int    # minutes


class DayReferences(BaseModel):
    """Entity ids placed on one calendar day."""
    calendar_id: str
    day: str  # "YYYY-MM-DD"
    assignments: list[str] = Field(default_factory=list)
    office_hours: list[str] = Field(default_factory=list)


class DayItems(BaseModel):
    """Full records placed on one calendar day."""
    calendar_id: str
    day: str
    assignments: list[Assignment] = Field(default_factory=list)
    office_hours: list[OfficeHours] = Field(default_factory=list)


# Request/Response Models for API endpoints
class CreateCalendarRequest(BaseModel):
    """Request model for creating a calendar."""
    owner: str


class AssignmentRequest(BaseModel):
    """Request model for creating or replacing an assignment mirror.

    Field values are validated by the store, not here, so that malformed
    dates come back as the store's validation message.
    """
    class_id: str
    name: str
    due_date: str


class OfficeHoursRequest(BaseModel):
    """Request model for creating or replacing an office-hours mirror."""
    class_id: str
    start_time: str
    duration: int


class UpsertResponse(BaseModel):
    """Response model for mirror upserts."""
    id: str


class PlacementResponse(BaseModel):
    """Response model for placing an entity on a calendar."""
    owner: str
    entity_id: str
    kind: EntityKindName
    day: t.Optional[str] = None


class ShowDayResponse(BaseModel):
    """Response model for formatted day display."""
    formatted_day: str
