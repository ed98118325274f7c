"""
FastAPI service for the class calendar day-index.

This service exposes calendar_server.service.CalendarService as REST API
endpoints. The board service pushes assignment and office-hours mirrors
here under its own ids and then places them on (or takes them off) an
owner's calendar; the presentation layer reads calendar days back.

Store and service results are typed; they are mapped to HTTP errors here:
ValidationError -> 422, NotFound -> 404, Conflict -> 409.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from calendar_server import models as domain
from calendar_server.service import CalendarService
from calendar_server.views import format_day
from services.shared.models import (
    Assignment,
    AssignmentRequest,
    Calendar,
    CreateCalendarRequest,
    DayItems,
    DayReferences,
    OfficeHours,
    OfficeHoursRequest,
    PlacementResponse,
    ShowDayResponse,
    UpsertResponse,
)

logger = logging.getLogger(__name__)

HOST = os.getenv("CALENDAR_SERVICE_HOST", "0.0.0.0")
PORT = int(os.getenv("CALENDAR_SERVICE_PORT", "8004"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

_STATUS_CODES = {
    domain.ValidationError: 422,
    domain.NotFound: 404,
    domain.Conflict: 409,
}

# In-memory service; in a distributed system the store would be backed by a database
service = CalendarService()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup and cleanup on shutdown."""
    logger.info("Calendar service starting")
    yield


app = FastAPI(
    title="Calendar Service",
    description="REST API for placing assignments and office hours on calendar days",
    version="1.0.0",
    lifespan=lifespan,
)


def _unwrap(result):
    """Returns the value of an Ok result, raising HTTPException for errors."""
    if not result.is_ok:
        raise HTTPException(status_code=_STATUS_CODES[type(result)], detail=result.message)
    return result.value


def _to_calendar(calendar: domain.Calendar) -> Calendar:
    return Calendar(id=calendar.id, owner=calendar.owner)


def _to_assignment(record: domain.Assignment) -> Assignment:
    return Assignment(
        id=record.id,
        class_id=record.class_id,
        name=record.name,
        due_date=record.due_date.isoformat(),
    )


def _to_office_hours(record: domain.OfficeHours) -> OfficeHours:
    return OfficeHours(
        id=record.id,
        class_id=record.class_id,
        start_time=record.start_time.isoformat(),
        duration=record.duration,
    )


def _assignment_fields(request: AssignmentRequest) -> domain.AssignmentFields:
    return domain.AssignmentFields(class_id=request.class_id, name=request.name, due_date=request.due_date)


def _office_hours_fields(request: OfficeHoursRequest) -> domain.OfficeHoursFields:
    return domain.OfficeHoursFields(
        class_id=request.class_id,
        start_time=request.start_time,
        duration=request.duration,
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "calendar-service"}


# Calendars

@app.post("/calendars", response_model=Calendar, status_code=201)
async def create_calendar(request: CreateCalendarRequest) -> Calendar:
    """Create the calendar for an owner. Each owner has at most one."""
    return _to_calendar(_unwrap(service.create_calendar(request.owner)))


@app.get("/owners/{owner}/calendar", response_model=Calendar)
async def get_calendar_for_owner(owner: str) -> Calendar:
    calendar = service.get_calendar_for_owner(owner)
    if calendar is None:
        raise HTTPException(status_code=404, detail=f"no calendar for owner {owner}")
    return _to_calendar(calendar)


# Assignment mirrors

@app.post("/assignments", response_model=UpsertResponse, status_code=201)
async def create_assignment(request: AssignmentRequest) -> UpsertResponse:
    """Create an assignment mirror under a freshly generated id."""
    upsert = domain.CreateAssignment(_assignment_fields(request))
    return UpsertResponse(id=_unwrap(service.upsert_assignment(upsert)))


@app.put("/assignments/{assignment_id:path}", response_model=UpsertResponse)
async def put_assignment(assignment_id: str, request: AssignmentRequest) -> UpsertResponse:
    """
    Create or fully replace an assignment mirror under the board service's id.
    """
    upsert = domain.UpdateAssignment(assignment_id, _assignment_fields(request))
    return UpsertResponse(id=_unwrap(service.upsert_assignment(upsert)))


@app.get("/assignments/{assignment_id:path}", response_model=Assignment)
async def get_assignment(assignment_id: str) -> Assignment:
    record = service.get_assignment(assignment_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"assignment {assignment_id} not found")
    return _to_assignment(record)


@app.delete("/assignments/{assignment_id:path}", status_code=204)
async def delete_assignment(assignment_id: str) -> None:
    """Delete an assignment mirror and remove it from every calendar."""
    _unwrap(service.delete_entity(assignment_id, domain.EntityKind.ASSIGNMENT))


# Office-hours mirrors

@app.post("/office-hours", response_model=UpsertResponse, status_code=201)
async def create_office_hours(request: OfficeHoursRequest) -> UpsertResponse:
    upsert = domain.CreateOfficeHours(_office_hours_fields(request))
    return UpsertResponse(id=_unwrap(service.upsert_office_hours(upsert)))


@app.put("/office-hours/{office_hours_id:path}", response_model=UpsertResponse)
async def put_office_hours(office_hours_id: str, request: OfficeHoursRequest) -> UpsertResponse:
    upsert = domain.UpdateOfficeHours(office_hours_id, _office_hours_fields(request))
    return UpsertResponse(id=_unwrap(service.upsert_office_hours(upsert)))


@app.get("/office-hours/{office_hours_id:path}", response_model=OfficeHours)
async def get_office_hours(office_hours_id: str) -> OfficeHours:
    record = service.get_office_hours(office_hours_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"office hours {office_hours_id} not found")
    return _to_office_hours(record)


@app.delete("/office-hours/{office_hours_id:path}", status_code=204)
async def delete_office_hours(office_hours_id: str) -> None:
    _unwrap(service.delete_entity(office_hours_id, domain.EntityKind.OFFICE_HOURS))


# Placement

@app.post("/owners/{owner}/assignments/{assignment_id:path}", response_model=PlacementResponse)
async def assign(owner: str, assignment_id: str) -> PlacementResponse:
    """
    Place an assignment on its due day. Call again after changing the due
    date to move it.
    """
    day = _unwrap(service.assign(owner, assignment_id))
    return PlacementResponse(owner=owner, entity_id=assignment_id, kind="assignment", day=day)


@app.delete("/owners/{owner}/assignments/{assignment_id:path}", response_model=PlacementResponse)
async def unassign(owner: str, assignment_id: str) -> PlacementResponse:
    """Take an assignment off the owner's calendar. Always succeeds."""
    _unwrap(service.unassign(owner, assignment_id))
    return PlacementResponse(owner=owner, entity_id=assignment_id, kind="assignment")


@app.post("/owners/{owner}/office-hours/{office_hours_id:path}", response_model=PlacementResponse)
async def assign_office_hours(owner: str, office_hours_id: str) -> PlacementResponse:
    day = _unwrap(service.assign_office_hours(owner, office_hours_id))
    return PlacementResponse(owner=owner, entity_id=office_hours_id, kind="office_hours", day=day)


@app.delete("/owners/{owner}/office-hours/{office_hours_id:path}", response_model=PlacementResponse)
async def remove_office_hours(owner: str, office_hours_id: str) -> PlacementResponse:
    _unwrap(service.remove_office_hours(owner, office_hours_id))
    return PlacementResponse(owner=owner, entity_id=office_hours_id, kind="office_hours")


# Days

@app.get("/calendars/{calendar_id}/days/{day}", response_model=DayReferences)
async def get_references_on_day(calendar_id: str, day: str) -> DayReferences:
    """
    List the ids placed on a day. An empty day returns empty lists.
    """
    refs = _unwrap(service.get_references_on_day(calendar_id, day))
    return DayReferences(
        calendar_id=calendar_id,
        day=refs.day,
        assignments=refs.assignments,
        office_hours=refs.office_hours,
    )


@app.get("/calendars/{calendar_id}/days/{day}/items", response_model=DayItems)
async def get_day_items(calendar_id: str, day: str) -> DayItems:
    """
    List the full records placed on a day, assignments ordered by due date
    and office hours by start time.
    """
    schedule = _unwrap(service.get_day_items(calendar_id, day))
    return DayItems(
        calendar_id=calendar_id,
        day=schedule.day,
        assignments=[_to_assignment(a) for a in schedule.assignments],
        office_hours=[_to_office_hours(o) for o in schedule.office_hours],
    )


@app.get("/calendars/{calendar_id}/days/{day}/show", response_model=ShowDayResponse)
async def show_day(calendar_id: str, day: str) -> ShowDayResponse:
    """Show a calendar day in a formatted display."""
    try:
        return ShowDayResponse(formatted_day=format_day(service, calendar_id, day))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=HOST, port=PORT)
