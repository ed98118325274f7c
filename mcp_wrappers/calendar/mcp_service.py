"""
MCP wrapper for the calendar service.

This module makes HTTP calls to the distributed calendar service and exposes
the board-facing operations as MCP tools. The board service owns assignment
and office-hours ids; pushing a record here upserts the mirror under that
same id and then places it on the owner's calendar.
"""
from __future__ import annotations

import logging
import os
import typing as t
from urllib.parse import quote

import httpx
from fastmcp import FastMCP

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

mcp = FastMCP("CalendarMCPWrapper")

# Service URL - configurable via environment variable
CALENDAR_SERVICE_URL = os.getenv("CALENDAR_SERVICE_URL", "http://localhost:8004")

# Timeout settings for fast operations (in seconds)
STANDARD_TIMEOUT = 30.0  # 30 seconds for standard CRUD operations

_PATHS = {
    "assignment": "assignments",
    "office_hours": "office-hours",
}


def _path(*segments: str) -> str:
    """Join URL path segments, percent-encoding each one. Board ids may hold
    '#', '?' or '/' and must reach the service unchanged."""
    return "/" + "/".join(quote(segment, safe="") for segment in segments)


def _client() -> httpx.Client:
    return httpx.Client(base_url=CALENDAR_SERVICE_URL, timeout=STANDARD_TIMEOUT)


def _request(method: str, path: str, payload: t.Optional[dict] = None) -> t.Any:
    """
    Send one request to the calendar service and return the decoded JSON body
    (None for empty responses).
    """
    try:
        with _client() as client:
            response = client.request(method, path, json=payload)
            response.raise_for_status()
    except httpx.TimeoutException:
        raise RuntimeError(f"Calendar service call {method} {path} timed out after {STANDARD_TIMEOUT} seconds")
    except httpx.HTTPStatusError as e:
        raise RuntimeError(f"HTTP error from calendar service: {e.response.status_code} {e.response.text}")
    except httpx.HTTPError as e:
        raise RuntimeError(f"Error calling calendar service: {str(e)}")

    if response.status_code == 204 or not response.content:
        return None
    return response.json()


def _create_calendar(owner: str) -> Calendar:
    return Calendar(**_request("POST", "/calendars", CreateCalendarRequest(owner=owner).model_dump()))


def _get_calendar(owner: str) -> Calendar:
    return Calendar(**_request("GET", _path("owners", owner, "calendar")))


def _put_assignment(assignment_id: str, class_id: str, name: str, due_date: str) -> str:
    """Create or replace the assignment mirror under the board service's id."""
    request = AssignmentRequest(class_id=class_id, name=name, due_date=due_date)
    return UpsertResponse(**_request("PUT", _path("assignments", assignment_id), request.model_dump())).id


def _put_office_hours(office_hours_id: str, class_id: str, start_time: str, duration: int) -> str:
    """Create or replace the office-hours mirror under the board service's id."""
    request = OfficeHoursRequest(class_id=class_id, start_time=start_time, duration=duration)
    return UpsertResponse(**_request("PUT", _path("office-hours", office_hours_id), request.model_dump())).id


def _get_assignment(assignment_id: str) -> Assignment:
    return Assignment(**_request("GET", _path("assignments", assignment_id)))


def _get_office_hours(office_hours_id: str) -> OfficeHours:
    return OfficeHours(**_request("GET", _path("office-hours", office_hours_id)))


def _place(owner: str, kind: str, entity_id: str) -> PlacementResponse:
    return PlacementResponse(**_request("POST", _path("owners", owner, _PATHS[kind], entity_id)))


def _unplace(owner: str, kind: str, entity_id: str) -> PlacementResponse:
    return PlacementResponse(**_request("DELETE", _path("owners", owner, _PATHS[kind], entity_id)))


def _delete(kind: str, entity_id: str) -> None:
    _request("DELETE", _path(_PATHS[kind], entity_id))


def _get_references_on_day(calendar_id: str, day: str) -> DayReferences:
    return DayReferences(**_request("GET", _path("calendars", calendar_id, "days", day)))


def _get_day_items(calendar_id: str, day: str) -> DayItems:
    return DayItems(**_request("GET", _path("calendars", calendar_id, "days", day, "items")))


def _show_day(calendar_id: str, day: str) -> str:
    return ShowDayResponse(**_request("GET", _path("calendars", calendar_id, "days", day, "show"))).formatted_day


def _push_assignment(owner: str, assignment_id: str, class_id: str, name: str, due_date: str) -> PlacementResponse:
    """
    Mirror an assignment created or changed on the board and (re)place it on
    the owner's calendar. A changed due date moves it to the new day.
    """
    _put_assignment(assignment_id, class_id, name, due_date)
    placement = _place(owner, "assignment", assignment_id)
    logger.debug("Pushed assignment %s to %s", assignment_id, placement.day)
    return placement


def _push_office_hours(
    owner: str,
    office_hours_id: str,
    class_id: str,
    start_time: str,
    duration: int,
) -> PlacementResponse:
    """Mirror office hours from the board and (re)place them on the owner's calendar."""
    _put_office_hours(office_hours_id, class_id, start_time, duration)
    placement = _place(owner, "office_hours", office_hours_id)
    logger.debug("Pushed office hours %s to %s", office_hours_id, placement.day)
    return placement


@mcp.tool()
def push_assignment(owner: str, assignment_id: str, class_id: str, name: str, due_date: str) -> PlacementResponse:
    """Mirrors a board assignment and places it on the owner's calendar by due date."""
    return _push_assignment(owner, assignment_id, class_id, name, due_date)


@mcp.tool()
def push_office_hours(
    owner: str,
    office_hours_id: str,
    class_id: str,
    start_time: str,
    duration: int,
) -> PlacementResponse:
    """Mirrors board office hours and places them on the owner's calendar by start time."""
    return _push_office_hours(owner, office_hours_id, class_id, start_time, duration)


@mcp.tool()
def delete_entity(kind: t.Literal["assignment", "office_hours"], entity_id: str) -> None:
    """Deletes a mirror and removes it from every calendar."""
    _delete(kind, entity_id)


@mcp.tool()
def show_day(calendar_id: str, day: str) -> str:
    """Displays one calendar day as a formatted table."""
    return _show_day(calendar_id, day)


if __name__ == "__main__":
    mcp.run()
