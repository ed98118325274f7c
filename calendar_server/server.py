# -*- coding: utf-8 -*-
import typing as t

from fastmcp import FastMCP

from calendar_server.models import (
    AssignmentFields,
    Calendar,
    CreateAssignment,
    CreateOfficeHours,
    DayReferences,
    EntityKind,
    OfficeHoursFields,
    UpdateAssignment,
    UpdateOfficeHours,
)
from calendar_server.service import CalendarService
from calendar_server.views import format_day

mcp = FastMCP("CalendarServer")

service = CalendarService()


def _unwrap(result) -> t.Any:
    """Returns the value of an Ok result, raising RuntimeError for errors."""
    if not result.is_ok:
        raise RuntimeError(f"{type(result).__name__}: {result.message}")
    return result.value


@mcp.tool()
def create_calendar(owner: str) -> Calendar:
    """Creates the calendar for an owner.

    :param owner: The owner's user id.
    :return: The new Calendar.
    """
    return _unwrap(service.create_calendar(owner))


@mcp.tool()
def upsert_assignment(
        class_id: str,
        name: str,
        due_date: str,
        assignment_id: str = ""
) -> str:
    """Creates or replaces an assignment mirror.

    :param class_id: Class the assignment belongs to.
    :param name: Assignment name.
    :param due_date: Due date in ISO format.
    :param assignment_id: Id used by the board service (optional; generated when empty).
    :return: The assignment id.
    """
    fields = AssignmentFields(class_id=class_id, name=name, due_date=due_date)
    upsert = UpdateAssignment(assignment_id, fields) if assignment_id else CreateAssignment(fields)
    return _unwrap(service.upsert_assignment(upsert))


@mcp.tool()
def upsert_office_hours(
        class_id: str,
        start_time: str,
        duration: int,
        office_hours_id: str = ""
) -> str:
    """Creates or replaces an office-hours mirror.

    :param class_id: Class the office hours belong to.
    :param start_time: Start time in ISO format.
    :param duration: Length in minutes.
    :param office_hours_id: Id used by the board service (optional; generated when empty).
    :return: The office hours id.
    """
    fields = OfficeHoursFields(class_id=class_id, start_time=start_time, duration=duration)
    upsert = UpdateOfficeHours(office_hours_id, fields) if office_hours_id else CreateOfficeHours(fields)
    return _unwrap(service.upsert_office_hours(upsert))


@mcp.tool()
def assign_assignment(owner: str, assignment_id: str) -> str:
    """Places an assignment on its due day in the owner's calendar.

    :return: The day key it was placed on.
    """
    return _unwrap(service.assign(owner, assignment_id))


@mcp.tool()
def assign_office_hours(owner: str, office_hours_id: str) -> str:
    """Places office hours on their start day in the owner's calendar.

    :return: The day key they were placed on.
    """
    return _unwrap(service.assign_office_hours(owner, office_hours_id))


@mcp.tool()
def unassign_assignment(owner: str, assignment_id: str) -> None:
    """Takes an assignment off the owner's calendar."""
    _unwrap(service.unassign(owner, assignment_id))


@mcp.tool()
def remove_office_hours(owner: str, office_hours_id: str) -> None:
    """Takes office hours off the owner's calendar."""
    _unwrap(service.remove_office_hours(owner, office_hours_id))


@mcp.tool()
def delete_assignment(assignment_id: str) -> None:
    """Deletes an assignment mirror and removes it from every calendar."""
    _unwrap(service.delete_entity(assignment_id, EntityKind.ASSIGNMENT))


@mcp.tool()
def delete_office_hours(office_hours_id: str) -> None:
    """Deletes an office-hours mirror and removes it from every calendar."""
    _unwrap(service.delete_entity(office_hours_id, EntityKind.OFFICE_HOURS))


@mcp.tool()
def get_references_on_day(calendar_id: str, day: str) -> DayReferences:
    """Lists the assignment and office-hours ids placed on a day.

    :param calendar_id: Calendar id.
    :param day: Day as YYYY-MM-DD (or any ISO timestamp on that day, UTC).
    :return: DayReferences with both id lists.
    """
    return _unwrap(service.get_references_on_day(calendar_id, day))


@mcp.tool()
def show_day(calendar_id: str, day: str) -> str:
    """Displays a calendar day in a formatted view.

    Returns a table of the day's assignments (ordered by due time) followed
    by its office hours (ordered by start time).

    :return: Formatted string, or a message if nothing is scheduled.
    """
    try:
        return format_day(service, calendar_id, day)
    except ValueError as e:
        raise RuntimeError(f"ValidationError: {e}")


if __name__ == "__main__":
    mcp.run()
