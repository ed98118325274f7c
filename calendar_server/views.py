# -*- coding: utf-8 -*-
"""Plain-text rendering of a calendar day."""
from __future__ import annotations

from datetime import datetime

from calendar_server.dayindex import Timestamp
from calendar_server.service import CalendarService


def _format_time(dt: datetime) -> str:
    """Formats a datetime as e.g. '2:30 PM'."""
    return dt.strftime("%I:%M %p").lstrip("0")


def format_day(service: CalendarService, calendar_id: str, day: Timestamp) -> str:
    """Formats one calendar day as a clean table.

    :param service: Service holding the calendar.
    :param calendar_id: Calendar id.
    :param day: Day key or any timestamp on that day.
    :return: Formatted table of the day's assignments and office hours.
    :raises ValueError: If the day can not be parsed.
    """
    schedule = service.get_day_items(calendar_id, day)
    if not schedule.is_ok:
        raise ValueError(schedule.message)
    assignments, office_hours = schedule.value.assignments, schedule.value.office_hours

    if not assignments and not office_hours:
        return "📅 Nothing scheduled."

    lines = []
    lines.append("📅 DAY VIEW")
    lines.append("=" * 80)
    lines.append(f"{'Kind':<14} {'Class':<20} {'What':<30} {'Time (UTC)':<12}")
    lines.append("-" * 80)

    for assignment in assignments:
        name = assignment.name[:29] if len(assignment.name) > 29 else assignment.name
        lines.append(
            f"{'Assignment':<14} {assignment.class_id[:19]:<20} {name:<30} "
            f"{_format_time(assignment.due_date):<12}"
        )
    for slot in office_hours:
        lines.append(
            f"{'Office hours':<14} {slot.class_id[:19]:<20} {f'{slot.duration} min':<30} "
            f"{_format_time(slot.start_time):<12}"
        )

    lines.append("=" * 80)
    lines.append(f"Total: {len(assignments)} assignment(s), {len(office_hours)} office hour slot(s)")
    return "\n".join(lines)
