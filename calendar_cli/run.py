"""Command line client for the calendar service.

Talks to a running calendar service over HTTP (see CALENDAR_SERVICE_URL) and
renders calendar days with rich.
"""
import asyncio
import json
import typing as t

import click
from rich.console import Console
from rich.json import JSON
from rich.table import Table

from mcp_wrappers.calendar import mcp_service
from registry import list_tool_schemas


console = Console()


def _fail(message: str) -> t.NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(1)


def render_day(owner: str, day: str) -> Table:
    """Fetch one day of an owner's calendar and build a table for it.

    Args:
        owner: Calendar owner
        day: Day as YYYY-MM-DD

    Returns:
        A rich Table with one row per assignment and office-hours slot

    Raises:
        RuntimeError: If the service call fails
    """
    calendar = mcp_service._get_calendar(owner)
    items = mcp_service._get_day_items(calendar.id, day)

    table = Table(title=f"📅 {owner} {items.day}")
    table.add_column("Kind", style="cyan")
    table.add_column("Class")
    table.add_column("What")
    table.add_column("Time (UTC)", justify="right")

    for assignment in items.assignments:
        table.add_row("Assignment", assignment.class_id, assignment.name, assignment.due_date[11:16])
    for slot in items.office_hours:
        table.add_row("Office hours", slot.class_id, f"{slot.duration} min", slot.start_time[11:16])

    if not items.assignments and not items.office_hours:
        table.caption = "Nothing scheduled"
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--url", envvar="CALENDAR_SERVICE_URL", default=None, help="Calendar service base URL.")
def cli(url: t.Optional[str]) -> None:
    """Class calendar client."""
    if url:
        mcp_service.CALENDAR_SERVICE_URL = url


@cli.command("show-day")
@click.argument("owner")
@click.argument("day")
def show_day(owner: str, day: str) -> None:
    """Show what is due or scheduled on DAY (YYYY-MM-DD) for OWNER.

    Examples:
        python -m calendar_cli.run show-day u1 2025-11-12
    """
    try:
        console.print(render_day(owner, day))
    except RuntimeError as e:
        _fail(str(e))


@cli.command("push-assignment")
@click.argument("owner")
@click.argument("assignment_id")
@click.option("--class-id", required=True, help="Class the assignment belongs to.")
@click.option("--name", required=True, help="Assignment name.")
@click.option("--due", "due_date", required=True, help="Due date (ISO-8601).")
def push_assignment(owner: str, assignment_id: str, class_id: str, name: str, due_date: str) -> None:
    """Mirror an assignment and place it on OWNER's calendar."""
    try:
        placement = mcp_service._push_assignment(owner, assignment_id, class_id, name, due_date)
    except RuntimeError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] {assignment_id} placed on {placement.day}")


@cli.command("push-office-hours")
@click.argument("owner")
@click.argument("office_hours_id")
@click.option("--class-id", required=True, help="Class the office hours belong to.")
@click.option("--start", "start_time", required=True, help="Start time (ISO-8601).")
@click.option("--duration", type=click.IntRange(min=0), required=True, help="Length in minutes.")
def push_office_hours(owner: str, office_hours_id: str, class_id: str, start_time: str, duration: int) -> None:
    """Mirror office hours and place them on OWNER's calendar."""
    try:
        placement = mcp_service._push_office_hours(owner, office_hours_id, class_id, start_time, duration)
    except RuntimeError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] {office_hours_id} placed on {placement.day}")


@cli.command()
@click.argument("kind", type=click.Choice(["assignment", "office_hours"]))
@click.argument("entity_id")
def delete(kind: str, entity_id: str) -> None:
    """Delete a mirrored entity and remove it from every calendar."""
    try:
        mcp_service._delete(kind, entity_id)
    except RuntimeError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] deleted {kind} {entity_id}")


@cli.command()
@click.argument("tool_names", nargs=-1, type=str)
def tools(tool_names: tuple[str, ...]) -> None:
    """Display the MCP tools exposed by the calendar servers.

    TOOL_NAMES: Optional tool names to show schemas for. Lists all names when omitted.
    """
    available_tools = asyncio.run(list_tool_schemas())

    if not tool_names:
        for tool in sorted(available_tools, key=lambda x: (x["server"], x["name"])):
            console.print(f"[cyan]{tool['server']}[/cyan].{tool['name']}")
        return

    for tool in available_tools:
        if tool["name"] in tool_names:
            console.print(f"\n[bold cyan]{tool['server']}.{tool['name']}[/bold cyan]\n")
            console.print(JSON(json.dumps(tool, indent=2)))


if __name__ == "__main__":
    cli()
