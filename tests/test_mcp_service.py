# -*- coding: utf-8 -*-
"""Tests for the calendar service HTTP wrapper.

The wrapper's httpx client is swapped for a TestClient bound to the REST
app, so requests go through the real routes without a network.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from calendar_server.service import CalendarService
from mcp_wrappers.calendar import mcp_service
from services.calendar_service import app as app_module


@pytest.fixture
def wired(monkeypatch: pytest.MonkeyPatch, api_service: CalendarService) -> CalendarService:
    """Route the wrapper's HTTP calls to the in-process REST app."""
    monkeypatch.setattr(mcp_service, "_client", lambda: TestClient(app_module.app))
    return api_service


def test_push_assignment_places_and_moves(wired: CalendarService) -> None:
    calendar = mcp_service._create_calendar("u1")

    placement = mcp_service._push_assignment("u1", "a1", "c1", "Pset1", "2025-11-12")
    assert placement.day == "2025-11-12"
    assert mcp_service._get_references_on_day(calendar.id, "2025-11-12").assignments == ["a1"]

    mcp_service._push_assignment("u1", "a1", "c1", "Pset1", "2025-11-19")
    assert mcp_service._get_references_on_day(calendar.id, "2025-11-12").assignments == []
    assert mcp_service._get_references_on_day(calendar.id, "2025-11-19").assignments == ["a1"]

    # The shared id is the one the board service supplied
    assert wired.get_assignment("a1").name == "Pset1"
    assert mcp_service._get_assignment("a1").due_date.startswith("2025-11-19")


@pytest.mark.parametrize("board_id", ["pset#3", "quiz?v=2", "unit-2/pset 3", "50%"])
def test_board_ids_with_reserved_characters_round_trip(wired: CalendarService, board_id: str) -> None:
    """Ids are mirrored and placed under exactly the id the board service uses."""
    calendar = mcp_service._create_calendar("u1")

    placement = mcp_service._push_assignment("u1", board_id, "c1", "Pset3", "2025-11-12")
    assert placement.entity_id == board_id
    assert wired.get_assignment(board_id).name == "Pset3"
    assert mcp_service._get_assignment(board_id).id == board_id
    assert mcp_service._get_references_on_day(calendar.id, "2025-11-12").assignments == [board_id]

    mcp_service._push_office_hours("u1", board_id, "c1", "2025-11-12T15:00:00Z", 30)
    assert mcp_service._get_office_hours(board_id).id == board_id

    mcp_service._delete("assignment", board_id)
    assert wired.get_assignment(board_id) is None
    assert mcp_service._get_references_on_day(calendar.id, "2025-11-12").assignments == []


def test_push_office_hours(wired: CalendarService) -> None:
    calendar = mcp_service._create_calendar("u1")
    placement = mcp_service._push_office_hours("u1", "oh1", "c1", "2025-11-12T15:00:00Z", 45)

    assert placement.kind == "office_hours"
    items = mcp_service._get_day_items(calendar.id, "2025-11-12")
    assert [o.id for o in items.office_hours] == ["oh1"]
    assert mcp_service._get_office_hours("oh1").duration == 45


def test_delete_and_unplace(wired: CalendarService) -> None:
    calendar = mcp_service._create_calendar("u1")
    mcp_service._push_assignment("u1", "a1", "c1", "Pset1", "2025-11-12")
    mcp_service._push_assignment("u1", "a2", "c1", "Pset2", "2025-11-12")

    assert mcp_service._unplace("u1", "assignment", "a2").day is None
    assert mcp_service._delete("assignment", "a1") is None
    assert mcp_service._get_references_on_day(calendar.id, "2025-11-12").assignments == []
    assert wired.get_assignment("a2") is not None


def test_show_day(wired: CalendarService) -> None:
    calendar = mcp_service._create_calendar("u1")
    mcp_service._push_assignment("u1", "a1", "c1", "Pset1", "2025-11-12T17:00:00Z")
    assert "Pset1" in mcp_service._show_day(calendar.id, "2025-11-12")


def test_http_errors_become_runtime_errors(wired: CalendarService) -> None:
    with pytest.raises(RuntimeError, match="404"):
        mcp_service._push_assignment("nobody", "a1", "c1", "Pset1", "2025-11-12")

    with pytest.raises(RuntimeError, match="422"):
        mcp_service._put_assignment("a1", "c1", "Pset1", "not a date")

    mcp_service._create_calendar("u1")
    with pytest.raises(RuntimeError, match="409"):
        mcp_service._create_calendar("u1")


def test_timeouts_become_runtime_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    monkeypatch.setattr(
        mcp_service,
        "_client",
        lambda: httpx.Client(base_url="http://calendar.test", transport=httpx.MockTransport(handler)),
    )
    with pytest.raises(RuntimeError, match="timed out"):
        mcp_service._get_calendar("u1")


def test_connection_errors_become_runtime_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    monkeypatch.setattr(
        mcp_service,
        "_client",
        lambda: httpx.Client(base_url="http://calendar.test", transport=httpx.MockTransport(handler)),
    )
    with pytest.raises(RuntimeError, match="Error calling calendar service"):
        mcp_service._get_calendar("u1")
