# -*- coding: utf-8 -*-
"""Shared fixtures for the calendar tests."""
import pytest
from fastapi.testclient import TestClient

from calendar_server.service import CalendarService
from services.calendar_service import app as app_module


@pytest.fixture
def service() -> CalendarService:
    """A fresh in-memory calendar service."""
    return CalendarService()


@pytest.fixture
def api_service(monkeypatch: pytest.MonkeyPatch) -> CalendarService:
    """Swap the REST app's module-level service for a fresh one."""
    fresh = CalendarService()
    monkeypatch.setattr(app_module, "service", fresh)
    return fresh


@pytest.fixture
def client(api_service: CalendarService):
    """TestClient bound to the REST app with a fresh service."""
    with TestClient(app_module.app) as test_client:
        yield test_client
