"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from statuspage_sync.engine import TransitionEngine
from statuspage_sync.models import HealthReport, Incident, StatusPageConfig
from statuspage_sync.tracker import IncidentTracker

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def page_config():
    return StatusPageConfig(
        url="https://statuspage.test/v1",
        page_id="page1",
        api_key="secret",
        footer_message="<br/>footer",
        components={"api": "cmp_api", "db": "cmp_db"},
    )


@pytest.fixture
def tracker():
    return IncidentTracker()


@pytest.fixture
def engine(tracker, page_config):
    return TransitionEngine(tracker, page_config, clock=lambda: NOW)


def make_report(status, name="api", error="boom"):
    return HealthReport(name=name, display_name=name.upper(), status=status, error=error)


def make_incident(severity, name="api", incident_id="inc_1", status="in_progress"):
    return Incident(service_name=name, severity=severity, status=status, id=incident_id)
