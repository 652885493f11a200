from datetime import date, datetime, timedelta, timezone

import pytest
import respx

from ehr_dashboard.components.analytics_widgets import time_ago
from ehr_dashboard.models import Appointment
from ehr_dashboard.services.dashboard_service import DashboardView
from ehr_dashboard.services.fhir_client import FhirClient

PATIENTS = "http://localhost:3001"
APPOINTMENTS = "http://localhost:3002"
TODAY = date(2024, 1, 2)
NOW = datetime(2024, 1, 2, 12, 0, tzinfo=timezone.utc)


def appointment(id, start, status):
    return Appointment(id=id, status=status, start=start, end=start + timedelta(minutes=30))


def make_view():
    return DashboardView(FhirClient(PATIENTS), FhirClient(APPOINTMENTS))


@pytest.mark.asyncio
async def test_loads_both_feeds(patient_bundle_json, appointment_bundle_json):
    view = make_view()
    with respx.mock() as m:
        m.get(f"{PATIENTS}/Patient").respond(200, json=patient_bundle_json)
        m.get(f"{APPOINTMENTS}/Appointment").respond(200, json=appointment_bundle_json)

        await view.load()

    assert view.loaded and not view.loading
    assert view.errors == {}
    stats = view.stats(TODAY)
    assert stats == {
        "total_patients": 3,
        "today_appointments": 1,
        "upcoming_today": 1,
        "completed_today": 0,
    }


@pytest.mark.asyncio
async def test_feed_failures_are_independent(appointment_bundle_json):
    view = make_view()
    with respx.mock() as m:
        m.get(f"{PATIENTS}/Patient").respond(500)
        m.get(f"{APPOINTMENTS}/Appointment").respond(200, json=appointment_bundle_json)

        await view.load()

    assert view.errors == {"patients": "Server error. Please try again."}
    assert len(view.appointments) == 2
    assert view.stats(TODAY)["total_patients"] == 0


def test_stats_and_schedule():
    view = make_view()
    utc = timezone.utc
    view.use_demo_data(["p1", "p2"], [
        appointment("a", datetime(2024, 1, 2, 15, 0, tzinfo=utc), "booked"),
        appointment("b", datetime(2024, 1, 2, 8, 0, tzinfo=utc), "fulfilled"),
        appointment("c", datetime(2024, 1, 2, 10, 0, tzinfo=utc), "cancelled"),
        appointment("d", datetime(2024, 1, 3, 9, 0, tzinfo=utc), "booked"),
    ])

    assert view.stats(TODAY) == {
        "total_patients": 2,
        "today_appointments": 3,
        "upcoming_today": 1,
        "completed_today": 1,
    }
    assert [a.id for a in view.todays_schedule(TODAY)] == ["b", "c", "a"]


def test_recent_activity_most_recent_first():
    view = make_view()
    utc = timezone.utc
    view.use_demo_data([], [
        appointment("older", datetime(2024, 1, 1, 9, 0, tzinfo=utc), "fulfilled"),
        appointment("recent", datetime(2024, 1, 2, 11, 0), "arrived"),
        appointment("future", datetime(2024, 1, 2, 13, 0, tzinfo=utc), "booked"),
        appointment("oldest", datetime(2023, 12, 30, 9, 0, tzinfo=utc), "noshow"),
    ])

    assert [a.id for a in view.recent_activity(limit=2, now=NOW)] == ["recent", "older"]
    assert len(view.recent_activity(now=NOW)) == 3


def test_time_ago_labels():
    assert time_ago(NOW - timedelta(seconds=20), now=NOW) == "just now"
    assert time_ago(NOW - timedelta(minutes=1), now=NOW) == "1 minute ago"
    assert time_ago(datetime(2024, 1, 2, 9, 0), now=NOW) == "3 hours ago"
    assert time_ago(NOW - timedelta(days=2), now=NOW) == "2 days ago"
