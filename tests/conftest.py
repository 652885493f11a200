"""Shared fixtures for the dashboard test suite."""

import json
import pathlib

import pytest

from ehr_dashboard.models import Bundle, appointment_from_resource
from ehr_dashboard.services.fhir_client import patients_from_bundle

FIX = pathlib.Path(__file__).parent / "fixtures"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def patient_bundle_json():
    return json.loads((FIX / "patient_bundle.json").read_text())


@pytest.fixture
def appointment_bundle_json():
    return json.loads((FIX / "appointment_bundle.json").read_text())


@pytest.fixture
def patients(patient_bundle_json):
    return patients_from_bundle(Bundle.model_validate(patient_bundle_json))


@pytest.fixture
def appointments(appointment_bundle_json):
    return [appointment_from_resource(e["resource"]) for e in appointment_bundle_json["entry"]]
