import asyncio

import pytest

from ehr_dashboard.models import Bundle
from ehr_dashboard.services.fhir_client import FhirApiError
from ehr_dashboard.services.patient_service import (
    PatientListView, filter_patients, patients_to_dataframe
)


class FakePatientClient:
    """Stands in for FhirClient; each call waits on its own gate."""

    def __init__(self, bundle_json):
        self.bundle_json = bundle_json
        self.calls = []
        self.gates = []
        self.fail_with = None

    async def search_patients(self, params=None):
        self.calls.append(params)
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        if self.fail_with:
            raise self.fail_with
        return Bundle.model_validate(self.bundle_json)


def test_conjunctive_filter(patients):
    result = filter_patients(patients, {"gender": "female", "identifier": "77"})
    assert [p.id for p in result] == ["PAT001"]


def test_filters_by_name_birthdate_and_active(patients):
    assert [p.id for p in filter_patients(patients, {"name": "marie sm"})] == ["PAT001"]
    assert [p.id for p in filter_patients(patients, {"birthdate": "1992-07-21"})] == ["PAT003"]
    assert [p.id for p in filter_patients(patients, {"active": False})] == ["PAT002"]
    assert [p.id for p in filter_patients(patients, {"identifier": "pat00"})] == ["PAT001", "PAT002", "PAT003"]


def test_no_active_filters_returns_everything(patients):
    assert filter_patients(patients, {"name": "", "gender": "all"}) == patients
    assert filter_patients(patients, None) == patients


def test_dataframe_columns(patients):
    frame = patients_to_dataframe(patients)
    assert list(frame["PATIENT_ID"]) == ["PAT001", "PAT002", "PAT003"]
    assert frame.loc[0, "IDENTIFIER"] == "MRN00177"
    assert frame.loc[1, "STATUS"] == "Inactive"


@pytest.mark.asyncio
async def test_loading_flag_tracks_request(patient_bundle_json):
    client = FakePatientClient(patient_bundle_json)
    view = PatientListView(client)
    assert view.loading is False

    task = asyncio.create_task(view.load())
    await asyncio.sleep(0)
    assert view.loading is True

    client.gates[0].set()
    await task
    assert view.loading is False
    assert view.loaded
    assert view.total == 3
    assert len(view.filtered_patients) == 3


@pytest.mark.asyncio
async def test_stale_response_is_discarded(patient_bundle_json):
    client = FakePatientClient(patient_bundle_json)
    view = PatientListView(client, search_mode="remote")

    first = asyncio.create_task(view.search({"name": "jane"}))
    await asyncio.sleep(0)
    second = asyncio.create_task(view.search({"gender": "male"}))
    await asyncio.sleep(0)

    client.gates[1].set()
    await second
    assert view.loading is False
    assert [p.id for p in view.filtered_patients] == ["PAT002"]

    client.gates[0].set()
    await first
    assert view.filters == {"gender": "male"}
    assert [p.id for p in view.filtered_patients] == ["PAT002"]


@pytest.mark.asyncio
async def test_loading_stays_up_while_latest_in_flight(patient_bundle_json):
    client = FakePatientClient(patient_bundle_json)
    view = PatientListView(client)

    first = asyncio.create_task(view.load())
    await asyncio.sleep(0)
    second = asyncio.create_task(view.load())
    await asyncio.sleep(0)

    client.gates[0].set()
    await first
    assert view.loading is True

    client.gates[1].set()
    await second
    assert view.loading is False


@pytest.mark.asyncio
async def test_error_keeps_previous_data(patient_bundle_json):
    client = FakePatientClient(patient_bundle_json)
    view = PatientListView(client)

    task = asyncio.create_task(view.load())
    await asyncio.sleep(0)
    client.gates[0].set()
    await task

    client.fail_with = FhirApiError("Request failed with status code 500", status_code=500)
    task = asyncio.create_task(view.load())
    await asyncio.sleep(0)
    client.gates[1].set()
    await task

    assert view.error == "Server error. Please try again."
    assert view.loading is False
    assert len(view.all_patients) == 3


@pytest.mark.asyncio
async def test_local_search_filters_in_memory(patient_bundle_json):
    client = FakePatientClient(patient_bundle_json)
    view = PatientListView(client)
    task = asyncio.create_task(view.load())
    await asyncio.sleep(0)
    client.gates[0].set()
    await task

    await view.search({"gender": "female", "identifier": "77", "name": ""})
    assert [p.id for p in view.filtered_patients] == ["PAT001"]
    assert len(client.calls) == 1

    await view.reset()
    assert view.filters == {}
    assert len(view.filtered_patients) == 3


def test_demo_data_keeps_filters(patients):
    view = PatientListView(client=None)
    view.apply_filters({"gender": "female"})
    view.use_demo_data(patients)
    assert view.showing_demo_data
    assert [p.id for p in view.filtered_patients] == ["PAT001", "PAT003"]


@pytest.mark.asyncio
async def test_failed_remote_search_keeps_previous_filters(patient_bundle_json):
    client = FakePatientClient(patient_bundle_json)
    view = PatientListView(client, search_mode="remote")

    task = asyncio.create_task(view.search({"gender": "male"}))
    await asyncio.sleep(0)
    client.gates[0].set()
    await task
    assert view.filters == {"gender": "male"}

    client.fail_with = FhirApiError("Request failed with status code 503", status_code=503)
    task = asyncio.create_task(view.search({"gender": "female"}))
    await asyncio.sleep(0)
    client.gates[1].set()
    await task

    assert view.error == "Server error. Please try again."
    assert view.filters == {"gender": "male"}
    assert [p.id for p in view.filtered_patients] == ["PAT002"]
    assert client.calls[1] == {"gender": "female"}
