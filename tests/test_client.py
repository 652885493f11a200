import httpx
import pytest
import respx

from ehr_dashboard.models import Appointment, Bundle
from ehr_dashboard.services.fhir_client import (
    FHIR_HEADERS, FhirApiError, FhirClient, handle_api_error, patients_from_bundle
)

BASE = "http://localhost:3001"


@pytest.mark.asyncio
async def test_search_patients_sends_fhir_query(patient_bundle_json):
    client = FhirClient(BASE)
    with respx.mock(base_url=BASE) as m:
        route = m.get("/Patient").respond(200, json=patient_bundle_json)

        bundle = await client.search_patients({"name": "Jane Smith", "gender": "female", "active": True})

        assert isinstance(bundle, Bundle)
        assert bundle.total == 3
        request = route.calls.last.request
        assert request.url.query == b"name=Jane%20Smith&gender=female"
        assert request.headers["accept"] == FHIR_HEADERS["Accept"]
        assert request.headers["content-type"] == FHIR_HEADERS["Content-Type"]


@pytest.mark.asyncio
async def test_search_patients_without_filters_has_no_query(patient_bundle_json):
    client = FhirClient(BASE + "/")
    with respx.mock(base_url=BASE) as m:
        route = m.get("/Patient").respond(200, json=patient_bundle_json)

        patients = patients_from_bundle(await client.search_patients())

        assert str(route.calls.last.request.url) == f"{BASE}/Patient"
        assert [p.id for p in patients] == ["PAT001", "PAT002", "PAT003"]


@pytest.mark.asyncio
async def test_get_patient(patient_bundle_json):
    resource = patient_bundle_json["entry"][0]["resource"]
    with respx.mock(base_url=BASE) as m:
        m.get("/Patient/PAT001").respond(200, json=resource)

        patient = await FhirClient(BASE).get_patient("PAT001")

        assert patient.display_name == "Jane Marie Smith"
        assert patient.preferred_identifier == "MRN00177"


@pytest.mark.asyncio
async def test_get_patient_rejects_bad_id_before_request():
    with respx.mock(assert_all_called=False) as m:
        route = m.route()
        with pytest.raises(ValueError):
            await FhirClient(BASE).get_patient("../etc/passwd")
        assert not route.called


@pytest.mark.asyncio
async def test_list_appointments_adapts_both_shapes(appointment_bundle_json):
    with respx.mock(base_url=BASE) as m:
        m.get("/Appointment").respond(200, json=appointment_bundle_json)

        appointments = await FhirClient(BASE).list_appointments()

    assert all(isinstance(a, Appointment) for a in appointments)
    flattened, participant = appointments
    assert flattened.patient_name == "Jane Smith"
    assert flattened.provider_specialty == "Primary Care"
    assert participant.patient_name == "Robert Jones"
    assert participant.patient_id == "PAT002"
    assert participant.provider_name == "Dr. James Carter"
    assert participant.description == "Follow-up visit"


@pytest.mark.asyncio
async def test_not_found_maps_to_message():
    with respx.mock(base_url=BASE) as m:
        m.get("/Patient/missing").respond(404, text="Not Found")

        with pytest.raises(FhirApiError) as exc:
            await FhirClient(BASE).get_patient("missing")

    assert exc.value.status_code == 404
    assert handle_api_error(exc.value) == "Resource not found."


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 422, 500])
async def test_operation_outcome_wins_over_status(status):
    outcome = {
        "resourceType": "OperationOutcome",
        "issue": [{"severity": "error", "code": "invalid", "details": {"text": "bad MRN"}}],
    }
    with respx.mock(base_url=BASE) as m:
        m.get("/Patient").respond(status, json=outcome)

        with pytest.raises(FhirApiError) as exc:
            await FhirClient(BASE).search_patients({"identifier": "x"})

    assert handle_api_error(exc.value) == "bad MRN"


@pytest.mark.asyncio
async def test_server_error_message():
    with respx.mock(base_url=BASE) as m:
        m.get("/Appointment").respond(503)

        with pytest.raises(FhirApiError) as exc:
            await FhirClient(BASE).list_appointments()

    assert handle_api_error(exc.value) == "Server error. Please try again."


@pytest.mark.asyncio
async def test_timeout_becomes_api_error():
    with respx.mock(base_url=BASE) as m:
        m.get("/Patient").mock(side_effect=httpx.ConnectTimeout)

        with pytest.raises(FhirApiError) as exc:
            await FhirClient(BASE, timeout=10).search_patients()

    assert exc.value.status_code is None
    assert handle_api_error(exc.value) == "timeout of 10000ms exceeded"


@pytest.mark.asyncio
async def test_malformed_bundle():
    with respx.mock(base_url=BASE) as m:
        m.get("/Appointment").respond(200, json={"resourceType": "Bundle", "entry": "nope"})

        with pytest.raises(FhirApiError) as exc:
            await FhirClient(BASE).list_appointments()

    assert handle_api_error(exc.value) == "Unexpected response format from server"


def test_handle_api_error_fallbacks():
    assert handle_api_error(FhirApiError("x", status_code=401)) == "Authentication required."
    assert handle_api_error(FhirApiError("x", status_code=403)) == "Access denied."
    assert handle_api_error(FhirApiError("x", status_code=429)) == "Too many requests. Please try again later."
    assert handle_api_error(FhirApiError("")) == "Network error occurred."
    outcome = {"resourceType": "OperationOutcome", "issue": [{"diagnostics": "MRN checksum failed"}]}
    assert handle_api_error(FhirApiError("x", status_code=400, body=outcome)) == "MRN checksum failed"
    empty_issue = {"resourceType": "OperationOutcome", "issue": [{}]}
    assert handle_api_error(FhirApiError("x", status_code=400, body=empty_issue)) == "An error occurred"


@pytest.mark.parametrize("body,expected", [
    ({"resourceType": "OperationOutcome", "issue": {"details": {"text": "bad MRN"}}}, "Invalid request. Please check your input."),
    ({"resourceType": "OperationOutcome", "issue": ["bad MRN"]}, "An error occurred"),
    ({"resourceType": "OperationOutcome", "issue": [{"details": "bad MRN"}]}, "An error occurred"),
])
def test_malformed_outcome_does_not_raise(body, expected):
    error = FhirApiError("Request failed with status code 400", status_code=400, body=body)
    assert handle_api_error(error) == expected


@pytest.mark.asyncio
async def test_get_patient_accepts_opaque_ids(patient_bundle_json):
    resource = dict(patient_bundle_json["entry"][0]["resource"], id="pat_001")
    with respx.mock(base_url=BASE) as m:
        route = m.get("/Patient/pat_001").respond(200, json=resource)

        patient = await FhirClient(BASE).get_patient("pat_001")

    assert route.called
    assert patient.id == "pat_001"
