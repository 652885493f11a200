import pytest
from pydantic import ValidationError

from ehr_dashboard.models import Patient, appointment_from_resource


def test_patient_display_properties(patients):
    jane = patients[0]
    assert jane.display_name == "Jane Marie Smith"
    assert jane.preferred_identifier == "MRN00177"
    assert jane.phone == "555-123-4567"
    assert jane.email == "jane.smith@example.com"
    assert jane.formatted_address == "123 Main St, Boston, MA 02101"
    assert jane.birth_date.isoformat() == "1985-03-15"


def test_patient_without_name_or_address():
    patient = Patient.model_validate({"resourceType": "Patient", "id": "X1"})
    assert patient.display_name == "Unknown"
    assert patient.preferred_identifier is None
    assert patient.phone is None
    assert patient.formatted_address == "No address on file"


def test_patient_rejects_unknown_gender():
    with pytest.raises(ValidationError):
        Patient.model_validate({"resourceType": "Patient", "gender": "robot"})


def test_first_identifier_when_no_mrn():
    patient = Patient.model_validate({"identifier": [{"value": "A1"}, {"value": "B2"}]})
    assert patient.preferred_identifier == "A1"


def test_flattened_appointment_shape(appointments):
    appt = appointments[0]
    assert appt.id == "APT001"
    assert appt.patient_id == "PAT001"
    assert appt.allergies == ["Penicillin"]
    assert appt.minutes_duration == 30
    assert appt.provider_name == "Dr. Sarah Wilson"


def test_participant_shape_defaults():
    appt = appointment_from_resource({
        "id": "A9",
        "status": "pending",
        "start": "2024-02-01T10:00:00Z",
        "end": "2024-02-01T10:20:00Z",
        "participant": [{"actor": {"reference": "Patient/P9"}}],
    })
    assert appt.patient_id == "P9"
    assert appt.patient_name == "Unknown Patient"
    assert appt.minutes_duration == 30


def test_participant_without_subject():
    appt = appointment_from_resource({
        "id": "A10",
        "status": "booked",
        "start": "2024-02-01T10:00:00Z",
        "end": "2024-02-01T10:20:00Z",
        "participant": [{"actor": {"reference": "Location/L1", "display": "Room 4"}}],
    })
    assert appt.patient_id is None
    assert appt.patient_name == "Unknown Patient"
