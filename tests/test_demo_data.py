from datetime import date

from ehr_dashboard.services.demo_data import DemoDataGenerator, demo_dataset
from ehr_dashboard.services.patient_service import filter_patients


def test_seeded_generation_is_reproducible():
    first = demo_dataset(seed=7)
    second = demo_dataset(seed=7)
    assert [p.display_name for p in first["patients"]] == [p.display_name for p in second["patients"]]
    assert [a.start for a in first["appointments"]] == [a.start for a in second["appointments"]]


def test_patients_are_fhir_shaped():
    patients = DemoDataGenerator(seed=1).patients(count=5)
    assert [p.id for p in patients] == ["PAT001", "PAT002", "PAT003", "PAT004", "PAT005"]
    for patient in patients:
        assert patient.preferred_identifier.startswith("MRN")
        assert patient.phone and patient.email
        assert patient.gender in ("male", "female")
    assert filter_patients(patients, {"identifier": "PAT003"})[0].id == "PAT003"


def test_appointments_reference_patients_and_stay_in_window():
    generator = DemoDataGenerator(seed=3)
    patients = generator.patients(count=4)
    today = date(2024, 6, 10)
    appointments = generator.appointments(patients, count=20, today=today)

    names = {p.display_name for p in patients}
    assert len(appointments) == 20
    for appt in appointments:
        assert appt.patient_name in names
        assert -2 <= (appt.start.date() - today).days <= 4
        assert appt.end > appt.start
