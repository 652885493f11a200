"""Page-level checks driven through Streamlit's AppTest harness, in offline mode."""

from streamlit.testing.v1 import AppTest


def patients_app():
    import streamlit as st

    from ehr_dashboard.page_modules import patients
    from ehr_dashboard.services import session_manager

    session_manager.initialize_services({
        "app": {"offline_mode": True, "search_debounce_ms": 50},
        "api": {},
        "features": {},
    })

    # record what the debounced panel hands to the page
    calls = st.session_state.setdefault("panel_calls", [])
    original_search, original_reset = patients._search, patients._reset
    patients._search = lambda view, filters: calls.append(("search", filters))
    patients._reset = lambda view: calls.append("clear")
    try:
        patients.render()
    finally:
        patients._search, patients._reset = original_search, original_reset


def appointments_app():
    from ehr_dashboard.page_modules import appointments
    from ehr_dashboard.services import session_manager

    session_manager.initialize_services({"app": {"offline_mode": True}, "api": {}, "features": {}})
    appointments.render()


def run(script):
    at = AppTest.from_function(script, default_timeout=30)
    at.run()
    assert not at.exception
    return at


def test_patients_mount_fires_no_search():
    at = run(patients_app)
    assert at.session_state["panel_calls"] == []

    at.run()
    assert at.session_state["panel_calls"] == []


def test_patients_typing_fires_one_search():
    at = run(patients_app)

    at.text_input(key="patient_search_name").input("ana").run()

    assert at.session_state["panel_calls"] == [("search", {"name": "ana"})]


def test_patient_view_opens_details():
    at = run(patients_app)
    assert not any(b.label == "Close" for b in at.button)

    next(b for b in at.button if b.label == "View").click().run()

    assert at.session_state["selected_patient_id"] == "PAT001"
    assert any(b.label == "Close" for b in at.button)

    next(b for b in at.button if b.label == "Close").click().run()
    assert not any(b.label == "Close" for b in at.button)


def test_appointment_view_opens_details():
    at = run(appointments_app)
    assert not any(s.value.startswith("Appointment #") for s in at.subheader)

    next(b for b in at.button if b.label == "View").click().run()

    assert any(s.value.startswith("Appointment #") for s in at.subheader)
