"""
Patients Page for the EHR Dashboard

Patient listing with a debounced search panel. The collection is fetched
once when the page mounts; each settled search re-derives the visible
patients, either in memory or by asking the API again depending on the
configured search mode.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import streamlit as st

from ehr_dashboard.components import patient_cards, search_widgets
from ehr_dashboard.models import Patient
from ehr_dashboard.services import FhirApiError, handle_api_error, session_manager
from ehr_dashboard.services.patient_service import PatientListView, patients_to_dataframe
from ehr_dashboard.utils.config import DEFAULT_SEARCH_DEBOUNCE_MS

logger = logging.getLogger(__name__)

PAGE = 'patients'
SELECTED_KEY = 'selected_patient_id'
SEARCH_KEY = 'patient_search'


def render():
    """Entry point called by main.py"""
    render_patients()


def _get_view() -> PatientListView:
    app_config = session_manager.app_config
    view = session_manager.page_state(PAGE, 'view', lambda: PatientListView(
        session_manager.get_patient_client(),
        search_mode=app_config.get('patient_search_mode', 'local')
    ))
    if view.loaded:
        return view

    if session_manager.offline_mode:
        view.use_demo_data(session_manager.demo_data()['patients'])
        return view

    with st.spinner("Loading patients..."):
        asyncio.run(view.load())

    if view.error and not view.loaded and session_manager.get_feature_flag('enable_demo_fallback'):
        logger.warning("Patient load failed, falling back to demo data")
        view.use_demo_data(session_manager.demo_data()['patients'])
    return view


def _search(view: PatientListView, filters: Dict[str, Any]) -> None:
    if view.showing_demo_data:
        view.apply_filters(filters)
    else:
        asyncio.run(view.search(filters))


def _reset(view: PatientListView) -> None:
    if view.showing_demo_data:
        view.clear_filters()
    else:
        asyncio.run(view.reset())


def _get_panel(view: PatientListView) -> search_widgets.SearchPanel:
    debounce_ms = session_manager.app_config.get('search_debounce_ms', DEFAULT_SEARCH_DEBOUNCE_MS)
    return session_manager.page_state(PAGE, 'panel', lambda: search_widgets.SearchPanel(
        on_search=lambda filters: _search(view, filters),
        on_clear=lambda: _reset(view),
        debounce_ms=debounce_ms,
        initial=search_widgets.collect_filters(SEARCH_KEY),
    ))


def _select_patient(patient: Patient) -> None:
    st.session_state[SELECTED_KEY] = patient.id


def _clear_selection() -> None:
    st.session_state.pop(SELECTED_KEY, None)


def _load_selected(view: PatientListView, patient_id: str) -> Optional[Patient]:
    cached = next((p for p in view.all_patients if p.id == patient_id), None)
    if view.showing_demo_data:
        return cached

    details = session_manager.page_state(PAGE, 'details', dict)
    if patient_id in details:
        return details[patient_id]

    try:
        details[patient_id] = asyncio.run(session_manager.get_patient_client().get_patient(patient_id))
        return details[patient_id]
    except ValueError as e:
        st.warning(str(e))
    except FhirApiError as e:
        logger.error(f"Error loading patient {patient_id}: {e}")
        st.warning(f"Showing cached record: {handle_api_error(e)}")
    return cached


def render_patients():
    st.title("👥 Patients")
    st.markdown("Search and browse patient records")

    view = _get_view()
    panel = _get_panel(view)

    search_widgets.render_search_panel(panel, key=SEARCH_KEY, loading=view.loading)

    if view.error:
        st.error(f"❌ {view.error}")
    if view.showing_demo_data:
        st.info("Showing demo data.")

    selected_id = st.session_state.get(SELECTED_KEY)
    if selected_id:
        patient = _load_selected(view, selected_id)
        if patient:
            with st.container(border=True):
                patient_cards.render_patient_details(patient)
                st.button("Close", key="close_patient_details", on_click=_clear_selection)

    _render_results(view)

    search_widgets.wait_for_debounce(panel)


def _render_results(view: PatientListView) -> None:
    patients = view.filtered_patients
    total = view.total if view.total is not None else len(view.all_patients)

    col1, col2 = st.columns([4, 1])
    with col1:
        st.markdown(f"**{len(patients)}** of **{total}** patients")
    with col2:
        layout = st.radio("View", ["Cards", "Table"], horizontal=True,
                          key="patients_layout", label_visibility="collapsed")

    if layout == "Table":
        st.dataframe(patients_to_dataframe(patients), use_container_width=True, hide_index=True)
    else:
        patient_cards.render_patient_list(patients, on_select=_select_patient, key="patients")
