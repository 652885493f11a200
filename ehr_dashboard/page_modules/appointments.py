"""
Appointments Page for the EHR Dashboard

Appointment schedule grouped by calendar day, filterable by patient name
and status.
"""

import asyncio
import logging

import streamlit as st

from ehr_dashboard.components import appointment_timeline
from ehr_dashboard.services import session_manager
from ehr_dashboard.services.appointment_service import (
    STATUS_LABELS, AppointmentListView, appointments_to_dataframe
)
from ehr_dashboard.utils.helpers import FILTER_SENTINEL_ALL

logger = logging.getLogger(__name__)

PAGE = 'appointments'
STATUS_FILTER_OPTIONS = [FILTER_SENTINEL_ALL] + list(STATUS_LABELS)


def render():
    """Entry point called by main.py"""
    render_appointments()


def _get_view() -> AppointmentListView:
    view = session_manager.page_state(PAGE, 'view', lambda: AppointmentListView(
        session_manager.get_appointment_client()
    ))
    if view.loaded:
        return view

    if session_manager.offline_mode:
        view.use_demo_data(session_manager.demo_data()['appointments'])
        return view

    with st.spinner("Loading appointments..."):
        asyncio.run(view.load())

    if view.error and not view.loaded and session_manager.get_feature_flag('enable_demo_fallback'):
        logger.warning("Appointment load failed, falling back to demo data")
        view.use_demo_data(session_manager.demo_data()['appointments'])
    return view


def render_appointments():
    header, refresh_col = st.columns([5, 1])
    with header:
        st.title("📅 Appointments")
        st.markdown("Scheduled visits grouped by day")
    with refresh_col:
        if st.button("🔄 Refresh", key="appointments_refresh"):
            session_manager.teardown_page(PAGE)
            st.rerun()

    view = _get_view()

    if view.error:
        st.error(f"❌ {view.error}")
    if view.showing_demo_data:
        st.info("Showing demo data.")

    _render_filters(view)

    selected_id = st.session_state.get(appointment_timeline.SELECTED_KEY)
    selected = next((a for a in view.appointments if a.id == selected_id), None)
    if selected:
        appointment_timeline.render_appointment_details(selected, use_24h=view.use_24h)

    col1, col2 = st.columns([4, 1])
    with col1:
        st.caption(f"{len(view.filtered)} of {len(view.appointments)} appointments")
    with col2:
        layout = st.radio("View", ["Timeline", "Table"], horizontal=True,
                          key="appointments_layout", label_visibility="collapsed")

    if layout == "Table":
        st.dataframe(appointments_to_dataframe(view.filtered, view.use_24h),
                     use_container_width=True, hide_index=True)
    else:
        appointment_timeline.render_timeline(view.grouped(), use_24h=view.use_24h, key="appointments")


def _render_filters(view: AppointmentListView) -> None:
    col1, col2, col3 = st.columns([3, 2, 1])
    with col1:
        name = st.text_input("Patient name", placeholder="Filter by patient name...",
                             key="appointments_name_filter")
    with col2:
        status = st.selectbox(
            "Status", STATUS_FILTER_OPTIONS, key="appointments_status_filter",
            format_func=lambda s: "All statuses" if s == FILTER_SENTINEL_ALL else STATUS_LABELS[s]
        )
    with col3:
        view.use_24h = st.toggle("24h", value=view.use_24h, key="appointments_24h")

    view.set_filters(name=name, status=status)
