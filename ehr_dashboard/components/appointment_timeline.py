"""
Appointment Timeline Component for the EHR Dashboard

Day-by-day schedule view: appointments grouped by calendar day under
relative labels (Today / Tomorrow / Yesterday), with a detail panel for the
selected appointment.
"""

import logging
from datetime import date
from typing import List, Optional

import streamlit as st

from ehr_dashboard.models import Appointment
from ehr_dashboard.services.appointment_service import (
    ABSOLUTE_DATE_FORMAT, STATUS_COLORS, STATUS_LABELS, DayGroup,
    format_time_range, relative_day_label
)
from ehr_dashboard.utils import helpers

logger = logging.getLogger(__name__)

SELECTED_KEY = 'selected_appointment_id'


def _select(appointment_id: str) -> None:
    st.session_state[SELECTED_KEY] = appointment_id


def _clear_selection() -> None:
    st.session_state.pop(SELECTED_KEY, None)


def status_badge(status: str) -> str:
    return f"{STATUS_COLORS.get(status, '⚪')} {STATUS_LABELS.get(status, status)}"


def render_timeline(groups: List[DayGroup], use_24h: bool = False,
                    today: Optional[date] = None, key: str = "appointments") -> None:
    """
    Render appointments grouped by day

    Args:
        groups: (date key, appointments) pairs, already sorted
        use_24h: 24-hour clock instead of 12-hour
        today: Reference day for relative labels (default: today)
        key: Unique key for the component
    """
    if not groups:
        st.info("No appointments found.")
        return

    try:
        for day_key, appointments in groups:
            label = relative_day_label(day_key, today)
            with st.expander(f"📅 {label} ({len(appointments)} appointments)", expanded=label == "Today"):
                for appointment in appointments:
                    _render_appointment_row(appointment, use_24h, key)

    except Exception as e:
        logger.error(f"Error rendering appointment timeline: {e}")
        st.error("Error displaying appointments")


def _render_appointment_row(appointment: Appointment, use_24h: bool, key: str) -> None:
    col1, col2, col3, col4 = st.columns([2, 3, 2, 1])
    with col1:
        st.text(f"🕐 {format_time_range(appointment, use_24h)}")
    with col2:
        st.markdown(f"**{appointment.patient_name}**")
        if appointment.description:
            st.caption(helpers.truncate_text(appointment.description, 60))
    with col3:
        st.markdown(status_badge(appointment.status))
    with col4:
        st.button("View", key=f"{key}_view_{appointment.id}", on_click=_select, args=(appointment.id,))


def render_appointment_details(appointment: Appointment, use_24h: bool = False) -> None:
    """Detail panel for one appointment"""
    with st.container(border=True):
        header, close_col = st.columns([5, 1])
        with header:
            st.subheader(f"Appointment #{appointment.id}")
        with close_col:
            st.button("Close", key=f"close_{appointment.id}", on_click=_clear_selection)

        when = helpers.format_date(appointment.start, ABSOLUTE_DATE_FORMAT)
        st.markdown(f"**Status:** {status_badge(appointment.status)}")
        st.markdown(f"**When:** {when} {format_time_range(appointment, use_24h)} "
                    f"({appointment.minutes_duration} min)")

        st.markdown("**Patient**")
        gender = f" • {appointment.patient_gender}" if appointment.patient_gender else ""
        st.text(f"{appointment.patient_name}{gender}")
        st.caption(f"Medical History: {helpers.join_or_na(appointment.medical_history)}")
        st.caption(f"Allergies: {helpers.join_or_na(appointment.allergies)}")

        if appointment.provider_name:
            st.markdown("**Provider**")
            specialty = f" - {appointment.provider_specialty}" if appointment.provider_specialty else ""
            st.text(f"{appointment.provider_name}{specialty}")

        if appointment.description:
            st.markdown("**Description**")
            st.text(appointment.description)
