"""
Patient Cards Component for the EHR Dashboard

Reusable patient display components: individual patient cards and the
paginated card grid used on the Patients page.
"""

import logging
from typing import Callable, List, Optional

import streamlit as st

from ehr_dashboard.models import Patient
from ehr_dashboard.utils import helpers

logger = logging.getLogger(__name__)


def render_patient_card(patient: Patient, key: str,
                        on_select: Optional[Callable[[Patient], None]] = None) -> None:
    """
    Render an individual patient card with key information

    Args:
        patient: Patient record
        key: Unique key for the component
        on_select: Optional callback when the View button is pressed
    """
    try:
        with st.container(border=True):
            name = patient.display_name
            initials = helpers.get_initials(name) or "?"
            st.markdown(f"**`{initials}` {name}**")

            identifier = patient.preferred_identifier
            if identifier:
                st.caption(f"ID: **{identifier}**")

            status = "🟢 Active" if patient.active else "⚪ Inactive"
            born = helpers.format_date(patient.birth_date, "%B %d, %Y") if patient.birth_date else "N/A"
            st.caption(f"{status} • {patient.gender or 'unknown'} • Born {born}")

            st.text(f"📞 {patient.phone or 'No phone'}")
            st.text(f"✉️ {patient.email or 'No email'}")
            st.text(f"📍 {patient.formatted_address}")

            st.button("View", key=f"view_{key}", on_click=on_select, args=(patient,), disabled=on_select is None)

    except Exception as e:
        logger.error(f"Error rendering patient card: {e}")
        st.error(f"❌ Error rendering patient card for {patient.id}")


def render_patient_list(patients: List[Patient], on_select: Optional[Callable[[Patient], None]] = None,
                        per_row: int = 3, per_page: int = 12, key: str = "patient_list") -> None:
    """
    Render a grid of patient cards with pagination

    Args:
        patients: Patients to display
        on_select: Optional callback when a patient is selected
        per_row: Cards per row
        per_page: Cards per page
        key: Unique key for the component
    """
    if not patients:
        st.info("No patients found.")
        return

    total = len(patients)
    page_patients = patients
    if total > per_page:
        total_pages = (total - 1) // per_page + 1
        page = st.selectbox(
            f"Page (showing {per_page} of {total} patients)",
            range(1, total_pages + 1),
            key=f"{key}_pagination"
        )
        start = (page - 1) * per_page
        page_patients = patients[start:start + per_page]

    for row_start in range(0, len(page_patients), per_row):
        cols = st.columns(per_row)
        for col, patient in zip(cols, page_patients[row_start:row_start + per_row]):
            with col:
                render_patient_card(patient, key=f"{key}_{patient.id or row_start}", on_select=on_select)


def render_patient_details(patient: Patient) -> None:
    """Detail panel for the selected patient"""
    st.subheader(patient.display_name)
    col1, col2 = st.columns(2)
    with col1:
        st.markdown(f"**Identifier:** {patient.preferred_identifier or 'N/A'}")
        st.markdown(f"**Gender:** {patient.gender or 'N/A'}")
        age = helpers.calculate_age(patient.birth_date)
        st.markdown(f"**Birth Date:** {helpers.format_date(patient.birth_date, '%B %d, %Y') if patient.birth_date else 'N/A'}"
                    + (f" ({age} years)" if age is not None else ""))
        st.markdown(f"**Phone:** {helpers.format_phone_number(patient.phone)}")
        st.markdown(f"**Email:** {patient.email or 'N/A'}")
    with col2:
        st.markdown(f"**Address:** {patient.formatted_address}")
        st.markdown(f"**Medical History:** {helpers.join_or_na(patient.medical_history)}")
        st.markdown(f"**Allergies:** {helpers.join_or_na(patient.allergies)}")
