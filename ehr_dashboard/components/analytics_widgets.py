"""
Analytics Widgets Component for the EHR Dashboard

Stats cards and the recent-activity feed shown on the home page.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import pandas as pd
import streamlit as st

from ehr_dashboard.models import Appointment
from ehr_dashboard.services.appointment_service import STATUS_LABELS
from ehr_dashboard.utils import helpers

logger = logging.getLogger(__name__)


def render_metric_card(title: str, value: Union[int, float, str],
                       help_text: Optional[str] = None) -> None:
    """
    Render a metric card with title and value

    Args:
        title: Metric title
        value: Primary metric value
        help_text: Optional caption under the value
    """
    try:
        with st.container(border=True):
            st.metric(label=title, value=value)
            if help_text:
                st.caption(help_text)
    except Exception as e:
        logger.error(f"Error rendering metric card: {e}")
        st.error("Error displaying metric")


def render_stats_cards(stats: Dict[str, Any]) -> None:
    col1, col2 = st.columns(2)
    with col1:
        render_metric_card("Total Patients", f"{stats.get('total_patients', 0):,}")
    with col2:
        render_metric_card(
            "Today's Appointments",
            str(stats.get('today_appointments', 0)),
            help_text=f"{stats.get('upcoming_today', 0)} upcoming, {stats.get('completed_today', 0)} completed"
        )


def time_ago(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """'30 minutes ago' style distance between a timestamp and now"""
    now = now or datetime.now(timezone.utc)
    start = timestamp if timestamp.tzinfo else timestamp.replace(tzinfo=timezone.utc)
    minutes = int((now - start).total_seconds() // 60)

    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days != 1 else ''} ago"


def render_recent_activity(appointments: List[Appointment]) -> None:
    st.markdown("#### Recent Activity")
    if not appointments:
        st.info("No recent activity")
        return

    for appointment in appointments:
        initials = helpers.get_initials(appointment.patient_name)
        status = STATUS_LABELS.get(appointment.status, appointment.status)
        col1, col2 = st.columns([4, 1])
        with col1:
            st.markdown(f"**{appointment.description or 'Appointment'}** · {status}")
            st.caption(f"`{initials}` {appointment.patient_name} • {appointment.patient_id or 'N/A'}")
        with col2:
            st.caption(time_ago(appointment.start))


def render_schedule_table(appointments: List[Appointment], use_24h: bool = False) -> None:
    if not appointments:
        st.info("No appointments scheduled for today")
        return

    frame = pd.DataFrame([
        {
            'Time': helpers.format_time(a.start, use_24h),
            'Patient': a.patient_name,
            'Reason': a.description or '',
            'Status': STATUS_LABELS.get(a.status, a.status),
        }
        for a in appointments
    ])
    st.dataframe(frame, use_container_width=True, hide_index=True)
