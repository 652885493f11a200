"""
Dashboard Page for the EHR Dashboard

Home page: headline counts, today's schedule and recent activity, loaded
from the patient and appointment feeds side by side.
"""

import asyncio
import logging
from datetime import datetime

import streamlit as st

from ehr_dashboard.components import analytics_widgets
from ehr_dashboard.services import session_manager
from ehr_dashboard.services.dashboard_service import DashboardView

logger = logging.getLogger(__name__)

PAGE = 'dashboard'


def render():
    """Entry point called by main.py"""
    render_dashboard()


def _get_view() -> DashboardView:
    view = session_manager.page_state(PAGE, 'view', lambda: DashboardView(
        session_manager.get_patient_client(),
        session_manager.get_appointment_client()
    ))
    if view.loaded:
        return view

    if session_manager.offline_mode:
        demo = session_manager.demo_data()
        view.use_demo_data(demo['patients'], demo['appointments'])
    else:
        with st.spinner("Loading dashboard..."):
            asyncio.run(view.load())
    return view


def render_dashboard():
    app_config = session_manager.app_config
    physician = app_config.get('physician_name', 'Doctor')

    header, refresh_col = st.columns([5, 1])
    with header:
        st.title("🏠 Dashboard")
        st.markdown(f"Welcome back, {physician}. Here's your overview for "
                    f"{datetime.now().strftime('%A, %B %d, %Y')}.")
    with refresh_col:
        if st.button("🔄 Refresh", key="dashboard_refresh"):
            session_manager.teardown_page(PAGE)
            st.rerun()

    view = _get_view()

    for feed, message in view.errors.items():
        st.error(f"Could not load {feed}: {message}")
    if session_manager.offline_mode:
        st.info("Offline mode: showing demo data.")

    analytics_widgets.render_stats_cards(view.stats())

    st.markdown("---")
    schedule_col, activity_col = st.columns([3, 2])
    with schedule_col:
        st.markdown("#### Today's Schedule")
        analytics_widgets.render_schedule_table(view.todays_schedule())
    with activity_col:
        analytics_widgets.render_recent_activity(
            view.recent_activity(limit=app_config.get('recent_activity_limit', 5))
        )
