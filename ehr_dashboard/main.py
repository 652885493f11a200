"""
HealthCare EHR Dashboard - Main Application

Streamlit entry point for the clinical dashboard:
- Dashboard home page with headline counts and recent activity
- Patient listing with debounced search
- Appointment schedule grouped by day

Run with `streamlit run ehr_dashboard/main.py` or the `ehr-dashboard` command.
"""

from datetime import datetime

import streamlit as st

from ehr_dashboard.page_modules import appointments, dashboard, patients
from ehr_dashboard.services import session_manager
from ehr_dashboard.utils import config

# Configure the Streamlit page
st.set_page_config(
    page_title="HealthCare EHR",
    page_icon="🏥",
    layout="wide",
    initial_sidebar_state="expanded",
    menu_items={
        'Get Help': None,
        'Report a bug': None,
        'About': "HealthCare EHR - clinical dashboard on a FHIR API"
    }
)

PAGES = {
    'dashboard': ("🏠 Dashboard", 'enable_dashboard', dashboard.render),
    'patients': ("👥 Patients", 'enable_patients', patients.render),
    'appointments': ("📅 Appointments", 'enable_appointments', appointments.render),
}


def initialize_session_state():
    """Initialize session state variables for the application"""
    if 'initialized' not in st.session_state:
        app_config = config.load_app_config()
        session_manager.initialize_services(app_config)

        st.session_state.initialized = True
        st.session_state.current_page = 'dashboard'
        st.session_state.last_refresh = datetime.now()


def render_header():
    """Render the main application header"""
    app_config = session_manager.app_config
    col1, col2 = st.columns([4, 2])

    with col1:
        st.markdown(f"### 🏥 {app_config.get('app_name', 'HealthCare EHR')}")

    with col2:
        st.markdown(f"""
        <div style='text-align: right; padding-top: 10px;'>
            <div style='color: #888; font-size: 14px;'>
                🕐 {datetime.now().strftime('%Y-%m-%d %H:%M')}
            </div>
            <div style='color: #888; font-size: 12px;'>
                {app_config.get('physician_name', '')}
            </div>
        </div>
        """, unsafe_allow_html=True)


def render_sidebar_navigation():
    """Render the sidebar navigation menu"""
    st.sidebar.markdown("## 🧭 Navigation")

    enabled = {
        page: label for page, (label, flag, _) in PAGES.items()
        if session_manager.get_feature_flag(flag)
    }
    if not enabled:
        st.sidebar.warning("All pages are disabled")
        return

    current = st.session_state.get('current_page')
    if current not in enabled:
        current = next(iter(enabled))

    selected = st.sidebar.radio(
        "Select Page",
        options=list(enabled),
        index=list(enabled).index(current),
        format_func=lambda page: enabled[page]
    )

    if selected != current:
        # leaving a page cancels its pending searches and drops its data
        session_manager.teardown_page(current)
    st.session_state.current_page = selected

    st.sidebar.markdown("---")
    if session_manager.offline_mode:
        st.sidebar.info("Offline mode: demo data")
    app_config = session_manager.app_config
    st.sidebar.caption(f"v{app_config.get('app_version', '')} • {app_config.get('environment', '')}")


def render_main_content():
    """Route to the appropriate page based on navigation selection"""
    page = st.session_state.get('current_page')
    if page not in PAGES:
        st.error(f"Unknown page: {page}")
        return

    try:
        PAGES[page][2]()

    except Exception as e:
        st.error(f"Error rendering page '{page}': {str(e)}")
        st.markdown("Please try refreshing the page.")

        if config.is_development():
            with st.expander("Error Details (for debugging)"):
                st.exception(e)


def render_footer():
    """Render the application footer"""
    st.markdown("---")
    st.markdown("""
    <div style='text-align: center; color: #666; font-size: 12px;'>
        <p>HealthCare EHR | Built with <strong>Streamlit</strong></p>
    </div>
    """, unsafe_allow_html=True)


def main():
    """Main application entry point"""
    initialize_session_state()

    render_header()

    with st.container():
        render_sidebar_navigation()
        render_main_content()
        render_footer()


if __name__ == "__main__":
    main()
