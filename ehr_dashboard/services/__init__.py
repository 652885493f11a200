"""
Services Module for the EHR Dashboard

This module contains the data access and view-state services for the application.
Services talk to the FHIR API and derive what each page displays.
"""

from .session_manager import SessionManager
from .fhir_client import FhirClient, FhirApiError, handle_api_error
from .patient_service import PatientListView
from .appointment_service import AppointmentListView
from .dashboard_service import DashboardView

# Initialize service instances
session_manager = SessionManager()

__all__ = [
    'session_manager',
    'SessionManager',
    'FhirClient',
    'FhirApiError',
    'handle_api_error',
    'PatientListView',
    'AppointmentListView',
    'DashboardView'
]
